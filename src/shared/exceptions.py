"""Exception hierarchy shared by all bounded contexts.

Field validation and missing records use protean's ``ValidationError`` and
``ObjectNotFoundError``. The errors below cover what protean does not:

- ``ConflictError``: a write collided with a storage-level uniqueness
  constraint. Messages use the ``{field: [message, ...]}`` shape.
- ``CheckoutError``, the root of the order-commit protocol errors. Every
  subclass carries a stable ``kind`` and a ``retryable`` flag so the HTTP
  layer can tell "retry safe" from "do not retry" from "money may have moved"
  without inspecting messages.
"""


class ConflictError(Exception):
    """A write collided with a storage-level uniqueness constraint."""

    def __init__(self, messages: dict[str, list[str]]) -> None:
        self.messages = messages
        super().__init__(messages)


class ConfigurationError(Exception):
    """Startup configuration is missing or inconsistent."""


class CheckoutError(Exception):
    """Root of the order-commit protocol errors."""

    kind = "checkout_error"
    retryable = False
    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "retryable": self.retryable}
