"""Checkout errors raised by the coordinator itself.

Gateway outcomes (``GatewayRejected``, ``GatewayUnavailable``) are defined
with the gateway port and share the same ``CheckoutError`` root.
"""

from shared.exceptions import CheckoutError


class InvalidRequest(CheckoutError):
    """The request was refused before the gateway was contacted."""

    kind = "invalid_request"
    retryable = False
    status_code = 400


class PersistenceFailure(CheckoutError):
    """The charge succeeded but the order could not be recorded.

    Money has moved. The failure carries everything needed to record the
    order later through ``CheckoutCoordinator.reconcile``.
    """

    kind = "persistence_failure"
    retryable = False

    def __init__(self, transaction, product_ids: list[str], buyer_id: str, cause: Exception | None = None) -> None:
        self.transaction = transaction
        self.product_ids = list(product_ids)
        self.buyer_id = buyer_id
        self.cause = cause
        super().__init__(
            f"Payment {transaction.transaction_id} was captured but the order could not be saved. "
            "It will be reconciled; do not pay again."
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["transactionId"] = self.transaction.transaction_id
        return data
