"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
This enables swapping between FakeGateway (dev/test) and BraintreeGateway
(production) without changing any ordering or application code.

A charge has exactly one of three outcomes:

- a ``TransactionResult`` with ``success=True``: money moved;
- ``GatewayRejected``: a terminal business outcome (declined card, invalid
  or already used nonce). Never retry with the same nonce;
- ``GatewayUnavailable``: network failure, timeout or a gateway-side error.
  The outcome may be unknown; retry only with a fresh nonce.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal

from shared.exceptions import CheckoutError


@dataclass(frozen=True)
class TransactionResult:
    """Result of a successful charge, mirrored from the gateway."""

    transaction_id: str
    success: bool
    amount: str
    status: str
    raw_payload: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.transaction_id,
            "success": self.success,
            "amount": self.amount,
            "status": self.status,
        }


class GatewayError(CheckoutError):
    """Base class for payment gateway failures."""

    kind = "gateway_error"


class GatewayRejected(GatewayError):
    kind = "gateway_rejected"
    retryable = False

    def __init__(self, reason: str, payload: dict | None = None) -> None:
        self.reason = reason
        self.payload = payload or {}
        super().__init__(reason)


class GatewayUnavailable(GatewayError):
    kind = "gateway_unavailable"
    retryable = True

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Payment gateway unavailable: {reason}. Please retry with a new payment method.")


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    async def issue_client_token(self) -> str:
        """Issue a token the browser uses to collect a payment nonce."""
        ...

    @abstractmethod
    async def charge_total(self, amount: Decimal, nonce: str, settle_immediately: bool = True) -> TransactionResult:
        """Charge ``amount`` against the single-use payment ``nonce``."""
        ...

    async def close(self) -> None:  # noqa: B027
        """Release transport resources held by the adapter."""
