"""Order aggregate: the durable record of a successful checkout.

An Order exists if and only if its embedded payment transaction succeeded.
It is created once, keyed by the gateway's transaction id, and never
mutated afterwards; ``status`` is always ``Placed``.
"""

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean.exceptions import ValidationError
from shared.database import Base
from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column


class OrderStatus(Enum):
    PLACED = "Placed"


@dataclass(frozen=True)
class PaymentTransaction:
    """Local mirror of the gateway transaction embedded in an Order."""

    transaction_id: str
    amount: str
    success: bool
    status: str
    raw_payload: dict = field(default_factory=dict)

    @classmethod
    def from_result(cls, result) -> "PaymentTransaction":
        return cls(
            transaction_id=result.transaction_id,
            amount=result.amount,
            success=result.success,
            status=result.status,
            raw_payload=dict(result.raw_payload),
        )

    def to_dict(self) -> dict:
        return asdict(self)


class Order(Base):
    """Order aggregate root."""

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    # The idempotency key: at most one order per gateway transaction
    transaction_id: Mapped[str] = mapped_column(String(64), unique=True)
    products: Mapped[list] = mapped_column(JSON)
    payment: Mapped[dict] = mapped_column(JSON)
    buyer_id: Mapped[str] = mapped_column(String(64), index=True)
    status: Mapped[str] = mapped_column(String(20), default=OrderStatus.PLACED.value)
    created_at: Mapped[datetime] = mapped_column(DateTime, index=True)

    @classmethod
    def place(cls, transaction: PaymentTransaction, product_ids: list[str], buyer_id: str) -> "Order":
        if not transaction.success:
            raise ValidationError({"payment": ["An order can only be placed for a successful payment"]})
        if not transaction.transaction_id:
            raise ValidationError({"payment": ["Transaction id is required"]})
        if not buyer_id:
            raise ValidationError({"buyer": ["Buyer is required"]})

        return cls(
            id=str(uuid4()),
            transaction_id=transaction.transaction_id,
            products=list(product_ids),
            payment=transaction.to_dict(),
            buyer_id=buyer_id,
            status=OrderStatus.PLACED.value,
            created_at=datetime.now(UTC),
        )

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "products": list(self.products),
            "payment": {key: value for key, value in self.payment.items() if key != "raw_payload"},
            "buyer": self.buyer_id,
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
