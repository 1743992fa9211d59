"""Product aggregate root.

The optional photo lives on the same row but is mapped as a deferred column:
ordinary loads never fetch the binary payload, only ``photo_payload()`` does.
"""

from datetime import UTC, datetime
from uuid import uuid4

from protean.exceptions import ValidationError
from shared.database import Base
from slugify import slugify
from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalogue.category.category import Category

MAX_PHOTO_BYTES = 1_000_000


def _validate_details(name, description, price, category_id, quantity, shipping) -> None:
    errors: dict[str, list[str]] = {}

    if not name or not str(name).strip():
        errors["name"] = ["Name is required"]
    elif len(name) > 255:
        errors["name"] = ["Name must be at most 255 characters"]
    if not description:
        errors["description"] = ["Description is required"]
    if price is None:
        errors["price"] = ["Price is required"]
    elif price < 0:
        errors["price"] = ["Price must not be negative"]
    if not category_id:
        errors["category"] = ["Category is required"]
    if quantity is None:
        errors["quantity"] = ["Quantity is required"]
    elif quantity < 0:
        errors["quantity"] = ["Quantity must not be negative"]
    if shipping is None:
        errors["shipping"] = ["Shipping is required"]

    if errors:
        raise ValidationError(errors)


class Product(Base):
    """Product aggregate root."""

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    # Unique at the storage layer: the constraint, not a pre-check, decides conflicts
    name: Mapped[str] = mapped_column(String(255), unique=True)
    slug: Mapped[str] = mapped_column(String(300), index=True)
    description: Mapped[str] = mapped_column(Text)
    price: Mapped[float] = mapped_column(Float, index=True)
    category_id: Mapped[str] = mapped_column(ForeignKey("categories.id"), index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    shipping: Mapped[bool] = mapped_column(Boolean, default=False)
    photo_data: Mapped[bytes | None] = mapped_column(LargeBinary, deferred=True)
    photo_content_type: Mapped[str | None] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime)

    category: Mapped[Category] = relationship()

    @classmethod
    def create(
        cls,
        name,
        description,
        price,
        category_id,
        quantity,
        shipping=False,
        created_at=None,
    ):
        _validate_details(name, description, price, category_id, quantity, shipping)

        now = created_at or datetime.now(UTC)
        return cls(
            id=str(uuid4()),
            name=name.strip(),
            slug=slugify(name),
            description=description,
            price=float(price),
            category_id=category_id,
            quantity=int(quantity),
            shipping=bool(shipping),
            created_at=now,
            updated_at=now,
        )

    def update_details(self, name, description, price, category_id, quantity, shipping):
        _validate_details(name, description, price, category_id, quantity, shipping)

        self.name = name.strip()
        self.slug = slugify(name)
        self.description = description
        self.price = float(price)
        self.category_id = category_id
        self.quantity = int(quantity)
        self.shipping = bool(shipping)
        self.updated_at = datetime.now(UTC)

    def set_photo(self, data: bytes, content_type: str) -> None:
        if not data:
            raise ValidationError({"photo": ["Photo must not be empty"]})
        if len(data) > MAX_PHOTO_BYTES:
            raise ValidationError({"photo": ["Photo provided should be less than 1MB"]})
        if not content_type:
            raise ValidationError({"photo": ["Photo content type is required"]})

        self.photo_data = data
        self.photo_content_type = content_type
        self.updated_at = datetime.now(UTC)

    def photo_payload(self) -> tuple[bytes, str] | None:
        if self.photo_content_type is None or self.photo_data is None:
            return None
        return self.photo_data, self.photo_content_type

    def to_dict(self, include_category: bool = False) -> dict:
        """Serialize for API responses. The photo payload is never included."""
        data = {
            "_id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "price": self.price,
            "category": self.category_id,
            "quantity": self.quantity,
            "shipping": self.shipping,
            "hasPhoto": self.photo_content_type is not None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_category:
            data["category"] = self.category.to_dict() if self.category else None
        return data
