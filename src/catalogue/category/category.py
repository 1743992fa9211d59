"""Category aggregate root for product categorization."""

from datetime import UTC, datetime
from uuid import uuid4

from protean.exceptions import ValidationError
from shared.database import Base
from slugify import slugify
from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column


class Category(Base):
    """A flat grouping of products. Immutable once products reference it."""

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    slug: Mapped[str] = mapped_column(String(120), unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime)

    @classmethod
    def create(cls, name):
        if not name or not name.strip():
            raise ValidationError({"name": ["Name is required"]})
        if len(name) > 100:
            raise ValidationError({"name": ["Name must be at most 100 characters"]})

        return cls(
            id=str(uuid4()),
            name=name.strip(),
            slug=slugify(name),
            created_at=datetime.now(UTC),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "slug": self.slug}
