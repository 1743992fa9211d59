"""Repository for the Product aggregate: persistence plus the catalog read queries.

Every read returns plain dicts built by ``Product.to_dict()``, so the photo
payload never leaves this module through a listing. All listings share one
ordering (newest first, id as tie-breaker) so pages never overlap or skip.
"""

from collections.abc import Iterable, Sequence

from protean.exceptions import ObjectNotFoundError, ValidationError
from shared.exceptions import ConflictError
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, undefer

from catalogue.category.category import Category
from catalogue.product.product import Product

PER_PAGE = 6
RECENT_LIMIT = 12
RELATED_LIMIT = 3

_NEWEST_FIRST = (Product.created_at.desc(), Product.id.desc())


class ProductRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    # -------------------------------------------------------------------
    # Aggregate access (write path)
    # -------------------------------------------------------------------
    def add(self, product: Product) -> None:
        self.session.add(product)

    def get(self, product_id: str) -> Product:
        product = self.session.get(Product, product_id)
        if product is None:
            raise ObjectNotFoundError({"_entity": f"Product `{product_id}` not found"})
        return product

    def remove(self, product: Product) -> None:
        self.session.delete(product)

    def commit(self) -> None:
        """Commit pending writes, turning a name collision into ``ConflictError``."""
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError({"name": ["A product with this name already exists"]}) from exc

    def category_exists(self, category_id: str) -> bool:
        return self.session.get(Category, category_id) is not None

    # -------------------------------------------------------------------
    # Catalog queries
    # -------------------------------------------------------------------
    def list_recent(self, limit: int = RECENT_LIMIT) -> list[dict]:
        stmt = select(Product).options(joinedload(Product.category)).order_by(*_NEWEST_FIRST).limit(limit)
        return [p.to_dict(include_category=True) for p in self.session.scalars(stmt)]

    def get_by_slug(self, slug: str) -> dict:
        stmt = (
            select(Product)
            .options(joinedload(Product.category))
            .where(Product.slug == slug)
            .order_by(Product.created_at)
            .limit(1)
        )
        product = self.session.scalars(stmt).first()
        if product is None:
            raise ObjectNotFoundError({"_entity": f"Product with slug `{slug}` not found"})
        return product.to_dict(include_category=True)

    def get_photo(self, product_id: str) -> tuple[bytes, str]:
        stmt = select(Product).options(undefer(Product.photo_data)).where(Product.id == product_id)
        product = self.session.scalars(stmt).first()
        payload = product.photo_payload() if product is not None else None
        if payload is None:
            raise ObjectNotFoundError({"_entity": "Photo not found"})
        return payload

    def filter(
        self,
        category_ids: Iterable[str] | None = None,
        price_range: Sequence[float] | None = None,
    ) -> list[dict]:
        """Products matching every supplied predicate.

        An empty category set or a missing price range constrains nothing.
        The range is inclusive and only applies when it has both bounds.
        """
        stmt = select(Product).order_by(*_NEWEST_FIRST)

        category_ids = list(category_ids or [])
        if category_ids:
            stmt = stmt.where(Product.category_id.in_(category_ids))

        if price_range is not None and len(price_range) == 2:
            low, high = price_range
            stmt = stmt.where(Product.price >= low, Product.price <= high)

        return [p.to_dict() for p in self.session.scalars(stmt)]

    def paginate(self, page: int, per_page: int = PER_PAGE) -> list[dict]:
        if page < 1:
            raise ValidationError({"page": ["Page numbers start at 1"]})

        stmt = select(Product).order_by(*_NEWEST_FIRST).offset((page - 1) * per_page).limit(per_page)
        return [p.to_dict() for p in self.session.scalars(stmt)]

    def search(self, keyword: str) -> list[dict]:
        """Case-insensitive literal substring match on name or description."""
        if not keyword or not keyword.strip():
            raise ValidationError({"keyword": ["Keyword is required"]})

        stmt = (
            select(Product)
            .where(
                or_(
                    Product.name.icontains(keyword, autoescape=True),
                    Product.description.icontains(keyword, autoescape=True),
                )
            )
            .order_by(*_NEWEST_FIRST)
        )
        return [p.to_dict() for p in self.session.scalars(stmt)]

    def related(self, category_id: str, exclude_product_id: str, limit: int = RELATED_LIMIT) -> list[dict]:
        stmt = (
            select(Product)
            .options(joinedload(Product.category))
            .where(Product.category_id == category_id, Product.id != exclude_product_id)
            .order_by(*_NEWEST_FIRST)
            .limit(limit)
        )
        return [p.to_dict(include_category=True) for p in self.session.scalars(stmt)]

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(Product)) or 0

    def by_category_slug(self, slug: str) -> dict:
        category = self.session.scalars(select(Category).where(Category.slug == slug).limit(1)).first()
        if category is None:
            raise ObjectNotFoundError({"_entity": f"Category with slug `{slug}` not found"})

        stmt = (
            select(Product)
            .options(joinedload(Product.category))
            .where(Product.category_id == category.id)
            .order_by(*_NEWEST_FIRST)
        )
        return {
            "category": category.to_dict(),
            "products": [p.to_dict(include_category=True) for p in self.session.scalars(stmt)],
        }
