from datetime import UTC, datetime, timedelta

import pytest

BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture()
def category(session):
    from catalogue.category.category import Category

    category = Category.create(name="Apparel")
    session.add(category)
    session.commit()
    return category


@pytest.fixture()
def other_category(session):
    from catalogue.category.category import Category

    category = Category.create(name="Home & Kitchen")
    session.add(category)
    session.commit()
    return category


@pytest.fixture()
def make_product(session, category):
    """Persist a product; ``minutes`` offsets ``created_at`` so ordering is deterministic."""
    from catalogue.product.product import Product

    def _make(name, price=10.0, minutes=0, category_id=None, description=None, **overrides):
        product = Product.create(
            name=name,
            description=description or f"Description of {name}",
            price=price,
            category_id=category_id or category.id,
            quantity=overrides.pop("quantity", 5),
            shipping=overrides.pop("shipping", False),
            created_at=BASE_TIME + timedelta(minutes=minutes),
        )
        session.add(product)
        session.commit()
        return product

    return _make
