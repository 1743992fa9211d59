"""Product creation: command and handler."""

from dataclasses import dataclass

from protean.exceptions import ValidationError
from sqlalchemy.orm import Session

from catalogue.domain import logger
from catalogue.product.product import Product
from catalogue.product.repository import ProductRepository


@dataclass(frozen=True)
class CreateProduct:
    name: str
    description: str
    price: float
    category_id: str
    quantity: int
    shipping: bool = False


class CreateProductHandler:
    def __init__(self, session: Session) -> None:
        self.repo = ProductRepository(session)

    def create_product(self, command: CreateProduct) -> str:
        product = Product.create(
            name=command.name,
            description=command.description,
            price=command.price,
            category_id=command.category_id,
            quantity=command.quantity,
            shipping=command.shipping,
        )
        if not self.repo.category_exists(command.category_id):
            raise ValidationError({"category": [f"Unknown category `{command.category_id}`"]})

        self.repo.add(product)
        self.repo.commit()

        logger.info("product.created", product_id=product.id, slug=product.slug)
        return product.id
