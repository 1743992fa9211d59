"""Product details management: command and handler."""

from dataclasses import dataclass

from protean.exceptions import ValidationError
from sqlalchemy.orm import Session

from catalogue.domain import logger
from catalogue.product.repository import ProductRepository


@dataclass(frozen=True)
class UpdateProduct:
    product_id: str
    name: str
    description: str
    price: float
    category_id: str
    quantity: int
    shipping: bool = False


class UpdateProductHandler:
    def __init__(self, session: Session) -> None:
        self.repo = ProductRepository(session)

    def update_product(self, command: UpdateProduct) -> None:
        product = self.repo.get(command.product_id)
        if command.category_id != product.category_id and not self.repo.category_exists(command.category_id):
            raise ValidationError({"category": [f"Unknown category `{command.category_id}`"]})

        product.update_details(
            name=command.name,
            description=command.description,
            price=command.price,
            category_id=command.category_id,
            quantity=command.quantity,
            shipping=command.shipping,
        )
        self.repo.commit()

        logger.info("product.updated", product_id=product.id, slug=product.slug)
