"""Product removal: command and handler."""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from catalogue.domain import logger
from catalogue.product.repository import ProductRepository


@dataclass(frozen=True)
class DeleteProduct:
    product_id: str


class DeleteProductHandler:
    def __init__(self, session: Session) -> None:
        self.repo = ProductRepository(session)

    def delete_product(self, command: DeleteProduct) -> None:
        product = self.repo.get(command.product_id)
        self.repo.remove(product)
        self.repo.commit()

        logger.info("product.deleted", product_id=command.product_id)
