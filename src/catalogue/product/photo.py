"""Product photo management: command and handler."""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from catalogue.domain import logger
from catalogue.product.repository import ProductRepository


@dataclass(frozen=True)
class SetProductPhoto:
    product_id: str
    data: bytes
    content_type: str


class SetProductPhotoHandler:
    def __init__(self, session: Session) -> None:
        self.repo = ProductRepository(session)

    def set_photo(self, command: SetProductPhoto) -> None:
        product = self.repo.get(command.product_id)
        product.set_photo(command.data, command.content_type)
        self.repo.commit()
        logger.info("product.photo_set", product_id=product.id, size=len(command.data))
