"""Category management: commands and handlers."""

from dataclasses import dataclass

from shared.exceptions import ConflictError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalogue.category.category import Category
from catalogue.domain import logger


@dataclass(frozen=True)
class CreateCategory:
    name: str


class ManageCategoryHandler:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create_category(self, command: CreateCategory) -> str:
        category = Category.create(name=command.name)
        self.session.add(category)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError({"name": ["A category with this name or slug already exists"]}) from exc

        logger.info("category.created", category_id=category.id, slug=category.slug)
        return category.id
