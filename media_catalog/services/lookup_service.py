# media_catalog/services/lookup_service.py

from typing import List, Optional
import logging

from media_catalog.sa.models import Category, Genre
from media_catalog.sa.models.base import utcnow
from media_catalog.sa.repositories.lookup import LookupRepository, CategoryRepository, GenreRepository
from media_catalog.models.media import MediaType
from media_catalog.exceptions import ValidationError, DuplicateError, NotFoundError, ConstraintViolation

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 200


class LookupService:
    """Name-unique reference data management.

    Names are compared exactly (case-sensitive), matching the unique index on
    the name column. Deleting only deactivates an entry.
    """

    label = "Lookup"

    def __init__(self, repository: LookupRepository):
        self.repository = repository

    def create(self, entity, acting_user_id: int):
        """Add a new entry.

        Raises:
            ValidationError: If the name is blank or a field is too long
            DuplicateError: If the name is already taken
        """
        logger.info(f"Creating new {self.label.lower()}: {entity.name!r}")

        self.validate(entity)
        if self.repository.exists_by_name(entity.name):
            raise DuplicateError(f"{self.label} '{entity.name}' already exists")

        entity.created_by_user_id = acting_user_id
        entity.created_at = utcnow()
        if entity.is_active is None:
            entity.is_active = True

        try:
            result = self.repository.create(entity)
        except ConstraintViolation as e:
            raise DuplicateError(f"{self.label} '{entity.name}' already exists") from e

        logger.info(f"{self.label} created successfully with ID {result.id}")
        return result

    def get_by_id(self, entity_id: int):
        return self.repository.get_by_id(entity_id)

    def get_all(self) -> List:
        return self.repository.get_all()

    def get_active(self) -> List:
        return self.repository.get_active()

    def get_by_name(self, name: str):
        return self.repository.get_by_name(name)

    def update(self, entity) -> bool:
        """Replace an entry's fields.

        Raises:
            NotFoundError: If no entry has entity.id
            ValidationError: If the new values break a field rule
            DuplicateError: If another entry already uses the name
        """
        logger.info(f"Updating {self.label.lower()} ID {entity.id}: {entity.name!r}")

        if entity.id is None or self.repository.get_by_id(entity.id) is None:
            logger.warning(f"{self.label} with ID {entity.id} not found for update")
            raise NotFoundError(f"{self.label} {entity.id} not found")

        try:
            self.validate(entity)
            if not self.is_name_unique(entity.name, exclude_id=entity.id):
                raise DuplicateError(f"{self.label} name '{entity.name}' already exists")
        except (ValidationError, DuplicateError):
            self.repository.rollback()
            raise

        try:
            result = self.repository.update(entity)
        except ConstraintViolation as e:
            raise DuplicateError(f"{self.label} name '{entity.name}' already exists") from e

        logger.info(f"{self.label} ID {entity.id} updated successfully")
        return result

    def delete(self, entity_id: int) -> bool:
        """Deactivate an entry. False if it does not exist."""
        logger.info(f"Deactivating {self.label.lower()} ID {entity_id}")

        result = self.repository.deactivate(entity_id)
        if result:
            logger.info(f"{self.label} ID {entity_id} deactivated successfully")
        else:
            logger.warning(f"Failed to deactivate {self.label.lower()} ID {entity_id}")
        return result

    def is_name_unique(self, name: str, exclude_id: Optional[int] = None) -> bool:
        existing = self.repository.get_by_name(name)
        return existing is None or (exclude_id is not None and existing.id == exclude_id)

    def search(self, term: Optional[str]) -> List:
        return self.repository.search(term)

    def validate(self, entity) -> None:
        entity.name = entity.name.strip() if entity.name else entity.name
        if not entity.name:
            raise ValidationError(f"{self.label} name is required")
        if len(entity.name) > NAME_MAX_LENGTH:
            raise ValidationError(f"{self.label} name cannot exceed {NAME_MAX_LENGTH} characters")
        if entity.description and len(entity.description) > DESCRIPTION_MAX_LENGTH:
            raise ValidationError(f"{self.label} description cannot exceed {DESCRIPTION_MAX_LENGTH} characters")


class CategoryService(LookupService):
    label = "Category"

    def __init__(self, repository: CategoryRepository):
        super().__init__(repository)

    def create(self, entity: Category, acting_user_id: int) -> Category:
        return super().create(entity, acting_user_id)


class GenreService(LookupService):
    label = "Genre"

    def __init__(self, repository: GenreRepository):
        super().__init__(repository)

    def create(self, entity: Genre, acting_user_id: int) -> Genre:
        return super().create(entity, acting_user_id)

    def get_by_media_type(self, media_type: MediaType) -> List[Genre]:
        """Active genres usable for media_type, including unrestricted ones"""
        return self.repository.get_by_media_type(media_type)
