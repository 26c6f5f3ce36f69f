# media_catalog/sa/repositories/lookup.py
from typing import List, Optional, Type
import logging
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from media_catalog.sa.models import Category, Genre
from media_catalog.models.media import MediaType
from media_catalog.exceptions import ConstraintViolation

logger = logging.getLogger(__name__)


class LookupRepository:
    """Shared persistence for name-keyed reference data (categories, genres)."""

    model: Type = None

    def __init__(self, session: Session):
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Constraint violation while trying to {action}: {e.orig}")
            raise ConstraintViolation(f"Could not {action}: name already in use", e) from e
        except Exception:
            self.session.rollback()
            raise

    def rollback(self) -> None:
        self.session.rollback()

    def create(self, entity):
        self.session.add(entity)
        self._commit(f"create {self.model.__tablename__} '{entity.name}'")
        return entity

    def get_by_id(self, entity_id: int):
        return self.session.get(self.model, entity_id)

    def get_all(self) -> List:
        return self.session.query(self.model).order_by(self.model.name).all()

    def get_active(self) -> List:
        return (
            self.session.query(self.model)
            .filter(self.model.is_active.is_(True))
            .order_by(self.model.name)
            .all()
        )

    def update(self, entity) -> bool:
        """Replace the stored row having entity.id; False if there is none"""
        if entity.id is None or self.session.get(self.model, entity.id) is None:
            return False
        self.session.merge(entity)
        self._commit(f"update {self.model.__tablename__} {entity.id}")
        return True

    def deactivate(self, entity_id: int) -> bool:
        """Flag an entry inactive. Rows are never removed since items may reference them."""
        entity = self.session.get(self.model, entity_id)
        if not entity:
            return False

        entity.is_active = False
        self._commit(f"deactivate {self.model.__tablename__} {entity_id}")
        return True

    def get_by_name(self, name: str):
        """Get an entry by its exact (case-sensitive) name"""
        return self.session.query(self.model).filter(self.model.name == name).first()

    def exists_by_name(self, name: str) -> bool:
        query = self.session.query(self.model).filter(self.model.name == name)
        return self.session.query(query.exists()).scalar()

    def search(self, term: Optional[str]) -> List:
        """Search active entries by name or description.

        A blank term returns every active entry.
        """
        if not term or not term.strip():
            return self.get_active()

        needle = term.strip()
        return (
            self.session.query(self.model)
            .filter(
                self.model.is_active.is_(True),
                or_(
                    self.model.name.icontains(needle, autoescape=True),
                    self.model.description.icontains(needle, autoescape=True)
                )
            )
            .order_by(self.model.name)
            .all()
        )


class CategoryRepository(LookupRepository):
    """Repository for managing Category entities."""
    model = Category


class GenreRepository(LookupRepository):
    """Repository for managing Genre entities."""
    model = Genre

    def get_by_media_type(self, media_type: MediaType) -> List[Genre]:
        """Get active genres usable for a media type (including unrestricted ones)"""
        return (
            self.session.query(Genre)
            .filter(
                Genre.is_active.is_(True),
                or_(
                    Genre.applicable_to_media_type.is_(None),
                    Genre.applicable_to_media_type == media_type
                )
            )
            .order_by(Genre.name)
            .all()
        )
