# media_catalog/sa/repositories/media_item.py
from typing import Optional, List, Dict, Iterable
from datetime import datetime
import logging
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, Query
from media_catalog.sa.models import MediaItem
from media_catalog.sa.models.base import utcnow
from media_catalog.models.media import MediaType
from media_catalog.models.search import Page, BulkQuantityResult
from media_catalog.exceptions import ConstraintViolation, ValidationError

logger = logging.getLogger(__name__)


class MediaItemRepository:
    """Persistence for catalog items.

    Holds no business rules: callers are responsible for handing over items
    that already satisfy the catalog invariants. Uniqueness violations detected
    by the database surface as ConstraintViolation.
    """

    def __init__(self, session: Session):
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def _active(self) -> Query:
        return self.session.query(MediaItem).filter(MediaItem.is_deleted.is_(False))

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Constraint violation while trying to {action}: {e.orig}")
            raise ConstraintViolation(f"Could not {action}: uniqueness constraint violated", e) from e
        except Exception:
            self.session.rollback()
            raise

    def rollback(self) -> None:
        """Discard pending, uncommitted changes held by the session"""
        self.session.rollback()

    # Basic CRUD

    def create(self, item: MediaItem) -> MediaItem:
        """Persist a new item and return it with its assigned ID"""
        self.session.add(item)
        self._commit(f"create media item '{item.title}'")
        return item

    def get_by_id(self, item_id: int, include_deleted: bool = False) -> Optional[MediaItem]:
        """Get an item by its ID.

        Args:
            item_id: The ID of the item to retrieve
            include_deleted: Also return soft-deleted items

        Returns:
            The MediaItem if found, None otherwise
        """
        query = self.session.query(MediaItem) if include_deleted else self._active()
        return query.filter(MediaItem.id == item_id).first()

    def get_all(self, include_deleted: bool = False) -> List[MediaItem]:
        """Get all items ordered by title"""
        query = self.session.query(MediaItem) if include_deleted else self._active()
        return query.order_by(MediaItem.title).all()

    def update(self, item: MediaItem) -> bool:
        """Replace the stored row having item.id with the state of item.

        Returns:
            True if a row was written, False if no row has that ID
        """
        if item.id is None or self.session.get(MediaItem, item.id) is None:
            return False
        self.session.merge(item)
        self._commit(f"update media item {item.id}")
        return True

    def soft_delete(self, item_id: int, updated_by_user_id: Optional[int] = None) -> bool:
        """Mark an item as deleted while keeping its row.

        Returns:
            True if the item exists, False otherwise
        """
        item = self.session.get(MediaItem, item_id)
        if not item:
            return False

        item.mark_as_deleted()
        if updated_by_user_id is not None:
            item.updated_by_user_id = updated_by_user_id
        self._commit(f"delete media item {item_id}")
        return True

    def hard_delete(self, item_id: int) -> bool:
        """Remove an item's row permanently"""
        item = self.session.get(MediaItem, item_id)
        if not item:
            return False

        self.session.delete(item)
        self._commit(f"purge media item {item_id}")
        return True

    # Search and filtering

    def search(self, term: Optional[str]) -> List[MediaItem]:
        """Case-insensitive substring search over title, author, ISBN and description.

        A blank term returns every non-deleted item.
        """
        if not term or not term.strip():
            return self.get_all()

        needle = term.strip()
        return (
            self._active()
            .filter(or_(
                MediaItem.title.icontains(needle, autoescape=True),
                MediaItem.author.icontains(needle, autoescape=True),
                MediaItem.isbn.icontains(needle, autoescape=True),
                MediaItem.description.icontains(needle, autoescape=True)
            ))
            .order_by(MediaItem.title)
            .all()
        )

    def get_by_type(self, media_type: MediaType) -> List[MediaItem]:
        return self._active().filter(MediaItem.media_type == media_type).order_by(MediaItem.title).all()

    def get_by_category(self, category: str) -> List[MediaItem]:
        return self._active().filter(MediaItem.category == category).order_by(MediaItem.title).all()

    def get_by_genre(self, genre: str) -> List[MediaItem]:
        return self._active().filter(MediaItem.genre == genre).order_by(MediaItem.title).all()

    def get_by_author(self, author: str) -> List[MediaItem]:
        return self._active().filter(MediaItem.author == author).order_by(MediaItem.title).all()

    def get_by_isbn(self, isbn: str) -> List[MediaItem]:
        return self._active().filter(MediaItem.isbn == isbn).all()

    def get_available(self) -> List[MediaItem]:
        """Get non-deleted items with at least one copy on the shelf"""
        return self._active().filter(MediaItem.available_quantity > 0).order_by(MediaItem.title).all()

    def get_unavailable(self) -> List[MediaItem]:
        """Get non-deleted items with every copy out"""
        return self._active().filter(MediaItem.available_quantity <= 0).order_by(MediaItem.title).all()

    def get_by_date_range(self, start_date: datetime, end_date: datetime) -> List[MediaItem]:
        """Get items published between start_date and end_date, inclusive"""
        return (
            self._active()
            .filter(
                MediaItem.publication_date.isnot(None),
                MediaItem.publication_date >= start_date,
                MediaItem.publication_date <= end_date
            )
            .order_by(MediaItem.publication_date)
            .all()
        )

    def get_paged(
        self,
        page_number: int,
        page_size: int,
        search_term: Optional[str] = None,
        media_type: Optional[MediaType] = None,
        category: Optional[str] = None,
        genre: Optional[str] = None,
        include_deleted: bool = False
    ) -> Page:
        """Get one page of filtered items ordered by title.

        Args:
            page_number: 1-based page number
            page_size: Number of items per page
            search_term: Case-insensitive substring matched against title, author and ISBN
            media_type: Only items of this type
            category: Only items with this exact category
            genre: Only items with this exact genre
            include_deleted: Also include soft-deleted items

        Returns:
            Page of (items, total_count) where total_count is the size of the
            filtered set before slicing
        """
        if page_number < 1:
            raise ValidationError(f"Page number must be at least 1, got {page_number}")
        if page_size < 1:
            raise ValidationError(f"Page size must be positive, got {page_size}")

        query = self.session.query(MediaItem) if include_deleted else self._active()

        if search_term and search_term.strip():
            needle = search_term.strip()
            query = query.filter(or_(
                MediaItem.title.icontains(needle, autoescape=True),
                MediaItem.author.icontains(needle, autoescape=True),
                MediaItem.isbn.icontains(needle, autoescape=True)
            ))

        if media_type is not None:
            query = query.filter(MediaItem.media_type == media_type)

        if category and category.strip():
            query = query.filter(MediaItem.category == category)

        if genre and genre.strip():
            query = query.filter(MediaItem.genre == genre)

        total_count = query.count()
        items = (
            query.order_by(MediaItem.title, MediaItem.id)
            .offset((page_number - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return Page(items, total_count)

    # Statistics and counts

    def count_total(self) -> int:
        return self._active().count()

    def count_available(self) -> int:
        return self._active().filter(MediaItem.available_quantity > 0).count()

    def count_by_type(self, media_type: MediaType) -> int:
        return self._active().filter(MediaItem.media_type == media_type).count()

    # Existence checks

    def exists_by_isbn(self, isbn: str, exclude_id: Optional[int] = None) -> bool:
        """Check whether a non-deleted item other than exclude_id carries this ISBN"""
        query = self._active().filter(MediaItem.isbn == isbn)
        if exclude_id is not None:
            query = query.filter(MediaItem.id != exclude_id)
        return self.session.query(query.exists()).scalar()

    def exists_by_title_author(self, title: str, author: Optional[str], exclude_id: Optional[int] = None) -> bool:
        """Check whether a non-deleted item other than exclude_id has this title and author.

        A None author only matches items without an author.
        """
        query = self._active().filter(MediaItem.title == title)
        if author is None:
            query = query.filter(MediaItem.author.is_(None))
        else:
            query = query.filter(MediaItem.author == author)
        if exclude_id is not None:
            query = query.filter(MediaItem.id != exclude_id)
        return self.session.query(query.exists()).scalar()

    # Bulk operations

    def create_bulk(self, items: Iterable[MediaItem]) -> List[MediaItem]:
        """Persist several items in a single transaction"""
        items = list(items)
        self.session.add_all(items)
        self._commit(f"create {len(items)} media items")
        return items

    def update_quantities(
        self,
        item_quantities: Dict[int, int],
        updated_by_user_id: Optional[int] = None
    ) -> BulkQuantityResult:
        """Apply new total quantities to several items in one transaction.

        Unknown and soft-deleted IDs are skipped and reported. Any failure rolls
        the whole batch back, so no item is left with a changed quantity but an
        unbalanced available quantity.
        """
        result = BulkQuantityResult()
        now = utcnow()
        try:
            for item_id, new_quantity in item_quantities.items():
                item = self.session.get(MediaItem, item_id)
                if item is None or item.is_deleted:
                    result.skipped.append(item_id)
                    continue

                item.update_quantity(new_quantity)
                item.updated_at = now
                if updated_by_user_id is not None:
                    item.updated_by_user_id = updated_by_user_id
                result.updated.append(item_id)
        except Exception:
            self.session.rollback()
            raise

        self._commit(f"update quantities of {len(result.updated)} media items")
        return result
