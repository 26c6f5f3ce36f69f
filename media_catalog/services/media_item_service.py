# media_catalog/services/media_item_service.py

from typing import Dict, Iterable, List, Optional
import logging

from media_catalog.sa.models import MediaItem
from media_catalog.sa.models.base import utcnow
from media_catalog.sa.repositories.media_item import MediaItemRepository
from media_catalog.models.media import MediaType
from media_catalog.models.search import Page, BulkQuantityResult
from media_catalog.exceptions import (
    ValidationError, DuplicateError, NotFoundError, ConstraintViolation
)

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200
AUTHOR_MAX_LENGTH = 100
ISBN_MAX_LENGTH = 20
LABEL_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 1000


def _clean(value: Optional[str]) -> Optional[str]:
    """Strip a free-text field; blank becomes None"""
    if value is None:
        return None
    value = value.strip()
    return value or None


class MediaItemService:
    """Business rules for the catalog.

    The repository stores whatever it is given; every invariant on quantities,
    ISBNs and duplicates is enforced here before a write reaches it.
    """

    def __init__(self, repository: MediaItemRepository):
        self.repository = repository

    # Basic operations

    def create(self, item: MediaItem, acting_user_id: int) -> MediaItem:
        """Validate and add a new item to the catalog.

        All copies start out available.

        Raises:
            ValidationError: If the item breaks a field rule
            DuplicateError: If an active item already has the ISBN or title/author
        """
        logger.info(f"Creating new media item: {item.title!r} by {item.author!r}")

        self._normalize(item)
        item.available_quantity = item.quantity
        self.validate(item)
        self._check_duplicates(item)

        item.is_deleted = False
        item.created_by_user_id = acting_user_id
        item.created_at = utcnow()

        try:
            result = self.repository.create(item)
        except ConstraintViolation as e:
            raise DuplicateError(f"Media item '{item.title}' collides with an existing item") from e
        except Exception:
            logger.exception(f"Error creating media item: {item.title!r}")
            raise

        logger.info(f"Media item created successfully with ID {result.id}")
        return result

    def get_by_id(self, item_id: int, include_deleted: bool = False) -> Optional[MediaItem]:
        logger.debug(f"Retrieving media item with ID {item_id}")
        return self.repository.get_by_id(item_id, include_deleted=include_deleted)

    def get_all(self, include_deleted: bool = False) -> List[MediaItem]:
        return self.repository.get_all(include_deleted=include_deleted)

    def update(self, item: MediaItem, acting_user_id: int) -> bool:
        """Replace an active item's fields.

        Pending changes on the item are discarded if a check fails.

        Raises:
            NotFoundError: If no active item has item.id
            ValidationError: If the new field values break a rule
            DuplicateError: If another active item has the ISBN or title/author
        """
        logger.info(f"Updating media item ID {item.id}: {item.title!r}")

        if item.id is None or self.repository.get_by_id(item.id) is None:
            logger.warning(f"Media item with ID {item.id} not found for update")
            self.repository.rollback()
            raise NotFoundError(f"Media item {item.id} not found")

        try:
            self._normalize(item)
            self.validate(item)
            self._check_duplicates(item, exclude_id=item.id)
        except (ValidationError, DuplicateError):
            self.repository.rollback()
            raise

        item.updated_by_user_id = acting_user_id
        item.updated_at = utcnow()

        try:
            result = self.repository.update(item)
        except ConstraintViolation as e:
            raise DuplicateError(f"Media item '{item.title}' collides with an existing item") from e

        logger.info(f"Media item ID {item.id} updated successfully")
        return result

    def soft_delete(self, item_id: int, acting_user_id: int) -> bool:
        """Move an active item to the deleted state. False if there is no such active item."""
        logger.info(f"Soft deleting media item ID {item_id}")

        if self.repository.get_by_id(item_id) is None:
            logger.warning(f"Media item with ID {item_id} not found for deletion")
            return False

        result = self.repository.soft_delete(item_id, updated_by_user_id=acting_user_id)
        if result:
            logger.info(f"Media item ID {item_id} soft deleted successfully")
        else:
            logger.warning(f"Failed to soft delete media item ID {item_id}")
        return result

    def restore(self, item_id: int, acting_user_id: int) -> bool:
        """Bring a soft-deleted item back.

        Restoring an item that is not deleted is a successful no-op.

        Raises:
            DuplicateError: If an active item took over the ISBN or title/author meanwhile
        """
        logger.info(f"Restoring media item ID {item_id}")

        item = self.repository.get_by_id(item_id, include_deleted=True)
        if item is None:
            logger.warning(f"Media item with ID {item_id} not found for restoration")
            return False

        if not item.is_deleted:
            logger.info(f"Media item ID {item_id} is not deleted, no restoration needed")
            return True

        self._check_duplicates(item, exclude_id=item.id)

        item.restore()
        item.updated_by_user_id = acting_user_id

        try:
            result = self.repository.update(item)
        except ConstraintViolation as e:
            raise DuplicateError(f"Cannot restore media item {item_id}: it collides with an active item") from e

        if result:
            logger.info(f"Media item ID {item_id} restored successfully")
        return result

    # Search and filtering

    def search(self, term: Optional[str]) -> List[MediaItem]:
        logger.debug(f"Searching media items with term: {term!r}")
        return self.repository.search(term)

    def get_by_type(self, media_type: MediaType) -> List[MediaItem]:
        return self.repository.get_by_type(media_type)

    def get_by_category(self, category: str) -> List[MediaItem]:
        return self.repository.get_by_category(category)

    def get_by_genre(self, genre: str) -> List[MediaItem]:
        return self.repository.get_by_genre(genre)

    def get_by_author(self, author: str) -> List[MediaItem]:
        return self.repository.get_by_author(author)

    def get_by_isbn(self, isbn: str) -> Optional[MediaItem]:
        items = self.repository.get_by_isbn(isbn)
        return items[0] if items else None

    def get_available_items(self) -> List[MediaItem]:
        return self.repository.get_available()

    def get_paged(
        self,
        page_number: int,
        page_size: int,
        search_term: Optional[str] = None,
        media_type: Optional[MediaType] = None,
        category: Optional[str] = None,
        genre: Optional[str] = None
    ) -> Page:
        logger.debug(f"Retrieving paged media items: page {page_number}, size {page_size}")
        return self.repository.get_paged(
            page_number, page_size,
            search_term=search_term,
            media_type=media_type,
            category=category,
            genre=genre
        )

    # Quantity management

    def update_quantity(self, item_id: int, new_quantity: int, acting_user_id: int) -> bool:
        """Set the number of owned copies of an active item.

        Borrowed copies stay borrowed: available_quantity moves by the same
        delta, clamped to [0, new_quantity].

        Raises:
            ValidationError: If new_quantity is negative
            NotFoundError: If no active item has item_id
        """
        logger.info(f"Updating quantity for media item ID {item_id} to {new_quantity}")

        if new_quantity < 0:
            raise ValidationError("Quantity cannot be negative")

        item = self.repository.get_by_id(item_id)
        if item is None:
            logger.warning(f"Media item with ID {item_id} not found for quantity update")
            raise NotFoundError(f"Media item {item_id} not found")

        old_quantity = item.quantity
        item.update_quantity(new_quantity)
        item.updated_by_user_id = acting_user_id
        item.updated_at = utcnow()

        result = self.repository.update(item)
        if result:
            logger.info(f"Quantity updated for media item ID {item_id}: {old_quantity} -> {new_quantity}")
        return result

    def adjust_quantity(self, item_id: int, adjustment: int, acting_user_id: int) -> bool:
        """Add (or with a negative adjustment, remove) owned copies"""
        logger.info(f"Adjusting quantity for media item ID {item_id} by {adjustment}")

        item = self.repository.get_by_id(item_id)
        if item is None:
            logger.warning(f"Media item with ID {item_id} not found for quantity adjustment")
            raise NotFoundError(f"Media item {item_id} not found")

        return self.update_quantity(item_id, item.quantity + adjustment, acting_user_id)

    # Availability checks

    def is_available(self, item_id: int, requested_quantity: int = 1) -> bool:
        """True if the item is active, has a copy on the shelf and at least requested_quantity available.

        An item with no available copies is never available, even for requested_quantity=0.
        """
        item = self.repository.get_by_id(item_id)
        return item.can_borrow(requested_quantity) if item else False

    def get_available_quantity(self, item_id: int) -> int:
        item = self.repository.get_by_id(item_id)
        return item.available_quantity if item else 0

    # Statistics

    def total_count(self) -> int:
        return self.repository.count_total()

    def available_count(self) -> int:
        return self.repository.count_available()

    def count_by_type(self) -> Dict[MediaType, int]:
        """Count active items per media type; every type is present, zero-filled"""
        return {media_type: self.repository.count_by_type(media_type) for media_type in MediaType}

    # Validation

    def validate(self, item: MediaItem) -> None:
        """Check field-level rules.

        Raises:
            ValidationError: Describing the first broken rule
        """
        if not item.title or not item.title.strip():
            raise ValidationError("Title is required")
        if len(item.title) > TITLE_MAX_LENGTH:
            raise ValidationError(f"Title cannot exceed {TITLE_MAX_LENGTH} characters")
        if item.author and len(item.author) > AUTHOR_MAX_LENGTH:
            raise ValidationError(f"Author cannot exceed {AUTHOR_MAX_LENGTH} characters")
        if item.isbn and len(item.isbn) > ISBN_MAX_LENGTH:
            raise ValidationError(f"ISBN cannot exceed {ISBN_MAX_LENGTH} characters")
        if item.genre and len(item.genre) > LABEL_MAX_LENGTH:
            raise ValidationError(f"Genre cannot exceed {LABEL_MAX_LENGTH} characters")
        if item.category and len(item.category) > LABEL_MAX_LENGTH:
            raise ValidationError(f"Category cannot exceed {LABEL_MAX_LENGTH} characters")
        if item.description and len(item.description) > DESCRIPTION_MAX_LENGTH:
            raise ValidationError(f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters")

        try:
            media_type = MediaType(item.media_type)
        except ValueError:
            raise ValidationError(f"Unknown media type: {item.media_type!r}")

        if item.quantity is None or item.quantity < 0:
            raise ValidationError("Quantity cannot be negative")
        if item.available_quantity is None or not 0 <= item.available_quantity <= item.quantity:
            raise ValidationError("Available quantity must be between 0 and quantity")

        if media_type.requires_isbn and not item.isbn:
            raise ValidationError(f"ISBN is required for {media_type.display_name} items")

    def is_unique(
        self,
        title: str,
        author: Optional[str],
        isbn: Optional[str] = None,
        exclude_id: Optional[int] = None
    ) -> bool:
        """True if no other active item has this ISBN or this title/author pair"""
        isbn = _clean(isbn)
        if isbn and self.repository.exists_by_isbn(isbn, exclude_id=exclude_id):
            return False
        return not self.repository.exists_by_title_author(title, _clean(author), exclude_id=exclude_id)

    # Bulk operations

    def create_bulk(self, items: Iterable[MediaItem], acting_user_id: int) -> List[MediaItem]:
        """Add several items, all or nothing.

        Every item is validated and checked for duplicates (against the catalog
        and within the batch) before anything is written.
        """
        items = list(items)
        logger.info(f"Creating bulk media items: {len(items)} items")

        seen_isbns = set()
        seen_titles = set()
        now = utcnow()
        for item in items:
            self._normalize(item)
            item.available_quantity = item.quantity
            self.validate(item)
            self._check_duplicates(item)

            if item.isbn:
                if item.isbn in seen_isbns:
                    raise DuplicateError(f"ISBN {item.isbn} appears more than once in the batch")
                seen_isbns.add(item.isbn)
            if (item.title, item.author) in seen_titles:
                raise DuplicateError(f"'{item.title}' by '{item.author}' appears more than once in the batch")
            seen_titles.add((item.title, item.author))

            item.is_deleted = False
            item.created_by_user_id = acting_user_id
            item.created_at = now

        try:
            result = self.repository.create_bulk(items)
        except ConstraintViolation as e:
            raise DuplicateError("Bulk creation collides with existing items") from e
        except Exception:
            logger.exception("Error during bulk creation of media items")
            raise

        logger.info(f"Bulk creation completed: {len(result)} items created")
        return result

    def update_quantities_bulk(self, item_quantities: Dict[int, int], acting_user_id: int) -> BulkQuantityResult:
        """Best-effort batch correction of total quantities.

        Negative quantities are rejected per item and reported in `rejected`;
        unknown or deleted IDs are reported in `skipped`. The remaining updates
        are applied in a single transaction.
        """
        logger.info(f"Bulk updating quantities for {len(item_quantities)} items")

        rejected = [item_id for item_id, quantity in item_quantities.items() if quantity < 0]
        if rejected:
            logger.warning(f"Rejected negative quantities for media item IDs {rejected}")
        valid = {item_id: quantity for item_id, quantity in item_quantities.items() if quantity >= 0}

        try:
            result = self.repository.update_quantities(valid, updated_by_user_id=acting_user_id)
        except Exception:
            logger.exception("Error during bulk quantity update")
            raise

        result.rejected = rejected
        if result.skipped:
            logger.info(f"Skipped unknown or deleted media item IDs {result.skipped}")
        if result:
            logger.info(f"Bulk quantity update completed: {len(result.updated)} items updated")
        else:
            logger.warning("Bulk quantity update changed no items")
        return result

    # Helpers

    def _normalize(self, item: MediaItem) -> None:
        item.title = item.title.strip() if item.title else item.title
        item.author = _clean(item.author)
        item.isbn = _clean(item.isbn)
        item.genre = _clean(item.genre)
        item.category = _clean(item.category)
        if item.media_type is None:
            item.media_type = MediaType.BOOK
        if item.quantity is None:
            item.quantity = 0
        if item.available_quantity is None:
            item.available_quantity = item.quantity

    def _check_duplicates(self, item: MediaItem, exclude_id: Optional[int] = None) -> None:
        if item.isbn and self.repository.exists_by_isbn(item.isbn, exclude_id=exclude_id):
            logger.warning(f"Duplicate ISBN rejected: {item.isbn}")
            raise DuplicateError(f"Media item with ISBN {item.isbn} already exists")

        if self.repository.exists_by_title_author(item.title, item.author, exclude_id=exclude_id):
            logger.warning(f"Duplicate title/author rejected: {item.title!r} by {item.author!r}")
            raise DuplicateError(f"Media item '{item.title}' by '{item.author}' already exists")


class MediaItemAdminService:
    """Administrative operations kept off the regular catalog surface.

    Purging removes the row for good; there is no way back.
    """

    def __init__(self, repository: MediaItemRepository):
        self.repository = repository

    def purge(self, item_id: int, acting_user_id: int) -> bool:
        logger.warning(f"User {acting_user_id} purging media item ID {item_id}")
        result = self.repository.hard_delete(item_id)
        if not result:
            logger.warning(f"Media item with ID {item_id} not found for purge")
        return result
