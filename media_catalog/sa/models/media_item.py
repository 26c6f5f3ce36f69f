# media_catalog/sa/models/media_item.py
from datetime import datetime
from sqlalchemy import String, Integer, Boolean, DateTime, Enum as SAEnum, Index, text
from sqlalchemy.orm import Mapped, mapped_column
from media_catalog.models.media import MediaType, LifecycleState
from media_catalog.exceptions import ValidationError
from .base import Base, AuditMixin, utcnow


class MediaItem(Base, AuditMixin):
    __tablename__ = 'media_item'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    author: Mapped[str | None] = mapped_column(String(100), nullable=True)
    isbn: Mapped[str | None] = mapped_column(String(20), nullable=True)
    media_type: Mapped[MediaType] = mapped_column(
        SAEnum(MediaType, native_enum=False, length=20,
               values_callable=lambda enum: [member.value for member in enum]),
        nullable=False,
        default=MediaType.BOOK
    )
    genre: Mapped[str | None] = mapped_column(String(50), nullable=True)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    publication_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    available_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_by_user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        # Uniqueness among non-deleted rows; soft-deleted rows free their ISBN and title/author
        Index('uix_media_item_isbn_active', 'isbn', unique=True,
              sqlite_where=text('is_deleted = 0 AND isbn IS NOT NULL'),
              postgresql_where=text('NOT is_deleted AND isbn IS NOT NULL')),
        Index('uix_media_item_title_author_active', 'title', 'author', unique=True,
              sqlite_where=text('is_deleted = 0'),
              postgresql_where=text('NOT is_deleted')),

        # Filter indexes
        Index('idx_media_item_type', 'media_type'),
        Index('idx_media_item_category', 'category'),
        Index('idx_media_item_genre', 'genre'),
        Index('idx_media_item_is_deleted', 'is_deleted'),
    )

    def __repr__(self) -> str:
        return f"<MediaItem id={self.id} title={self.title!r} qty={self.available_quantity}/{self.quantity}>"

    @property
    def is_available(self) -> bool:
        return (self.available_quantity or 0) > 0 and not self.is_deleted

    @property
    def borrowed_quantity(self) -> int:
        return (self.quantity or 0) - (self.available_quantity or 0)

    @property
    def lifecycle_state(self) -> LifecycleState:
        return LifecycleState.DELETED if self.is_deleted else LifecycleState.ACTIVE

    def update_quantity(self, new_quantity: int) -> None:
        """Change the number of owned copies, keeping borrowed copies borrowed.

        The borrowed count (quantity - available_quantity) is preserved where
        possible; available_quantity never drops below 0 nor exceeds the new total.
        """
        if new_quantity < 0:
            raise ValidationError("Quantity cannot be negative")

        difference = new_quantity - (self.quantity or 0)
        self.quantity = new_quantity
        self.available_quantity = max(0, min((self.available_quantity or 0) + difference, new_quantity))

    def can_borrow(self, requested_quantity: int = 1) -> bool:
        return self.is_available and self.available_quantity >= requested_quantity

    def mark_as_deleted(self) -> None:
        self.is_deleted = True
        self.updated_at = utcnow()

    def restore(self) -> None:
        self.is_deleted = False
        self.updated_at = utcnow()
