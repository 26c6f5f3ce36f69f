# media_catalog/sa/models/genre.py
from sqlalchemy import Integer, String, Boolean, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column
from media_catalog.models.media import MediaType
from .base import Base, AuditMixin


class Genre(Base, AuditMixin):
    __tablename__ = 'genre'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # NULL means the genre applies to every media type
    applicable_to_media_type: Mapped[MediaType | None] = mapped_column(
        SAEnum(MediaType, native_enum=False, length=20,
               values_callable=lambda enum: [member.value for member in enum]),
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<Genre id={self.id} name={self.name!r}>"
