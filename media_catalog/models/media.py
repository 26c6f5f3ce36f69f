# media_catalog/models/media.py

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from enum import Enum


class MediaType(str, Enum):
    BOOK = "Book"
    MAGAZINE = "Magazine"
    DVD = "DVD"
    AUDIO_BOOK = "AudioBook"
    EBOOK = "EBook"
    BLU_RAY = "BluRay"
    CD = "CD"
    JOURNAL = "Journal"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self, self.value)

    @property
    def requires_isbn(self) -> bool:
        return self in (MediaType.BOOK, MediaType.EBOOK)

    @property
    def is_digital(self) -> bool:
        return self in (MediaType.EBOOK, MediaType.AUDIO_BOOK)

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["MediaType"]:
        """Resolve a user supplied media type.

        Accepts the value ("AudioBook"), the member name ("AUDIO_BOOK") or the
        1-based ordinal ("4"), all case-insensitive. Returns None for anything
        unrecognised.
        """
        if value is None:
            return None
        text = value.strip()
        if not text:
            return None
        if text.isdigit():
            ordinal = int(text)
            members = list(cls)
            if 1 <= ordinal <= len(members):
                return members[ordinal - 1]
            return None
        lowered = text.lower()
        for member in cls:
            if member.value.lower() == lowered or member.name.lower() == lowered:
                return member
        return None


_DISPLAY_NAMES = {
    MediaType.AUDIO_BOOK: "Audio Book",
    MediaType.EBOOK: "E-Book",
    MediaType.BLU_RAY: "Blu-ray",
}


class LifecycleState(str, Enum):
    ACTIVE = "active"
    DELETED = "deleted"


class MediaItemSchema(BaseModel):
    """Outbound representation of a catalog item"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    author: Optional[str] = None
    isbn: Optional[str] = None
    media_type: MediaType
    genre: Optional[str] = None
    category: Optional[str] = None
    publication_date: Optional[datetime] = None
    description: Optional[str] = None
    quantity: int
    available_quantity: int
    is_available: bool
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by_user_id: Optional[int] = None
    updated_by_user_id: Optional[int] = None


class MediaItemCreate(BaseModel):
    """Input model for creating items from external data (e.g. bulk import files)"""
    title: str = Field(min_length=1, max_length=200)
    author: Optional[str] = Field(default=None, max_length=100)
    isbn: Optional[str] = Field(default=None, max_length=20)
    media_type: MediaType = MediaType.BOOK
    genre: Optional[str] = Field(default=None, max_length=50)
    category: Optional[str] = Field(default=None, max_length=50)
    publication_date: Optional[datetime] = None
    description: Optional[str] = Field(default=None, max_length=1000)
    quantity: int = Field(default=1, ge=0)


class CategorySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    is_active: bool


class GenreSchema(CategorySchema):
    applicable_to_media_type: Optional[MediaType] = None
