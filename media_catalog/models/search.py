# media_catalog/models/search.py

from pydantic import BaseModel, Field
from typing import Any, List, NamedTuple, Optional
from dataclasses import dataclass, field
from enum import Enum


class SortCriteria(str, Enum):
    TITLE = "title"
    AUTHOR = "author"
    YEAR = "year"
    ID = "id"


class SearchCriteria(BaseModel):
    """Search request as received from a front end.

    `page` is 0-based. Only title, type and genre narrow the result set;
    results are always ordered by title.
    """
    title: Optional[str] = None
    author: Optional[str] = None
    genre: Optional[str] = None
    type: Optional[str] = None
    year: Optional[int] = None
    sort_by: SortCriteria = SortCriteria.TITLE
    page: int = Field(default=0, ge=0)
    page_size: int = Field(default=20, gt=0)


class Page(NamedTuple):
    items: List[Any]
    total_count: int


@dataclass
class BulkQuantityResult:
    """Outcome of a bulk quantity update.

    Truthy when at least one record was changed.
    """
    updated: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    rejected: List[int] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.updated)
