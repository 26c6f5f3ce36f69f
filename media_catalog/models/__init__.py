from .media import (
    MediaType, LifecycleState, MediaItemSchema, MediaItemCreate,
    CategorySchema, GenreSchema
)
from .search import SortCriteria, SearchCriteria, Page, BulkQuantityResult

__all__ = [
    'MediaType',
    'LifecycleState',
    'MediaItemSchema',
    'MediaItemCreate',
    'CategorySchema',
    'GenreSchema',
    'SortCriteria',
    'SearchCriteria',
    'Page',
    'BulkQuantityResult'
]
