from .media_item_service import MediaItemService, MediaItemAdminService
from .lookup_service import LookupService, CategoryService, GenreService
from .search_service import SearchService

__all__ = [
    'MediaItemService',
    'MediaItemAdminService',
    'LookupService',
    'CategoryService',
    'GenreService',
    'SearchService'
]
