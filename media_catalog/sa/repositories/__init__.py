from .media_item import MediaItemRepository
from .lookup import LookupRepository, CategoryRepository, GenreRepository

__all__ = ['MediaItemRepository', 'LookupRepository', 'CategoryRepository', 'GenreRepository']
