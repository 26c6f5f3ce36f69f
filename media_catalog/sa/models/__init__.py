from .base import Base, AuditMixin
from .media_item import MediaItem
from .category import Category
from .genre import Genre

__all__ = [
    'Base',
    'AuditMixin',
    'MediaItem',
    'Category',
    'Genre'
]
