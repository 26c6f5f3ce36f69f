# media_catalog/sa/__init__.py
from .database import Database
from .models import Base, MediaItem, Category, Genre

__all__ = [
    'Database',
    'Base',
    'MediaItem',
    'Category',
    'Genre'
]
