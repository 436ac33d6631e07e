"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.category import Category, bookmark_categories  # Must be before bookmark due to import
from models.bookmark import Bookmark
from models.user import User

__all__ = [
    "Base",
    "Bookmark",
    "Category",
    "TimestampMixin",
    "UUIDv7Mixin",
    "User",
    "bookmark_categories",
]
