"""Category model and the bookmark/category junction table."""
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Column, ForeignKey, Index, String, Table, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.user import User


DEFAULT_CATEGORY_COLOR = "#3B82F6"


# Junction table for many-to-many relationship between bookmarks and categories
bookmark_categories = Table(
    "bookmark_categories",
    Base.metadata,
    Column(
        "bookmark_id",
        Uuid,
        ForeignKey("bookmarks.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        Uuid,
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    # Index for lookups by category (composite PK already indexes bookmark_id first)
    Index("ix_bookmark_categories_category_id", "category_id"),
)


class Category(Base, UUIDv7Mixin, TimestampMixin):
    """
    Category model - named, colored groupings of a user's bookmarks.

    `name` keeps the casing the user typed; `name_key` is the case-folded form used
    for per-user uniqueness, so "Work" and "work" can't coexist.
    """

    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("user_id", "name_key", name="uq_categories_user_id_name_key"),
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Case folding can triple the length of a 100-character name
    name_key: Mapped[str] = mapped_column(String(300), nullable=False)
    color: Mapped[str] = mapped_column(
        String(7), nullable=False, default=DEFAULT_CATEGORY_COLOR,
    )

    user: Mapped["User"] = relationship(back_populates="categories")
