"""Service layer for category operations."""
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import utcnow
from models.bookmark import Bookmark
from models.category import Category
from schemas.category import CategoryCreate, CategoryUpdate
from schemas.validators import normalize_category_name
from services.exceptions import CategoryAlreadyExistsError, CategoryNotFoundError

logger = logging.getLogger(__name__)


async def list_categories(db: AsyncSession, user_id: UUID) -> list[Category]:
    """Get all categories for a user, sorted by name (case-insensitive)."""
    result = await db.execute(
        select(Category)
        .where(Category.user_id == user_id)
        .order_by(Category.name_key.asc()),
    )
    return list(result.scalars())


async def get_category(
    db: AsyncSession,
    user_id: UUID,
    category_id: UUID,
) -> Category | None:
    """Get a category by ID, scoped to the user. Returns None if not found."""
    result = await db.execute(
        select(Category).where(
            Category.id == category_id,
            Category.user_id == user_id,
        ),
    )
    return result.scalar_one_or_none()


async def get_category_by_name(
    db: AsyncSession,
    user_id: UUID,
    name: str,
) -> Category | None:
    """Get a category by name (case-insensitive), scoped to the user."""
    result = await db.execute(
        select(Category).where(
            Category.user_id == user_id,
            Category.name_key == normalize_category_name(name),
        ),
    )
    return result.scalar_one_or_none()


async def get_categories_by_ids(
    db: AsyncSession,
    user_id: UUID,
    category_ids: list[UUID],
) -> list[Category]:
    """
    Load the given categories, all of which must belong to the user.

    Returns:
        Categories in the order of `category_ids`.

    Raises:
        CategoryNotFoundError: If any ID is unknown or owned by someone else.
    """
    if not category_ids:
        return []

    result = await db.execute(
        select(Category).where(
            Category.user_id == user_id,
            Category.id.in_(category_ids),
        ),
    )
    by_id = {category.id: category for category in result.scalars()}
    for category_id in category_ids:
        if category_id not in by_id:
            raise CategoryNotFoundError(category_id)
    return [by_id[category_id] for category_id in category_ids]


async def _flush_unique(db: AsyncSession, category: Category) -> None:
    """Flush a new or renamed category, mapping the uniqueness constraint to a domain error."""
    try:
        async with db.begin_nested():  # Creates savepoint
            db.add(category)
    except IntegrityError as e:
        # Handle race condition: another request created the name between check and flush
        if "name_key" in str(e):
            raise CategoryAlreadyExistsError(category.name) from e
        raise


async def create_category(
    db: AsyncSession,
    user_id: UUID,
    data: CategoryCreate,
) -> Category:
    """
    Create a category.

    Raises:
        CategoryAlreadyExistsError: If the user already has a category with this
            name, ignoring case.
    """
    if await get_category_by_name(db, user_id, data.name) is not None:
        raise CategoryAlreadyExistsError(data.name)

    category = Category(
        user_id=user_id,
        name=data.name,
        name_key=normalize_category_name(data.name),
        color=data.color,
    )
    await _flush_unique(db, category)
    return category


async def update_category(
    db: AsyncSession,
    user_id: UUID,
    category_id: UUID,
    data: CategoryUpdate,
) -> Category | None:
    """
    Rename and/or recolor a category.

    Returns:
        The updated category, or None if not found.

    Raises:
        CategoryAlreadyExistsError: If renaming onto another category's name.
    """
    category = await get_category(db, user_id, category_id)
    if category is None:
        return None

    if data.name is not None:
        new_key = normalize_category_name(data.name)
        if new_key != category.name_key:
            existing = await get_category_by_name(db, user_id, data.name)
            if existing is not None:
                raise CategoryAlreadyExistsError(data.name)
        category.name = data.name
        category.name_key = new_key

    if data.color is not None:
        category.color = data.color

    category.updated_at = utcnow()
    await _flush_unique(db, category)
    return category


async def delete_category(
    db: AsyncSession,
    user_id: UUID,
    category_id: UUID,
) -> bool:
    """
    Delete a category and remove it from every bookmark that references it.

    The bookmarks themselves are kept; their updated_at is bumped because their
    category set changed.

    Returns:
        True if deleted, False if not found.
    """
    category = await get_category(db, user_id, category_id)
    if category is None:
        return False

    result = await db.execute(
        select(Bookmark).where(
            Bookmark.user_id == user_id,
            Bookmark.categories.any(Category.id == category_id),
        ),
    )
    now = utcnow()
    affected = 0
    for bookmark in result.scalars():
        bookmark.categories.remove(category)
        bookmark.updated_at = now
        affected += 1

    await db.delete(category)
    await db.flush()
    logger.info(
        "Deleted category %s for user %s (removed from %d bookmarks)",
        category_id, user_id, affected,
    )
    return True
