"""Service layer for bookmark CRUD operations."""
import logging
from uuid import UUID

from sqlalchemy import exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import utcnow
from models.bookmark import Bookmark
from models.category import bookmark_categories
from schemas.bookmark import BookmarkCreate, BookmarkSort, BookmarkUpdate
from services.category_service import get_categories_by_ids

logger = logging.getLogger(__name__)


def escape_ilike(value: str) -> str:
    r"""
    Escape special ILIKE characters for safe use in LIKE/ILIKE patterns.

    LIKE/ILIKE treats these characters specially:
    - % matches any sequence of characters
    - _ matches any single character
    - \\ is the escape character

    This function escapes them so they match literally.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _sort_clauses(sort: BookmarkSort) -> list:
    """Order-by clauses for a sort mode, with created_at/id tiebreakers for stable paging."""
    if sort == "oldest":
        return [Bookmark.created_at.asc(), Bookmark.id.asc()]
    if sort == "az":
        return [func.lower(Bookmark.title).asc(), Bookmark.created_at.desc(), Bookmark.id.desc()]
    if sort == "za":
        return [func.lower(Bookmark.title).desc(), Bookmark.created_at.desc(), Bookmark.id.desc()]
    return [Bookmark.created_at.desc(), Bookmark.id.desc()]


async def create_bookmark(
    db: AsyncSession,
    user_id: UUID,
    data: BookmarkCreate,
) -> Bookmark:
    """
    Create a new bookmark for a user.

    Raises:
        CategoryNotFoundError: If any category ID isn't one of the user's categories.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    categories = await get_categories_by_ids(db, user_id, data.category_ids)
    bookmark = Bookmark(
        user_id=user_id,
        title=data.title,
        url=data.url,
        notes=data.notes,
    )
    bookmark.categories = categories
    db.add(bookmark)
    await db.flush()
    return bookmark


async def get_bookmark(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
) -> Bookmark | None:
    """
    Get a bookmark by ID, scoped to user.

    Returns:
        The bookmark if found and owned by the user, None otherwise.
    """
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.id == bookmark_id,
            Bookmark.user_id == user_id,
        ),
    )
    return result.scalar_one_or_none()


async def search_bookmarks(
    db: AsyncSession,
    user_id: UUID,
    query: str | None = None,
    category_ids: list[UUID] | None = None,
    sort: BookmarkSort = "newest",
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[Bookmark], int]:
    """
    Search and filter bookmarks for a user with pagination.

    Args:
        db: Database session.
        user_id: User ID to scope bookmarks.
        query: Case-insensitive substring match on title, url and notes.
        category_ids: Only bookmarks in ANY of these categories.
        sort: "newest" (default), "oldest", "az" or "za" (by title).
        offset: Pagination offset.
        limit: Pagination limit.

    Returns:
        Tuple of (list of bookmarks, total count).
    """
    base_query = select(Bookmark).where(Bookmark.user_id == user_id)

    if query:
        search_pattern = f"%{escape_ilike(query)}%"
        base_query = base_query.where(
            or_(
                Bookmark.title.ilike(search_pattern, escape="\\"),
                Bookmark.url.ilike(search_pattern, escape="\\"),
                Bookmark.notes.ilike(search_pattern, escape="\\"),
            ),
        )

    if category_ids:
        subq = select(bookmark_categories.c.bookmark_id).where(
            bookmark_categories.c.bookmark_id == Bookmark.id,
            bookmark_categories.c.category_id.in_(category_ids),
        )
        base_query = base_query.where(exists(subq))

    # Get total count before pagination
    count_query = select(func.count()).select_from(base_query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    base_query = base_query.order_by(*_sort_clauses(sort)).offset(offset).limit(limit)
    result = await db.execute(base_query)
    return list(result.scalars().all()), total


async def list_all_bookmarks(db: AsyncSession, user_id: UUID) -> list[Bookmark]:
    """Get every bookmark for a user, newest first."""
    result = await db.execute(
        select(Bookmark)
        .where(Bookmark.user_id == user_id)
        .order_by(*_sort_clauses("newest")),
    )
    return list(result.scalars().all())


async def update_bookmark(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
    data: BookmarkUpdate,
) -> Bookmark | None:
    """
    Update a bookmark. Returns None if not found or wrong user.

    Raises:
        CategoryNotFoundError: If any new category ID isn't one of the user's categories.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    if bookmark is None:
        return None

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)

    # Handle category updates separately via junction table
    new_category_ids = update_data.pop("category_ids", None)
    if new_category_ids is not None:
        bookmark.categories = await get_categories_by_ids(db, user_id, new_category_ids)

    for field, value in update_data.items():
        setattr(bookmark, field, value)

    bookmark.updated_at = utcnow()
    await db.flush()
    return bookmark


async def delete_bookmark(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
) -> bool:
    """
    Delete a bookmark. Its category links are removed with it; categories are kept.

    Returns:
        True if deleted, False if not found.
    """
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    if bookmark is None:
        return False

    await db.delete(bookmark)
    await db.flush()
    return True
