"""
Security test fixtures.

These fixtures enable testing IDOR (Insecure Direct Object Reference) scenarios by
creating data owned by `other_user` and a client authenticated as `test_user`.
"""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from models.category import Category
from models.user import User


@pytest.fixture
async def other_users_category(db_session: AsyncSession, other_user: User) -> Category:
    """Create a category belonging to the other user."""
    category = Category(user_id=other_user.id, name="Private", name_key="private")
    db_session.add(category)
    await db_session.flush()
    return category


@pytest.fixture
async def other_users_bookmark(
    db_session: AsyncSession,
    other_user: User,
    other_users_category: Category,
) -> Bookmark:
    """Create a bookmark belonging to the other user."""
    bookmark = Bookmark(
        user_id=other_user.id,
        url="https://other-user-bookmark.example.com/",
        title="Other User's Private Bookmark",
        notes="This should only be accessible to the other user",
        categories=[other_users_category],
    )
    db_session.add(bookmark)
    await db_session.flush()
    return bookmark
