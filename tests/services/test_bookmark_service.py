"""Tests for bookmark service operations."""
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from models.category import Category
from models.user import User
from schemas.bookmark import BookmarkCreate, BookmarkUpdate
from services.bookmark_service import (
    create_bookmark,
    delete_bookmark,
    escape_ilike,
    get_bookmark,
    search_bookmarks,
    update_bookmark,
)
from services.exceptions import CategoryNotFoundError

BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)


async def _category(db_session: AsyncSession, user: User, name: str) -> Category:
    category = Category(user_id=user.id, name=name, name_key=name.lower())
    db_session.add(category)
    await db_session.flush()
    return category


async def _seed(db_session: AsyncSession, user: User, titles: list[str]) -> list[Bookmark]:
    """Add bookmarks one hour apart, in the given order."""
    bookmarks = [
        Bookmark(
            user_id=user.id,
            title=title,
            url=f"https://{title.lower().replace(' ', '-')}.example",
            created_at=BASE_TIME + timedelta(hours=i),
            categories=[],
        )
        for i, title in enumerate(titles)
    ]
    db_session.add_all(bookmarks)
    await db_session.flush()
    return bookmarks


def test__escape_ilike__escapes_wildcards() -> None:
    """Test that LIKE wildcards and the escape character match literally."""
    assert escape_ilike("100%_a\\b") == "100\\%\\_a\\\\b"


async def test__create_bookmark__with_categories(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    """Test creating a bookmark assigned to existing categories."""
    work = await _category(db_session, test_user, "Work")

    bookmark = await create_bookmark(
        db_session,
        test_user.id,
        BookmarkCreate(title=" Title ", url="https://a.example", category_ids=[work.id, work.id]),
    )

    assert bookmark.title == "Title"
    assert bookmark.notes == ""
    assert bookmark.category_ids == [work.id]
    assert bookmark.created_at is not None


async def test__create_bookmark__foreign_category_raises(
    db_session: AsyncSession,
    test_user: User,
    other_user: User,
) -> None:
    """Test that another user's category can't be assigned."""
    theirs = await _category(db_session, other_user, "Work")

    with pytest.raises(CategoryNotFoundError):
        await create_bookmark(
            db_session,
            test_user.id,
            BookmarkCreate(title="T", url="https://a.example", category_ids=[theirs.id]),
        )

    result = await db_session.execute(select(Bookmark).where(Bookmark.user_id == test_user.id))
    assert result.scalars().all() == []


async def test__search_bookmarks__default_sort_newest_first(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    """Test that bookmarks are listed newest first with a total count."""
    await _seed(db_session, test_user, ["First", "Second", "Third"])

    bookmarks, total = await search_bookmarks(db_session, test_user.id)

    assert total == 3
    assert [b.title for b in bookmarks] == ["Third", "Second", "First"]


@pytest.mark.parametrize(
    ("sort", "expected"),
    [
        ("oldest", ["banana", "Apple", "cherry"]),
        ("az", ["Apple", "banana", "cherry"]),
        ("za", ["cherry", "banana", "Apple"]),
    ],
)
async def test__search_bookmarks__sort_modes(
    db_session: AsyncSession,
    test_user: User,
    sort: str,
    expected: list[str],
) -> None:
    """Test oldest and case-insensitive title sorts."""
    await _seed(db_session, test_user, ["banana", "Apple", "cherry"])

    bookmarks, _ = await search_bookmarks(db_session, test_user.id, sort=sort)

    assert [b.title for b in bookmarks] == expected


async def test__search_bookmarks__query_matches_title_url_and_notes(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    """Test case-insensitive substring search across text fields."""
    a, b, c = await _seed(db_session, test_user, ["Python Docs", "Rust Book", "Misc"])
    c.notes = "all about PYTHON"
    await db_session.flush()

    bookmarks, total = await search_bookmarks(db_session, test_user.id, query="python")
    assert total == 2
    assert {bm.id for bm in bookmarks} == {a.id, c.id}

    bookmarks, _ = await search_bookmarks(db_session, test_user.id, query="rust-book")
    assert [bm.id for bm in bookmarks] == [b.id]


async def test__search_bookmarks__query_wildcards_are_literal(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    """Test that '%' in a query doesn't match everything."""
    await _seed(db_session, test_user, ["100% Legit", "Other"])

    bookmarks, total = await search_bookmarks(db_session, test_user.id, query="%")

    assert total == 1
    assert bookmarks[0].title == "100% Legit"


async def test__search_bookmarks__category_filter_matches_any(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    """Test that filtering by several categories returns bookmarks in any of them."""
    work = await _category(db_session, test_user, "Work")
    play = await _category(db_session, test_user, "Play")
    a, b, c = await _seed(db_session, test_user, ["A", "B", "C"])
    a.categories = [work]
    b.categories = [work, play]
    c.categories = []
    await db_session.flush()

    bookmarks, total = await search_bookmarks(db_session, test_user.id, category_ids=[play.id])
    assert total == 1
    assert [bm.id for bm in bookmarks] == [b.id]

    bookmarks, total = await search_bookmarks(
        db_session, test_user.id, category_ids=[work.id, play.id],
    )
    assert total == 2
    assert {bm.id for bm in bookmarks} == {a.id, b.id}


async def test__search_bookmarks__pagination(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    """Test offset/limit paging with an unchanged total."""
    await _seed(db_session, test_user, [f"B{i}" for i in range(5)])

    page, total = await search_bookmarks(db_session, test_user.id, offset=2, limit=2)

    assert total == 5
    assert [b.title for b in page] == ["B2", "B1"]


async def test__search_bookmarks__scoped_to_user(
    db_session: AsyncSession,
    test_user: User,
    other_user: User,
) -> None:
    """Test that other users' bookmarks never appear."""
    await _seed(db_session, other_user, ["Theirs"])

    bookmarks, total = await search_bookmarks(db_session, test_user.id)

    assert bookmarks == []
    assert total == 0


async def test__update_bookmark__partial_update(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    """Test that only provided fields change and updated_at moves forward."""
    [bookmark] = await _seed(db_session, test_user, ["Original"])
    bookmark.notes = "keep me"
    await db_session.flush()
    before = bookmark.updated_at

    updated = await update_bookmark(
        db_session, test_user.id, bookmark.id, BookmarkUpdate(title="Renamed"),
    )

    assert updated is bookmark
    assert updated.title == "Renamed"
    assert updated.notes == "keep me"
    assert updated.updated_at >= before


async def test__update_bookmark__replaces_and_clears_categories(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    """Test that category_ids replaces the set; an empty list clears it."""
    work = await _category(db_session, test_user, "Work")
    play = await _category(db_session, test_user, "Play")
    [bookmark] = await _seed(db_session, test_user, ["T"])
    bookmark.categories = [work]
    await db_session.flush()

    await update_bookmark(
        db_session, test_user.id, bookmark.id, BookmarkUpdate(category_ids=[play.id]),
    )
    assert bookmark.category_ids == [play.id]

    await update_bookmark(db_session, test_user.id, bookmark.id, BookmarkUpdate(category_ids=[]))
    assert bookmark.category_ids == []


async def test__update_bookmark__not_found_returns_none(
    db_session: AsyncSession,
    test_user: User,
    other_user: User,
) -> None:
    """Test that unknown or foreign bookmarks return None."""
    [theirs] = await _seed(db_session, other_user, ["Theirs"])

    assert await update_bookmark(
        db_session, test_user.id, uuid4(), BookmarkUpdate(title="X"),
    ) is None
    assert await update_bookmark(
        db_session, test_user.id, theirs.id, BookmarkUpdate(title="X"),
    ) is None
    assert theirs.title == "Theirs"


async def test__delete_bookmark__keeps_categories(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    """Test that deleting a bookmark leaves its categories in place."""
    work = await _category(db_session, test_user, "Work")
    [bookmark] = await _seed(db_session, test_user, ["T"])
    bookmark.categories = [work]
    await db_session.flush()

    assert await delete_bookmark(db_session, test_user.id, bookmark.id) is True

    assert await get_bookmark(db_session, test_user.id, bookmark.id) is None
    assert await db_session.get(Category, work.id) is work


async def test__delete_bookmark__not_found_returns_false(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    """Test deleting an unknown bookmark."""
    assert await delete_bookmark(db_session, test_user.id, uuid4()) is False
