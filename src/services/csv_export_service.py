"""Export bookmarks to CSV."""
import csv
import io
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from services.bookmark_service import list_all_bookmarks
from services.category_service import list_categories
from services.csv_import_service import CATEGORY_SEPARATOR, CSV_COLUMNS

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "webm-bookmarks.csv"


def format_timestamp(value: datetime) -> str:
    """Render a timestamp for the Created At column."""
    return value.isoformat()


def render_bookmarks_csv(
    bookmarks: Iterable[Bookmark],
    category_names: Mapping[UUID, str],
) -> str:
    """
    Render bookmarks as CSV text.

    The header line is unquoted; every data field is quoted with embedded quotes
    doubled, so titles like `He said "hi"` survive a re-import. Category IDs
    missing from `category_names` render as empty strings.
    """
    buffer = io.StringIO()
    buffer.write(",".join(CSV_COLUMNS) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for bookmark in bookmarks:
        categories = CATEGORY_SEPARATOR.join(
            category_names.get(category_id, "") for category_id in bookmark.category_ids
        )
        writer.writerow([
            bookmark.title,
            bookmark.url,
            bookmark.notes or "",
            categories,
            format_timestamp(bookmark.created_at),
        ])
    return buffer.getvalue()


async def export_bookmarks_csv(db: AsyncSession, user_id: UUID) -> str:
    """Export all of a user's bookmarks (newest first) as CSV text."""
    bookmarks = await list_all_bookmarks(db, user_id)
    categories = await list_categories(db, user_id)
    category_names = {category.id: category.name for category in categories}
    logger.info("Exporting %d bookmarks for user %s", len(bookmarks), user_id)
    return render_bookmarks_csv(bookmarks, category_names)
