"""Import bookmarks from CSV files."""
import csv
import io
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from schemas.bookmark import BookmarkImportRow, ImportRowError
from services.category_reconciler import CategoryReconciler
from services.exceptions import InvalidImportFileError

logger = logging.getLogger(__name__)

# Column order of the import/export format. Only the order matters on import;
# header text is not checked.
CSV_COLUMNS = ("Title", "URL", "Notes", "Categories", "Created At")
CATEGORY_SEPARATOR = ";"


@dataclass
class ImportResult:
    """Outcome of one CSV import."""

    count: int = 0
    errors: list[ImportRowError] = field(default_factory=list)
    categories_created: int = 0


def decode_csv_bytes(content: bytes) -> str:
    """
    Decode uploaded bytes as UTF-8, tolerating a leading byte-order mark.

    Raises:
        InvalidImportFileError: If the bytes aren't valid UTF-8.
    """
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise InvalidImportFileError(
            f"File is not valid UTF-8 text (invalid byte at position {e.start})",
        ) from e


def iter_csv_rows(text: str) -> Iterator[tuple[int, list[str] | None, str | None]]:
    """
    Yield (line_number, fields, error) for every non-blank record in the text.

    Quoted fields may span lines; line_number is where the record starts. A record
    with broken quoting yields fields=None and an error message, and parsing resumes
    on the next line.
    """
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    while True:
        start_line = reader.line_num + 1
        try:
            fields = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            yield start_line, None, f"Malformed CSV row: {e}"
            continue
        if not any(value.strip() for value in fields):
            continue
        yield start_line, fields, None


def split_category_names(value: str) -> list[str]:
    """Split the Categories column; blank entries are dropped later by the reconciler."""
    if not value.strip():
        return []
    return value.split(CATEGORY_SEPARATOR)


def parse_row(fields: list[str]) -> BookmarkImportRow:
    """
    Map positional CSV fields to a validated import row.

    Raises:
        ValidationError: If title/URL are missing or any value is too long.
    """
    padded = [value.strip() for value in fields] + [""] * (len(CSV_COLUMNS) - len(fields))
    title, url, notes, categories = padded[:4]
    return BookmarkImportRow(
        title=title,
        url=url,
        notes=notes,
        category_names=split_category_names(categories),
    )


def _format_validation_error(error: ValidationError) -> str:
    return "; ".join(
        str(detail["msg"]).removeprefix("Value error, ") for detail in error.errors()
    )


async def import_bookmarks_csv(
    db: AsyncSession,
    user_id: UUID,
    content: bytes,
) -> ImportResult:
    """
    Import bookmarks for a user from CSV bytes.

    The first non-blank record is the header (`Title,URL,Notes,Categories,Created At`).
    Each following record becomes a bookmark; invalid records are reported in
    `ImportResult.errors` and skipped. Category names are reconciled against the
    user's categories (created as needed), then all bookmarks are inserted in one
    flush.

    Raises:
        InvalidImportFileError: If the content can't be decoded.
        CategoryReconciliationError: If a category can't be created; the caller's
            transaction should be rolled back.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    text = decode_csv_bytes(content)
    result = ImportResult()
    reconciler = CategoryReconciler(db, user_id)
    bookmarks: list[Bookmark] = []
    header_seen = False

    for line_number, fields, error in iter_csv_rows(text):
        if not header_seen:
            header_seen = True
            if error is None:
                continue
        if error is not None:
            result.errors.append(ImportRowError(row=line_number, message=error))
            continue

        try:
            row = parse_row(fields)
        except ValidationError as e:
            result.errors.append(
                ImportRowError(row=line_number, message=_format_validation_error(e)),
            )
            continue

        category_ids = []
        if row.category_names:
            category_ids = await reconciler.resolve(row.category_names, row=line_number)
        bookmark = Bookmark(
            user_id=user_id,
            title=row.title,
            url=row.url,
            notes=row.notes,
        )
        # One entry per category, even if the row repeats a name
        bookmark.categories = [reconciler.get(cid) for cid in dict.fromkeys(category_ids)]
        bookmarks.append(bookmark)

    if bookmarks:
        db.add_all(bookmarks)
        await db.flush()

    result.count = len(bookmarks)
    result.categories_created = len(reconciler.created)
    logger.info(
        "Imported %d bookmarks for user %s (%d new categories, %d rows rejected)",
        result.count, user_id, result.categories_created, len(result.errors),
    )
    return result
