"""Bookmark CRUD, CSV import and CSV export endpoints."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_settings
from core.config import Settings
from models.user import User
from schemas.bookmark import (
    BookmarkCreate,
    BookmarkListResponse,
    BookmarkResponse,
    BookmarkSort,
    BookmarkUpdate,
    ImportResponse,
)
from services import bookmark_service, csv_export_service, csv_import_service
from services.exceptions import (
    CategoryNotFoundError,
    CategoryReconciliationError,
    InvalidImportFileError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


def _category_not_found(e: CategoryNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


@router.post("/", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    data: BookmarkCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Create a new bookmark."""
    try:
        bookmark = await bookmark_service.create_bookmark(db, current_user.id, data)
    except CategoryNotFoundError as e:
        raise _category_not_found(e) from e
    return BookmarkResponse.model_validate(bookmark)


@router.get("/", response_model=BookmarkListResponse)
async def list_bookmarks(
    q: str | None = Query(default=None, description="Search query (matches title, url, notes)"),
    category_ids: list[UUID] = Query(default=[], description="Filter by categories (any match)"),
    sort: BookmarkSort = Query(default="newest", description="newest, oldest, az or za"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    limit: int = Query(default=50, ge=1, le=100, description="Pagination limit"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkListResponse:
    """
    List bookmarks for the current user with search, filtering, and sorting.

    - **q**: Text search across title, url and notes (case-insensitive)
    - **category_ids**: Only bookmarks in at least one of these categories
    - **sort**: newest (default), oldest, az or za (by title)
    """
    bookmarks, total = await bookmark_service.search_bookmarks(
        db=db,
        user_id=current_user.id,
        query=q,
        category_ids=category_ids or None,
        sort=sort,
        offset=offset,
        limit=limit,
    )
    items = [BookmarkResponse.model_validate(b) for b in bookmarks]
    has_more = offset + len(items) < total
    return BookmarkListResponse(
        items=items,
        total=total,
        offset=offset,
        limit=limit,
        has_more=has_more,
    )


@router.post("/import", response_model=ImportResponse, status_code=201)
async def import_bookmarks(
    file: UploadFile | None = File(default=None, description="CSV file to import"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> ImportResponse:
    """
    Import bookmarks from a CSV file with columns `Title,URL,Notes,Categories,Created At`.

    Categories are `;`-separated names; unknown names become new categories.
    Rows that can't be parsed or lack a title/URL are skipped and listed in `errors`.

    Returns 400 if no file is uploaded or it isn't UTF-8 text, 413 if it is too large,
    and 500 if a category can't be created (nothing is imported in that case).
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    content = await file.read(settings.max_import_bytes + 1)
    if len(content) > settings.max_import_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds maximum size of {settings.max_import_bytes:,} bytes",
        )

    try:
        result = await csv_import_service.import_bookmarks_csv(db, current_user.id, content)
    except InvalidImportFileError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except CategoryReconciliationError as e:
        logger.warning("Aborted import for user %s: %s", current_user.id, e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": str(e), "row": e.row},
        ) from e

    return ImportResponse(
        message=f"Successfully imported {result.count} bookmarks",
        count=result.count,
        errors=result.errors,
    )


@router.get("/export/csv")
async def export_bookmarks(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> Response:
    """Download all bookmarks as CSV."""
    content = await csv_export_service.export_bookmarks_csv(db, current_user.id)
    return Response(
        content=content,
        media_type="text/csv",
        headers={
            "Content-Disposition": (
                f"attachment; filename={csv_export_service.EXPORT_FILENAME}"
            ),
        },
    )


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get a single bookmark by ID."""
    bookmark = await bookmark_service.get_bookmark(db, current_user.id, bookmark_id)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkResponse.model_validate(bookmark)


@router.patch("/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark(
    bookmark_id: UUID,
    data: BookmarkUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Update a bookmark."""
    try:
        bookmark = await bookmark_service.update_bookmark(
            db, current_user.id, bookmark_id, data,
        )
    except CategoryNotFoundError as e:
        raise _category_not_found(e) from e
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", status_code=204)
async def delete_bookmark(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete a bookmark."""
    deleted = await bookmark_service.delete_bookmark(db, current_user.id, bookmark_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Bookmark not found")
