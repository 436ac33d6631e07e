"""Category CRUD endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from models.user import User
from schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from services import category_service
from services.exceptions import CategoryAlreadyExistsError

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("/", response_model=list[CategoryResponse])
async def list_categories(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> list[CategoryResponse]:
    """Get all categories for the current user, sorted by name."""
    categories = await category_service.list_categories(db, current_user.id)
    return [CategoryResponse.model_validate(c) for c in categories]


@router.post("/", response_model=CategoryResponse, status_code=201)
async def create_category(
    data: CategoryCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> CategoryResponse:
    """
    Create a category.

    Returns 409 if a category with the same name (ignoring case) already exists.
    """
    try:
        category = await category_service.create_category(db, current_user.id, data)
    except CategoryAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e
    return CategoryResponse.model_validate(category)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> CategoryResponse:
    """Get a single category by ID."""
    category = await category_service.get_category(db, current_user.id, category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return CategoryResponse.model_validate(category)


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    data: CategoryUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> CategoryResponse:
    """
    Rename and/or recolor a category.

    Returns 404 if the category doesn't exist.
    Returns 409 if renaming onto the name of another category.
    """
    try:
        category = await category_service.update_category(
            db, current_user.id, category_id, data,
        )
    except CategoryAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """
    Delete a category.

    The category is removed from all bookmarks that use it; the bookmarks are kept.
    """
    deleted = await category_service.delete_category(db, current_user.id, category_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Category not found")
