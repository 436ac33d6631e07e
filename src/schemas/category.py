"""Pydantic schemas for category endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from models.category import DEFAULT_CATEGORY_COLOR
from schemas.validators import validate_category_name, validate_color


class CategoryCreate(BaseModel):
    """Schema for creating a category."""

    name: str
    color: str = DEFAULT_CATEGORY_COLOR

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        """Validate and trim the name (casing is preserved)."""
        return validate_category_name(v)

    @field_validator("color")
    @classmethod
    def check_color(cls, v: str) -> str:
        """Validate color."""
        return validate_color(v)


class CategoryUpdate(BaseModel):
    """Schema for renaming and/or recoloring a category."""

    name: str | None = None
    color: str | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str | None) -> str | None:
        """Validate and trim the name if provided."""
        return None if v is None else validate_category_name(v)

    @field_validator("color")
    @classmethod
    def check_color(cls, v: str | None) -> str | None:
        """Validate color if provided."""
        return None if v is None else validate_color(v)


class CategoryResponse(BaseModel):
    """Schema for category responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    color: str
    created_at: datetime
    updated_at: datetime
