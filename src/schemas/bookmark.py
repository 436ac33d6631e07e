"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.validators import (
    validate_category_name,
    validate_notes,
    validate_title,
    validate_url,
)

BookmarkSort = Literal["newest", "oldest", "az", "za"]


class BookmarkCreate(BaseModel):
    """Schema for creating a new bookmark."""

    title: str
    url: str
    notes: str = ""
    category_ids: list[UUID] = []

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        """Validate title."""
        return validate_title(v)

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        """Validate URL."""
        return validate_url(v)

    @field_validator("notes", mode="before")
    @classmethod
    def check_notes(cls, v: str | None) -> str:
        """Validate notes."""
        return validate_notes(v)

    @field_validator("category_ids")
    @classmethod
    def dedupe_category_ids(cls, v: list[UUID]) -> list[UUID]:
        """Drop repeated category IDs, keeping the first occurrence."""
        return list(dict.fromkeys(v))


class BookmarkUpdate(BaseModel):
    """Schema for updating an existing bookmark. Omitted fields are left unchanged."""

    title: str | None = None
    url: str | None = None
    notes: str | None = None
    category_ids: list[UUID] | None = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str | None) -> str | None:
        """Validate title if provided."""
        return None if v is None else validate_title(v)

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str | None) -> str | None:
        """Validate URL if provided."""
        return None if v is None else validate_url(v)

    @field_validator("notes")
    @classmethod
    def check_notes(cls, v: str | None) -> str | None:
        """Validate notes if provided."""
        return None if v is None else validate_notes(v)

    @field_validator("category_ids")
    @classmethod
    def dedupe_category_ids(cls, v: list[UUID] | None) -> list[UUID] | None:
        """Drop repeated category IDs, keeping the first occurrence."""
        return None if v is None else list(dict.fromkeys(v))


class BookmarkResponse(BaseModel):
    """Schema for bookmark responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    url: str
    notes: str
    category_ids: list[UUID]
    created_at: datetime
    updated_at: datetime


class BookmarkListResponse(BaseModel):
    """Schema for paginated bookmark list responses."""

    items: list[BookmarkResponse]
    total: int
    offset: int
    limit: int
    has_more: bool


class BookmarkImportRow(BaseModel):
    """
    One data row of an imported CSV file, validated before it reaches the store.

    The `Created At` column is not represented: imported bookmarks get fresh
    timestamps.
    """

    title: str
    url: str
    notes: str = ""
    category_names: list[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        """Validate title."""
        return validate_title(v)

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        """Validate URL."""
        return validate_url(v)

    @field_validator("notes", mode="before")
    @classmethod
    def check_notes(cls, v: str | None) -> str:
        """Validate notes."""
        return validate_notes(v)

    @field_validator("category_names")
    @classmethod
    def check_category_names(cls, v: list[str]) -> list[str]:
        """Validate each non-blank category name; blank entries are skipped later."""
        for name in v:
            if name.strip():
                validate_category_name(name)
        return v


class ImportRowError(BaseModel):
    """A CSV row that could not be imported."""

    row: int = Field(description="1-based line number in the uploaded file")
    message: str


class ImportResponse(BaseModel):
    """Result of a CSV import."""

    message: str
    count: int
    errors: list[ImportRowError] = []
