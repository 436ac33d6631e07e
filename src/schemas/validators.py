"""
Shared validation functions for Pydantic schemas.

Used by the bookmark and category request schemas and by the CSV import rows, so
that every path into the store applies the same limits.
"""
import re

from core.config import get_settings

# Hex color, short or long form (e.g., '#fff', '#3B82F6')
COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")

MAX_CATEGORY_NAME_LENGTH = 100


def _require_text(value: str, field: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field} cannot be empty")
    return stripped


def _check_length(value: str | None, limit: int, field: str) -> str | None:
    if value is not None and len(value) > limit:
        raise ValueError(
            f"{field} exceeds maximum length of {limit:,} characters "
            f"(got {len(value):,} characters).",
        )
    return value


def validate_title(title: str) -> str:
    """Trim a bookmark title and check it is non-empty and within the length limit."""
    title = _require_text(title, "Title")
    return _check_length(title, get_settings().max_title_length, "Title")


def validate_url(url: str) -> str:
    """
    Trim a bookmark URL and check it is non-empty and within the length limit.

    The URL is not checked for well-formedness; bookmarklets and relative links are
    accepted as-is.
    """
    url = _require_text(url, "URL")
    return _check_length(url, get_settings().max_url_length, "URL")


def validate_notes(notes: str | None) -> str:
    """Trim notes (None becomes empty) and check the length limit."""
    notes = (notes or "").strip()
    return _check_length(notes, get_settings().max_notes_length, "Notes")


def normalize_category_name(name: str) -> str:
    """
    Return the case-insensitive lookup key for a category name.

    Uses full Unicode case folding, so "Straße" and "STRASSE" share a key. Folding can
    lengthen a name (up to three characters per input character).
    """
    return name.strip().casefold()


def validate_category_name(name: str) -> str:
    """
    Trim a category name and validate it.

    Returns:
        The trimmed name with its original casing.

    Raises:
        ValueError: If the name is empty or too long.
    """
    name = _require_text(name, "Category name")
    return _check_length(name, MAX_CATEGORY_NAME_LENGTH, f"Category name '{name[:20]}...'")


def validate_color(color: str) -> str:
    """Validate a hex color string."""
    if not COLOR_PATTERN.match(color):
        raise ValueError(f"Invalid color: '{color}'. Use a hex color such as '#3B82F6'.")
    return color
