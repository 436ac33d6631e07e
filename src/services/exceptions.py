"""Shared exceptions for service layer operations."""


class CategoryNotFoundError(Exception):
    """
    Raised when a category doesn't exist or belongs to another user.

    Both cases are reported the same way so callers can't discover other users'
    category IDs.
    """

    def __init__(self, category_id: object) -> None:
        self.category_id = category_id
        super().__init__("Category not found")


class CategoryAlreadyExistsError(Exception):
    """Raised when a category name collides (case-insensitively) with an existing one."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Category '{name}' already exists")


class CategoryReconciliationError(Exception):
    """
    Raised when a category can't be created while importing a CSV row.

    The import is aborted as a whole; `row` is the 1-based line number of the row
    that was being processed.
    """

    def __init__(self, row: int, name: str) -> None:
        self.row = row
        self.name = name
        super().__init__(f"Could not create category '{name}' for row {row}")


class EmailAlreadyRegisteredError(Exception):
    """Raised when registering with an email that already has an account."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__("An account with this email already exists")


class InvalidImportFileError(Exception):
    """Raised when an uploaded CSV file can't be read at all (as opposed to bad rows)."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
