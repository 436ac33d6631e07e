"""
Category name reconciliation for bulk imports.

A `CategoryReconciler` lives for one import (one request). It loads the owner's
existing categories once, then maps free-text names to category IDs, creating the
categories it hasn't seen before. Names are matched case-insensitively after
trimming; new categories keep the casing of their first occurrence.
"""
import logging
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models.category import Category
from schemas.validators import normalize_category_name
from services.exceptions import CategoryReconciliationError

logger = logging.getLogger(__name__)


class CategoryReconciler:
    """
    Resolve category names to IDs within one user's namespace.

    Usage:
        reconciler = CategoryReconciler(db, user_id)
        await reconciler.load()
        ids = await reconciler.resolve(["Work", " work ", "Search"])
    """

    def __init__(self, db: AsyncSession, user_id: UUID) -> None:
        self.db = db
        self.user_id = user_id
        self._by_key: dict[str, Category] = {}
        self._by_id: dict[UUID, Category] = {}
        self._loaded = False
        self.created: list[Category] = []

    async def load(self) -> None:
        """Seed the name mapping from the user's existing categories (one query)."""
        result = await self.db.execute(
            select(Category).where(Category.user_id == self.user_id),
        )
        for category in result.scalars():
            self._remember(category)
        self._loaded = True

    def _remember(self, category: Category) -> None:
        self._by_key[category.name_key] = category
        self._by_id[category.id] = category

    def get(self, category_id: UUID) -> Category:
        """Return a category this reconciler has loaded or created."""
        return self._by_id[category_id]

    async def resolve(self, names: Iterable[str], row: int = 0) -> list[UUID]:
        """
        Map category names to category IDs, creating missing categories.

        Blank names are skipped. The result has one ID per non-blank name, in input
        order; names that are equal ignoring case and surrounding whitespace map to
        the same ID.

        Args:
            names: Raw category names.
            row: Line number of the CSV row being processed, for error reporting.

        Raises:
            CategoryReconciliationError: If a new category can't be stored.
        """
        if not self._loaded:
            await self.load()

        ids = []
        for raw_name in names:
            name = raw_name.strip()
            if not name:
                continue
            key = normalize_category_name(name)
            category = self._by_key.get(key)
            if category is None:
                category = await self._create(name, key, row)
            ids.append(category.id)
        return ids

    async def _create(self, name: str, key: str, row: int) -> Category:
        category = Category(user_id=self.user_id, name=name, name_key=key)
        try:
            async with self.db.begin_nested():  # Creates savepoint
                self.db.add(category)
        except IntegrityError as e:
            if "name_key" not in str(e):
                raise CategoryReconciliationError(row, name) from e
            # Another session created this name since we loaded; savepoint rolled back,
            # parent transaction intact. Use the existing category.
            category = await self._fetch_existing(key)
            if category is None:
                raise CategoryReconciliationError(row, name) from e
            logger.info(
                "Category '%s' was created concurrently for user %s; reusing it",
                name, self.user_id,
            )
        except SQLAlchemyError as e:
            raise CategoryReconciliationError(row, name) from e
        else:
            self.created.append(category)
            logger.debug("Created category '%s' for user %s", name, self.user_id)

        # Record immediately so later occurrences in this session reuse it
        self._remember(category)
        return category

    async def _fetch_existing(self, key: str) -> Category | None:
        result = await self.db.execute(
            select(Category).where(
                Category.user_id == self.user_id,
                Category.name_key == key,
            ),
        )
        return result.scalar_one_or_none()
