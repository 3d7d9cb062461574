"""Abstract base class for the relational row store.

Notes and bookmarks live in a relational store with row-level ownership:
every operation is scoped to an ``owner_id`` and can never read or write
another user's rows.  The interface is deliberately small -- filtered
select, insert, update and delete -- because everything else about the
store (schema migrations, folders, profiles) is ordinary CRUD plumbing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


# Concrete implementation: SQLiteRowStore
# Located in: mindmarks/providers/store/
class IRowStore(ABC):
    """Contract for owner-scoped row persistence."""

    @abstractmethod
    async def select(
        self,
        table: str,
        owner_id: str,
        *,
        filters: dict[str, Any] | None = None,
        contains: dict[str, str] | None = None,
        equals_ci: dict[str, str] | None = None,
        columns: list[str] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return rows of *table* owned by *owner_id*.

        Parameters
        ----------
        filters:
            Exact column equality filters.
        contains:
            Case-insensitive substring filters (SQL ``LIKE %value%``).
        equals_ci:
            Case-insensitive equality filters.
        columns:
            Columns to return; all columns when omitted.
        limit:
            Maximum number of rows.
        """

    @abstractmethod
    async def insert(self, table: str, owner_id: str, values: dict[str, Any]) -> dict[str, Any]:
        """Insert a row owned by *owner_id* and return it (with generated id)."""

    @abstractmethod
    async def update(
        self,
        table: str,
        owner_id: str,
        row_id: str,
        values: dict[str, Any],
    ) -> bool:
        """Update one owned row; return ``False`` if no such row exists."""

    @abstractmethod
    async def delete(self, table: str, owner_id: str, row_id: str) -> bool:
        """Delete one owned row; return ``False`` if no such row exists."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this store."""
