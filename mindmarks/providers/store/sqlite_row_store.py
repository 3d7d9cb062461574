"""SQLite-backed row store for notes and bookmarks.

Persists rows to a local SQLite database (``data/mindmarks.db`` by
default) using ``aiosqlite`` for async I/O.  Every statement carries a
``user_id = ?`` predicate so callers can only ever touch their own rows.
Embedding vectors are stored as JSON text and decoded on read.
"""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from mindmarks.interfaces.row_store import IRowStore
from mindmarks.utils.errors import StoreError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/mindmarks.db")

_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ', 'now')"

_CREATE_TABLES_SQL = [
    f"""\
CREATE TABLE IF NOT EXISTS notes (
    id                    TEXT PRIMARY KEY,
    user_id               TEXT NOT NULL,
    title                 TEXT NOT NULL DEFAULT '',
    content               TEXT NOT NULL DEFAULT '',
    summary               TEXT,
    embedding             TEXT,
    embedding_cache_key   TEXT,
    embedding_updated_at  TEXT,
    created_at            TEXT NOT NULL DEFAULT ({_NOW_SQL}),
    updated_at            TEXT NOT NULL DEFAULT ({_NOW_SQL})
);
""",
    f"""\
CREATE TABLE IF NOT EXISTS bookmarks (
    id                    TEXT PRIMARY KEY,
    user_id               TEXT NOT NULL,
    title                 TEXT NOT NULL DEFAULT '',
    url                   TEXT NOT NULL DEFAULT '',
    description           TEXT,
    embedding             TEXT,
    embedding_cache_key   TEXT,
    embedding_updated_at  TEXT,
    created_at            TEXT NOT NULL DEFAULT ({_NOW_SQL}),
    updated_at            TEXT NOT NULL DEFAULT ({_NOW_SQL})
);
""",
]

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_notes_user ON notes(user_id);",
    "CREATE INDEX IF NOT EXISTS idx_bookmarks_user ON bookmarks(user_id);",
]

# Whitelist of tables and their columns; identifiers are never taken from
# request data without passing through this map.
_TABLE_COLUMNS: dict[str, tuple[str, ...]] = {
    "notes": (
        "id", "user_id", "title", "content", "summary", "embedding",
        "embedding_cache_key", "embedding_updated_at", "created_at", "updated_at",
    ),
    "bookmarks": (
        "id", "user_id", "title", "url", "description", "embedding",
        "embedding_cache_key", "embedding_updated_at", "created_at", "updated_at",
    ),
}

_JSON_COLUMNS = frozenset({"embedding"})


def _check_columns(table: str, columns: list[str] | tuple[str, ...]) -> None:
    allowed = _TABLE_COLUMNS.get(table)
    if allowed is None:
        raise StoreError(f"Unknown table: {table}", provider_name="sqlite")
    unknown = [c for c in columns if c not in allowed]
    if unknown:
        raise StoreError(f"Unknown column(s) for {table}: {', '.join(unknown)}", provider_name="sqlite")


def _encode(values: dict[str, Any]) -> dict[str, Any]:
    return {
        k: (json.dumps(v) if k in _JSON_COLUMNS and v is not None else v)
        for k, v in values.items()
    }


def _decode(row: aiosqlite.Row) -> dict[str, Any]:
    result = dict(row)
    for column in _JSON_COLUMNS & result.keys():
        if result[column] is not None:
            try:
                result[column] = json.loads(result[column])
            except json.JSONDecodeError:
                result[column] = None
    return result


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLiteRowStore(IRowStore):
    """SQLite-backed, owner-scoped persistence for notes and bookmarks."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the tables and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            for table_sql in _CREATE_TABLES_SQL:
                await db.execute(table_sql)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("row_store_initialized", path=str(self._db_path))

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
        filters = filters or {}
        contains = contains or {}
        equals_ci = equals_ci or {}
        selected = columns or list(_TABLE_COLUMNS.get(table, ()))
        _check_columns(table, [*selected, *filters, *contains, *equals_ci])

        clauses = ["user_id = ?"]
        params: list[Any] = [owner_id]
        for column, value in filters.items():
            clauses.append(f"{column} = ?")
            params.append(value)
        for column, value in contains.items():
            clauses.append(f"{column} LIKE ? ESCAPE '\\'")
            params.append(f"%{_escape_like(value)}%")
        for column, value in equals_ci.items():
            clauses.append(f"lower({column}) = lower(?)")
            params.append(value)

        sql = (
            f"SELECT {', '.join(selected)} FROM {table} "
            f"WHERE {' AND '.join(clauses)} ORDER BY created_at DESC"
        )
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))

        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(sql, params)
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise StoreError(f"SQLite select failed: {exc}", provider_name="sqlite") from exc
        return [_decode(r) for r in rows]

    async def insert(self, table: str, owner_id: str, values: dict[str, Any]) -> dict[str, Any]:
        row = {k: v for k, v in values.items() if k not in ("user_id", "created_at", "updated_at")}
        row.setdefault("id", str(uuid.uuid4()))
        row["user_id"] = owner_id
        _check_columns(table, list(row))
        encoded = _encode(row)
        placeholders = ", ".join("?" for _ in encoded)

        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                await db.execute(
                    f"INSERT INTO {table} ({', '.join(encoded)}) VALUES ({placeholders})",
                    list(encoded.values()),
                )
                await db.commit()
                cursor = await db.execute(
                    f"SELECT * FROM {table} WHERE id = ? AND user_id = ?",
                    (row["id"], owner_id),
                )
                inserted = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StoreError(f"SQLite insert failed: {exc}", provider_name="sqlite") from exc

        logger.info("row_inserted", table=table, row_id=row["id"])
        return _decode(inserted)

    async def update(
        self,
        table: str,
        owner_id: str,
        row_id: str,
        values: dict[str, Any],
    ) -> bool:
        changes = {k: v for k, v in values.items() if k not in ("id", "user_id", "created_at")}
        if not changes:
            return bool(await self.select(table, owner_id, filters={"id": row_id}, columns=["id"]))
        _check_columns(table, list(changes))
        encoded = _encode(changes)
        assignments = ", ".join(f"{column} = ?" for column in encoded)
        if "updated_at" not in encoded:
            assignments += f", updated_at = {_NOW_SQL}"

        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    f"UPDATE {table} SET {assignments} WHERE id = ? AND user_id = ?",
                    [*encoded.values(), row_id, owner_id],
                )
                await db.commit()
                updated = cursor.rowcount
        except aiosqlite.Error as exc:
            raise StoreError(f"SQLite update failed: {exc}", provider_name="sqlite") from exc
        return updated > 0

    async def delete(self, table: str, owner_id: str, row_id: str) -> bool:
        _check_columns(table, ["id"])
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    f"DELETE FROM {table} WHERE id = ? AND user_id = ?",
                    (row_id, owner_id),
                )
                await db.commit()
                deleted = cursor.rowcount
        except aiosqlite.Error as exc:
            raise StoreError(f"SQLite delete failed: {exc}", provider_name="sqlite") from exc
        if deleted:
            logger.info("row_deleted", table=table, row_id=row_id)
        return deleted > 0

    def get_provider_name(self) -> str:
        return "sqlite"
