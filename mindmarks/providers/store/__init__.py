"""Row store adapters."""

from mindmarks.providers.store.sqlite_row_store import SQLiteRowStore

__all__ = ["SQLiteRowStore"]
