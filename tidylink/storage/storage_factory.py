"""
Storage factory – switch storage backend from config (lazy env version)
======================================================================

Centralizes selection of the storage backend so the rest of the app stays
ignorant of where links live.

- Reads environment **at call time** to avoid stale values in tests.
- Imports the Postgres backend **only if** it is selected, so psycopg is not
  loaded for SQLite or in-memory runs.

Environment variables
---------------------
- TIDYLINK_STORAGE_BACKEND: "sqlite" (default), "memory" or "postgres"
- TIDYLINK_DB_PATH:         SQLite file if backend == "sqlite"
- TIDYLINK_DB_DSN:          DSN string if backend == "postgres"
"""

from typing import Optional
import logging
import os

from tidylink.storage.base import BaseStorage
from tidylink.storage.sqlite_storage import SQLiteStorage
from tidylink.storage.storage import MemoryStorage

logger = logging.getLogger(__name__)


def get_storage(backend: Optional[str] = None, **kwargs) -> BaseStorage:
    """
    Return a storage backend based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory", "sqlite" or "postgres". If omitted, reads TIDYLINK_STORAGE_BACKEND.
    kwargs : dict
        `path=` for sqlite, `dsn=` for postgres; fall back to the environment.

    Raises
    ------
    ValueError
        Unknown backend, or postgres selected without a DSN.
    """
    be = (backend or os.getenv("TIDYLINK_STORAGE_BACKEND", "sqlite")).strip().lower()
    logger.info("Selected storage backend: %r", be)

    if be == "memory":
        return MemoryStorage()

    if be == "sqlite":
        path = kwargs.get("path") or os.getenv("TIDYLINK_DB_PATH", "./shortlinks.db")
        return SQLiteStorage(path=path)

    if be == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("TIDYLINK_DB_DSN", "")
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env TIDYLINK_DB_DSN)")
        # Local import to avoid hard dependency when not using postgres
        from tidylink.storage.db_storage import DBStorage
        return DBStorage(dsn=dsn)

    raise ValueError(f"Unknown storage backend: {be!r}")
