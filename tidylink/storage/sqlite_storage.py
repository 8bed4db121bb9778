"""
SQLiteStorage: file-backed storage for Tidylink
===============================================

Default backend. Keeps the `links` table in a single SQLite file, which is
enough for one process (or a few) on one host. Implements `BaseStorage`, so
swapping to Postgres is a config change.

Key Design Points
-----------------
- **Connections**: one short-lived connection per call; each write runs in its
  own transaction (`with con:`), so an abandoned request never leaves a half
  written row behind.
- **Uniqueness**: `code TEXT UNIQUE`; a duplicate insert surfaces as
  `sqlite3.IntegrityError` and is reported as `False`, not as an error.
- **Timestamps**: stored as UTC text `YYYY-MM-DD HH:MM:SS.ffffff`. The format
  sorts lexicographically, so the sweep compares strings in SQL.
- `:memory:` is not supported (every call would see a fresh database); use
  the in-memory backend instead.

Example
-------
>>> storage = SQLiteStorage("/tmp/links.db")
>>> storage.init_schema()
>>> storage.get_link("missing") is None
True
"""

import contextlib
import logging
import sqlite3
from datetime import datetime, timezone
from typing import Iterator, Optional

from ..errors import StorageError
from .base import BaseStorage, Link

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

SCHEMA = """
CREATE TABLE IF NOT EXISTS links (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    code TEXT UNIQUE NOT NULL,
    url TEXT NOT NULL,
    created_at TIMESTAMP NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_links_created_at ON links (created_at);
"""


def format_timestamp(value: datetime) -> str:
    """Render an aware datetime as naive UTC text."""
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(raw: str) -> datetime:
    """Inverse of `format_timestamp`; also accepts ISO-8601 text with an offset."""
    try:
        parsed = datetime.strptime(raw, TIMESTAMP_FORMAT)
    except ValueError:
        parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class SQLiteStorage(BaseStorage):
    """SQLite implementation of the Tidylink storage contract.

    Parameters
    ----------
    path : str
        Filesystem path of the database file (created on first use).
    timeout : float
        Seconds to wait on a locked database before failing.
    """

    def __init__(self, path: str, timeout: float = 5.0) -> None:
        self.path = path
        self.timeout = timeout

    # ---- Internal helpers -------------------------------------------------

    @contextlib.contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        """Open a connection, translating open failures into StorageError."""
        try:
            con = sqlite3.connect(self.path, timeout=self.timeout)
        except sqlite3.Error as exc:
            raise StorageError(f"cannot open sqlite database {self.path!r}: {exc}") from exc
        try:
            yield con
        finally:
            con.close()

    # ---- Contract methods -------------------------------------------------

    def init_schema(self) -> None:
        try:
            with self._conn() as con:
                con.executescript(SCHEMA)
        except sqlite3.Error as exc:
            raise StorageError(f"cannot create links table: {exc}") from exc
        logger.info("SQLite storage ready at %s", self.path)

    def insert_link(self, link: Link) -> bool:
        try:
            with self._conn() as con, con:
                con.execute(
                    "INSERT INTO links (code, url, created_at) VALUES (?, ?, ?)",
                    (link.code, link.url, format_timestamp(link.created_at)),
                )
        except sqlite3.IntegrityError:
            return False
        except sqlite3.Error as exc:
            raise StorageError(f"insert failed: {exc}") from exc
        return True

    def get_link(self, code: str) -> Optional[Link]:
        try:
            with self._conn() as con:
                row = con.execute(
                    "SELECT code, url, created_at FROM links WHERE code = ?", (code,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"query failed: {exc}") from exc
        if row is None:
            return None
        try:
            created_at = parse_timestamp(row[2])
        except (TypeError, ValueError) as exc:
            raise StorageError(f"bad created_at for code {code!r}: {row[2]!r}") from exc
        return Link(code=row[0], url=row[1], created_at=created_at)

    def delete_older_than(self, cutoff: datetime) -> int:
        try:
            with self._conn() as con, con:
                cur = con.execute(
                    "DELETE FROM links WHERE created_at < ?", (format_timestamp(cutoff),)
                )
                return cur.rowcount
        except sqlite3.Error as exc:
            raise StorageError(f"delete failed: {exc}") from exc
