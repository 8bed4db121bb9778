"""
Storage module for Tidylink (in-memory implementation).

Responsibilities:
    - Keep Links in a dict keyed by code
    - Enforce code uniqueness on insert
    - Support exact-match lookup and age-based deletion

Design:
    - Reference implementation of the BaseStorage contract, used by tests
      and by `TIDYLINK_STORAGE_BACKEND=memory` for throwaway runs.
    - A single lock guards the dict, so concurrent request threads see
      each insert as atomic.
    - Nothing survives a restart; use the SQLite or Postgres backend for that.
"""

import threading
from datetime import datetime
from typing import Dict, Optional

from .base import BaseStorage, Link


class MemoryStorage(BaseStorage):
    def __init__(self):
        """
        Initialize empty storage.

        Internal schema:
            self.links = {code: Link(code, url, created_at)}
        """
        self.links: Dict[str, Link] = {}
        self._lock = threading.Lock()

    def init_schema(self) -> None:
        """Nothing to create for the in-memory backend."""

    def insert_link(self, link: Link) -> bool:
        with self._lock:
            if link.code in self.links:
                return False
            self.links[link.code] = link
            return True

    def get_link(self, code: str) -> Optional[Link]:
        with self._lock:
            return self.links.get(code)

    def delete_older_than(self, cutoff: datetime) -> int:
        with self._lock:
            expired = [code for code, link in self.links.items() if link.created_at < cutoff]
            for code in expired:
                del self.links[code]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self.links)
