"""
Base storage interface for Tidylink.

Purpose:
    Define a small, stable contract that the storage backends
    (in-memory, SQLite, PostgreSQL) implement, so LinkStore never needs to
    know where rows live.

Contract rules:
    - Every method is a single atomic operation against the backend; a
      partially written Link must never be visible to `get_link`.
    - `insert_link` reports a taken code by returning False. Any other
      failure raises StorageError.
    - Links are never updated in place; the only delete path is
      `delete_older_than`.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Link:
    """One short-code mapping. `created_at` is timezone-aware UTC."""
    code: str
    url: str
    created_at: datetime


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod  # pragma: no cover
    def init_schema(self) -> None:
        """
        Create the `links` table (and indexes) if missing.

        Raises:
            StorageError: If the backend cannot be opened or migrated.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def insert_link(self, link: Link) -> bool:
        """
        Persist a new Link.

        Returns:
            bool: True if inserted, False if `link.code` is already taken.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_link(self, code: str) -> Optional[Link]:
        """Return the Link stored under `code`, or None."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def delete_older_than(self, cutoff: datetime) -> int:
        """
        Delete every Link with `created_at < cutoff`.

        Returns:
            int: Number of rows removed.
        """
        raise NotImplementedError
