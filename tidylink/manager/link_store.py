"""
LinkStore module for Tidylink.

Responsibilities:
    - Issue random short codes for canonical URLs and persist them
    - Resolve codes back to URLs
    - Apply the retention policy (sweep links older than N days)

Design notes:
    - LinkStore is the only owner of Link records; callers never touch the
      storage backend directly.
    - No dedupe by URL: every create() issues a new code, even for a URL
      that is already stored. Callers may rely on distinct codes per request.
    - Collision handling: a code rejected by the backend (or a reserved code)
      is regenerated, up to `max_attempts` draws; after that StorageError.
    - Backend failures are never retried here. The HTTP layer reports them,
      and the periodic sweep simply tries again on its next run.
    - Expired and never-existing codes are indistinguishable to resolve().
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, FrozenSet, Iterable, Optional

from ..errors import StorageError
from ..storage.base import BaseStorage, Link
from .strategies import DEFAULT_CODE_LENGTH, BaseStrategy, RandomStrategy

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LinkStore:
    """
    Issues, resolves and expires short links on top of a storage backend.

    Args:
        storage (BaseStorage): Backend holding the `links` table.
        strategy (Optional[BaseStrategy]): Code generator (RandomStrategy by default).
        code_length (int): Length of generated codes.
        max_attempts (int): Codes drawn per create() before giving up on collisions.
        reserved_codes (Iterable[str]): Codes never issued (they would shadow routes).
        clock (Callable[[], datetime]): Source of aware UTC "now".
    """

    def __init__(
        self,
        storage: BaseStorage,
        strategy: Optional[BaseStrategy] = None,
        code_length: int = DEFAULT_CODE_LENGTH,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        reserved_codes: Iterable[str] = (),
        clock: Callable[[], datetime] = utcnow,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.storage = storage
        self.strategy = strategy or RandomStrategy()
        self.code_length = code_length
        self.max_attempts = max_attempts
        self.reserved_codes: FrozenSet[str] = frozenset(reserved_codes)
        self.clock = clock

    def create(self, canonical_url: str) -> str:
        """
        Store `canonical_url` under a freshly generated code.

        Returns:
            str: The new code.

        Raises:
            StorageError: On backend failure, or when every attempt collided.
        """
        for attempt in range(1, self.max_attempts + 1):
            code = self.strategy.generate(self.code_length)
            if code in self.reserved_codes:
                logger.warning("Generated reserved code %r; regenerating", code)
                continue
            link = Link(code=code, url=canonical_url, created_at=self.clock())
            if self.storage.insert_link(link):
                logger.debug("Created link %s -> %s", code, canonical_url)
                return code
            logger.warning("Code collision on %r (attempt %d/%d)", code, attempt, self.max_attempts)
        raise StorageError(f"could not allocate a unique code after {self.max_attempts} attempts")

    def resolve(self, code: str) -> Optional[str]:
        """Return the URL stored under `code`, or None when there is none."""
        if not code:
            return None
        link = self.storage.get_link(code)
        return link.url if link is not None else None

    def sweep_expired(self, retention_days: int, now: Optional[datetime] = None) -> int:
        """
        Delete links created more than `retention_days` days before `now`.

        Returns:
            int: Number of links removed.

        Raises:
            ValueError: If `retention_days` is negative.
            StorageError: On backend failure.
        """
        if retention_days < 0:
            raise ValueError("retention_days must be non-negative")
        cutoff = (now or self.clock()) - timedelta(days=retention_days)
        removed = self.storage.delete_older_than(cutoff)
        logger.info("Swept %d link(s) created before %s", removed, cutoff.isoformat())
        return removed
