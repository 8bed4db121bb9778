"""
Application context for Tidylink.

Everything a request handler or background task needs (settings,
canonicalizer, link store, logger) is built once at startup and passed in
explicitly. Nothing is looked up from module globals at request time, so tests
can run isolated apps side by side.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .canonical import Canonicalizer
from .config import _Settings, load_settings
from .manager.link_store import LinkStore
from .storage.base import BaseStorage
from .storage.storage_factory import get_storage

# Paths served by fixed routes (ours plus FastAPI docs); a code equal to one
# of these would be unreachable.
RESERVED_CODES = frozenset({"shorten", "docs", "redoc"})


@dataclass
class AppContext:
    settings: _Settings
    canonicalizer: Canonicalizer
    links: LinkStore
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("tidylink"))


def build_context(
    settings: Optional[_Settings] = None,
    storage: Optional[BaseStorage] = None,
    reserved_codes: Iterable[str] = RESERVED_CODES,
) -> AppContext:
    """
    Wire settings, storage and the core components together.

    The storage schema is initialized here, so a StorageError from this call
    means the service cannot start.

    Raises:
        StorageError: If the backend cannot be opened or initialized.
        ValueError: If the configured backend is unknown or misconfigured.
    """
    settings = settings or load_settings()
    if storage is None:
        storage = get_storage(
            settings.STORAGE_BACKEND, path=settings.DB_PATH, dsn=settings.DB_DSN
        )
    storage.init_schema()

    links = LinkStore(
        storage=storage,
        code_length=settings.CODE_LENGTH,
        max_attempts=settings.CODE_MAX_ATTEMPTS,
        reserved_codes=reserved_codes,
    )
    return AppContext(settings=settings, canonicalizer=Canonicalizer(), links=links)
