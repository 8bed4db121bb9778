"""
Storage backends for Tidylink links.
"""

from .base import BaseStorage, Link
from .sqlite_storage import SQLiteStorage
from .storage import MemoryStorage
from .storage_factory import get_storage

__all__ = ["BaseStorage", "Link", "MemoryStorage", "SQLiteStorage", "get_storage"]
