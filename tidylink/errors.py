"""
Error taxonomy for Tidylink.

Responsibilities:
    - Give the HTTP layer and the sweep script a small, stable set of
      exceptions to map onto client/server failures.

Mapping:
    - InvalidURLError -> 400 (client sent something that is not a URL)
    - StorageError    -> 500 (persistence engine failed; never retried here)
    - not found       -> not an exception; LinkStore.resolve returns None
"""


class TidylinkError(Exception):
    """Base class for all errors raised by the tidylink package."""


class InvalidURLError(TidylinkError, ValueError):
    """Raw input could not be turned into a canonical URL."""


class StorageError(TidylinkError):
    """A storage backend failed to open, insert, query or delete."""
