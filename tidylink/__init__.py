"""
tidylink package initializer.
"""

from . import canonical
from . import manager
from . import storage

__version__ = "0.1.0"

__all__ = ["canonical", "manager", "storage"]
