"""
Short-code issuance and lookup.
"""

from .link_store import LinkStore
from .strategies import ALPHABET, BaseStrategy, RandomStrategy, generate_code

__all__ = ["LinkStore", "BaseStrategy", "RandomStrategy", "ALPHABET", "generate_code"]
