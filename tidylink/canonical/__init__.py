"""
URL canonicalization: decode loop, tracking-parameter removal, redirector unwrapping.
"""

from .canonicalizer import TRACKING_PARAMS, Canonicalizer, canonicalize
from .decoding import MAX_DECODE_PASSES, full_decode, query_unescape
from .rules import DEFAULT_REDIRECT_RULES, GOOGLE_REDIRECT_RULE, RedirectRule, compile_rule

__all__ = [
    "Canonicalizer",
    "canonicalize",
    "TRACKING_PARAMS",
    "MAX_DECODE_PASSES",
    "full_decode",
    "query_unescape",
    "RedirectRule",
    "compile_rule",
    "GOOGLE_REDIRECT_RULE",
    "DEFAULT_REDIRECT_RULES",
]
