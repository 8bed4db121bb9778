"""
Percent-decoding helpers used by the canonicalizer.

`query_unescape` follows form/query rules: `%XX` escapes are decoded and `+`
becomes a space. Unlike `urllib.parse.unquote`, it refuses a `%` not followed
by two hex digits, so the decode loop can tell "nothing left to decode" apart
from "cannot decode".

Bytes that are not valid UTF-8 (``%E9`` from a Latin-1 form) decode to lone
surrogates instead of U+FFFD. Re-encoding with ``errors="surrogateescape"``
gives back the original bytes, so such URLs survive canonicalization intact.
"""

import re
from urllib.parse import unquote_to_bytes

from ..errors import InvalidURLError

MAX_DECODE_PASSES = 8

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def query_unescape(value: str) -> str:
    """
    Decode one layer of query-style percent-encoding.

    Raises:
        ValueError: On a malformed escape.
    """
    if _BAD_ESCAPE.search(value):
        raise ValueError(f"invalid percent-escape in {value!r}")
    raw = value.replace("+", " ").encode("utf-8", "surrogateescape")
    return unquote_to_bytes(raw).decode("utf-8", "surrogateescape")


def is_encodable(value: str) -> bool:
    """True when `value` holds no undecodable bytes (lone surrogates)."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def full_decode(raw: str, max_passes: int = MAX_DECODE_PASSES) -> str:
    """
    Decode `raw` repeatedly until a pass changes nothing or fails.

    Multiply-encoded input (``https%253A%252F%252F...``) converges to the same
    string as its singly-encoded form. A decode error stops the loop and keeps
    the last good value. Up to `max_passes` layers are removed; one further
    pass confirms nothing is left.

    Raises:
        InvalidURLError: If the value is still changing after `max_passes` passes.
    """
    decoded = raw
    for passes in range(max_passes + 1):
        try:
            candidate = query_unescape(decoded)
        except ValueError:
            return decoded
        if candidate == decoded:
            return decoded
        if passes == max_passes:
            break
        decoded = candidate
    raise InvalidURLError(f"URL still changing after {max_passes} decode passes")
