"""
Canonicalizer module for Tidylink.

Responsibilities:
    - Turn raw, user-pasted text into the URL we actually store
    - Trim whitespace and one layer of email-client angle brackets
    - Undo repeated percent-encoding (bounded)
    - Drop tracking query parameters without reordering the rest
    - Unwrap known redirector links to their real destination

Design notes:
    - Pure and deterministic: no I/O, no network lookups to follow redirects.
    - InvalidURLError is the only exception that leaves this module.
    - Tracking names and redirector rules are constructor arguments; the
      module-level `canonicalize` uses the defaults below.

Example:
    >>> canonicalize("  <http://example.com/a?utm_source=x&id=5>  ")
    'http://example.com/a?id=5'
"""

import logging
import re
from typing import FrozenSet, Iterable, Optional, Sequence
from urllib.parse import SplitResult, parse_qsl, quote, urlencode, urlsplit, urlunsplit

from ..errors import InvalidURLError
from .decoding import MAX_DECODE_PASSES, full_decode, is_encodable
from .rules import DEFAULT_REDIRECT_RULES, RedirectRule

logger = logging.getLogger(__name__)

TRACKING_PARAMS: FrozenSet[str] = frozenset({
    "utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content",
    "fbclid", "gclid", "mc_eid", "mc_cid", "trk", "msclkid", "dclid",
})

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

# Characters left unescaped when re-serializing path and fragment.
_PATH_SAFE = "/:@!$&'()*+,;="
_FRAGMENT_SAFE = _PATH_SAFE + "?"

# An escape the decode loop stopped in front of; left as is on output.
_VALID_ESCAPE = re.compile(r"(%[0-9A-Fa-f]{2})")


def strip_delimiters(raw: str) -> str:
    """Trim surrounding whitespace, then a single leading '<' and trailing '>'."""
    text = raw.strip()
    if text.startswith("<"):
        text = text[1:]
    if text.endswith(">"):
        text = text[:-1]
    return text


def escape_component(text: str, safe: str) -> str:
    """
    Percent-escape `text` for output, keeping existing `%XX` escapes.

    Undecodable bytes (lone surrogates from the decode loop) are written back
    as the `%XX` escapes they came from.
    """
    parts = _VALID_ESCAPE.split(text)
    return "".join(
        part if i % 2 else quote(part, safe=safe, errors="surrogateescape")
        for i, part in enumerate(parts)
    )


def strip_tracking_params(query: str, names: Iterable[str] = TRACKING_PARAMS) -> str:
    """
    Remove parameters whose name is exactly in `names` and re-encode the rest.

    Order and values of the surviving parameters are preserved; blank values
    are kept (``flag`` is rebuilt as ``flag=``).
    """
    denied = frozenset(names)
    pairs = [
        (k, v)
        for k, v in parse_qsl(query, keep_blank_values=True, errors="surrogateescape")
        if k not in denied
    ]
    return urlencode(pairs, errors="surrogateescape")


def parse_url(decoded: str) -> SplitResult:
    """
    Split `decoded` into URL parts, rejecting anything we cannot redirect to.

    Raises:
        InvalidURLError: Empty input, control characters, malformed host/port,
            a host that is not UTF-8, or a missing scheme or host.
    """
    if not decoded:
        raise InvalidURLError("empty URL")
    if _CONTROL_CHARS.search(decoded):
        raise InvalidURLError("URL contains control characters")
    try:
        parts = urlsplit(decoded)
        parts.port  # raises ValueError on a non-numeric or out-of-range port
    except ValueError as exc:
        raise InvalidURLError(f"cannot parse URL: {exc}") from exc
    if not parts.scheme or not parts.netloc:
        raise InvalidURLError("URL must have a scheme and a host")
    if not is_encodable(parts.netloc):
        raise InvalidURLError("host is not valid UTF-8")
    return parts


class Canonicalizer:
    """
    Configurable URL canonicalizer.

    Args:
        tracking_params: Query parameter names to drop (exact, case-sensitive).
        redirect_rules: Redirector rules tried in order after cleaning.
        max_decode_passes: Upper bound on percent-decoding passes.
    """

    def __init__(
        self,
        tracking_params: Iterable[str] = TRACKING_PARAMS,
        redirect_rules: Sequence[RedirectRule] = DEFAULT_REDIRECT_RULES,
        max_decode_passes: int = MAX_DECODE_PASSES,
    ):
        self.tracking_params = frozenset(tracking_params)
        self.redirect_rules = tuple(redirect_rules)
        self.max_decode_passes = max_decode_passes

    def canonicalize(self, raw: str) -> str:
        """
        Return the canonical form of `raw`.

        Raises:
            InvalidURLError: If `raw` cannot be decoded or parsed as a URL.
        """
        decoded = full_decode(strip_delimiters(raw), self.max_decode_passes)
        parts = parse_url(decoded)

        cleaned = urlunsplit((
            parts.scheme,
            parts.netloc,
            escape_component(parts.path, _PATH_SAFE),
            strip_tracking_params(parts.query, self.tracking_params),
            escape_component(parts.fragment, _FRAGMENT_SAFE),
        ))

        unwrapped = self._unwrap(cleaned)
        return unwrapped if unwrapped is not None else cleaned

    def _unwrap(self, url: str) -> Optional[str]:
        for rule in self.redirect_rules:
            target = rule.extract(url)
            if target is not None:
                logger.debug("Unwrapped %s redirector to %s", rule.name, target)
                return target
        return None


_default = Canonicalizer()


def canonicalize(raw: str) -> str:
    """Canonicalize `raw` with the default tracking list and redirector rules."""
    return _default.canonicalize(raw)
