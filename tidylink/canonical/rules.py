"""
Redirector unwrapping rules.

Mail and search providers wrap outbound links in their own redirector
(``https://l.google.com/url?...&url=<encoded destination>``). A RedirectRule
recognizes one such family by regular expression and pulls the encoded
destination out of a named group.

Rules are matched against the *string form* of the already-cleaned URL, so
they see the query exactly as it was re-encoded (``https%3A%2F%2F...``).

Adding a provider:

    >>> rule = compile_rule("example", r"https?://r\\.example\\.net/go\\?.*?to=(?P<target>[^&]+)")
    >>> Canonicalizer(redirect_rules=DEFAULT_REDIRECT_RULES + (rule,))  # doctest: +SKIP
"""

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

from .decoding import is_encodable, query_unescape


@dataclass(frozen=True)
class RedirectRule:
    """A redirector pattern and the group that holds the wrapped destination."""
    name: str
    pattern: Pattern[str]
    group: str = "target"

    def extract(self, url: str) -> Optional[str]:
        """
        Return the decoded destination, or None when the rule does not apply.

        A match whose captured value fails to decode, or decodes to bytes that
        are not UTF-8, also returns None, so the caller falls back to the
        cleaned URL.
        """
        match = self.pattern.search(url)
        if match is None:
            return None
        try:
            target = query_unescape(match.group(self.group))
        except ValueError:
            return None
        return target if is_encodable(target) else None


def compile_rule(name: str, pattern: str, group: str = "target") -> RedirectRule:
    return RedirectRule(name=name, pattern=re.compile(pattern), group=group)


# Google / Outlook-through-Google link wrappers: l.google.com, out.google.com (optionally www.)
GOOGLE_REDIRECT_RULE = compile_rule(
    "google",
    r"https?://(www\.)?(l|out)\.google\.com/url\?.*?url=(?P<target>[^&]+)",
)

DEFAULT_REDIRECT_RULES: Tuple[RedirectRule, ...] = (GOOGLE_REDIRECT_RULE,)
