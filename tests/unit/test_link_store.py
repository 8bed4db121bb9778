"""
Unit tests for LinkStore.

Covers:
    - create/resolve round trip and code shape
    - no dedupe by URL
    - collision retry (bounded) and reserved codes
    - storage failures surface as StorageError without retry
    - sweep_expired retention boundary
"""

import re
from datetime import datetime, timedelta, timezone
from itertools import cycle
from unittest.mock import Mock

import pytest

from tidylink.errors import StorageError
from tidylink.manager.link_store import LinkStore
from tidylink.manager.strategies import BaseStrategy
from tidylink.storage.base import Link
from tidylink.storage.storage import MemoryStorage

CODE_RE = re.compile(r"^[a-zA-Z0-9]{6}$")
NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class ScriptedStrategy(BaseStrategy):
    """Returns codes from a fixed sequence, to force collisions."""

    def __init__(self, *codes):
        self._codes = cycle(codes)
        self.calls = 0

    def generate(self, length=6):
        self.calls += 1
        return next(self._codes)


def test_create_returns_six_char_alphanumeric_code(store):
    code = store.create("http://a.example.com")
    assert CODE_RE.match(code)


def test_round_trip(store):
    url = "https://example.com/a?id=5"
    assert store.resolve(store.create(url)) == url


def test_same_url_twice_gets_distinct_codes(store, storage):
    c1 = store.create("http://a.example.com")
    c2 = store.create("http://a.example.com")
    assert c1 != c2
    assert len(storage) == 2


def test_resolve_unknown_code(store):
    assert store.resolve("nonexistent-code") is None


def test_resolve_empty_code_skips_storage():
    storage = Mock()
    assert LinkStore(storage=storage).resolve("") is None
    storage.get_link.assert_not_called()


def test_created_at_comes_from_clock(storage):
    store = LinkStore(storage=storage, clock=lambda: NOW)
    code = store.create("https://example.com")
    assert storage.get_link(code).created_at == NOW


def test_collision_is_retried_with_new_code(storage):
    storage.insert_link(Link("taken1", "https://old.example", NOW))
    strategy = ScriptedStrategy("taken1", "fresh1")
    store = LinkStore(storage=storage, strategy=strategy)

    code = store.create("https://new.example")

    assert code == "fresh1"
    assert strategy.calls == 2
    assert store.resolve("taken1") == "https://old.example"  # original untouched


def test_repeated_collisions_raise_after_bound(storage):
    storage.insert_link(Link("taken1", "https://old.example", NOW))
    strategy = ScriptedStrategy("taken1")
    store = LinkStore(storage=storage, strategy=strategy, max_attempts=5)

    with pytest.raises(StorageError, match="5 attempts"):
        store.create("https://new.example")
    assert strategy.calls == 5


def test_reserved_codes_are_never_issued(storage):
    strategy = ScriptedStrategy("shorten", "abc123")
    store = LinkStore(storage=storage, strategy=strategy, reserved_codes={"shorten"})
    assert store.create("https://example.com") == "abc123"
    assert storage.get_link("shorten") is None


def test_storage_failure_is_not_retried():
    storage = Mock()
    storage.insert_link.side_effect = StorageError("disk full")
    store = LinkStore(storage=storage)
    with pytest.raises(StorageError, match="disk full"):
        store.create("https://example.com")
    assert storage.insert_link.call_count == 1


def test_max_attempts_must_be_positive(storage):
    with pytest.raises(ValueError):
        LinkStore(storage=storage, max_attempts=0)


# -------------------------
# Retention sweep
# -------------------------

def _seed(storage, code, age):
    storage.insert_link(Link(code, f"https://{code}.example", NOW - age))


def test_sweep_removes_only_links_past_retention(store, storage):
    _seed(storage, "old001", timedelta(days=45))
    _seed(storage, "old002", timedelta(days=30, seconds=1))
    _seed(storage, "new001", timedelta(days=29, hours=23))
    _seed(storage, "new002", timedelta(minutes=5))

    removed = store.sweep_expired(30, now=NOW)

    assert removed == 2
    assert store.resolve("old001") is None
    assert store.resolve("old002") is None
    assert store.resolve("new001") == "https://new001.example"
    assert store.resolve("new002") == "https://new002.example"


def test_sweep_boundary_is_exclusive(store, storage):
    _seed(storage, "edge01", timedelta(days=30))
    assert store.sweep_expired(30, now=NOW) == 0
    assert store.resolve("edge01") is not None


def test_sweep_zero_days_removes_everything_older_than_now(store, storage):
    _seed(storage, "recent", timedelta(seconds=1))
    assert store.sweep_expired(0, now=NOW) == 1


def test_sweep_uses_clock_when_now_omitted(storage):
    _seed(storage, "old001", timedelta(days=31))
    store = LinkStore(storage=storage, clock=lambda: NOW)
    assert store.sweep_expired(30) == 1


def test_sweep_rejects_negative_retention(store):
    with pytest.raises(ValueError):
        store.sweep_expired(-1)


def test_sweep_propagates_storage_error():
    storage = Mock()
    storage.delete_older_than.side_effect = StorageError("locked")
    with pytest.raises(StorageError):
        LinkStore(storage=storage).sweep_expired(30, now=NOW)
