"""
Global pytest fixtures for the Tidylink test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide isolated in-memory storage, LinkStore and AppContext fixtures
    - Keep the module-level `main.app` off the filesystem (memory backend,
      no background sweep) when test modules import `main`

Why an app factory?
    Using `create_app(context)` gives each test its own storage, so no state
    leaks between tests.
"""

import os

# Must be set before `main` / `tidylink.config` are imported anywhere.
os.environ.setdefault("TIDYLINK_STORAGE_BACKEND", "memory")
os.environ.setdefault("TIDYLINK_SWEEP_INTERVAL_SECONDS", "0")

import pytest
from fastapi.testclient import TestClient

from main import create_app
from tidylink.config import load_settings
from tidylink.context import AppContext, build_context
from tidylink.manager.link_store import LinkStore
from tidylink.storage.storage import MemoryStorage


@pytest.fixture
def storage() -> MemoryStorage:
    """Fresh in-memory storage backend."""
    return MemoryStorage()


@pytest.fixture
def store(storage: MemoryStorage) -> LinkStore:
    """LinkStore wired to the storage fixture with default code settings."""
    return LinkStore(storage=storage)


@pytest.fixture
def settings(monkeypatch):
    """Settings for an in-memory, sweep-disabled app with a recognizable domain."""
    monkeypatch.setenv("TIDYLINK_STORAGE_BACKEND", "memory")
    monkeypatch.setenv("TIDYLINK_SHORT_DOMAIN", "https://tidy.example")
    monkeypatch.setenv("TIDYLINK_SWEEP_INTERVAL_SECONDS", "0")
    return load_settings()


@pytest.fixture
def context(settings, storage) -> AppContext:
    return build_context(settings, storage=storage)


@pytest.fixture
def client(context: AppContext) -> TestClient:
    """
    Provide a TestClient over a new app instance.

    Redirects are not followed so tests can inspect the 302 itself.
    """
    return TestClient(create_app(context), follow_redirects=False)
