"""
End-to-end tests for the one-shot sweep script against a SQLite file.
"""

from datetime import datetime, timedelta, timezone

import pytest

import sweep_links
from tidylink.storage.base import Link
from tidylink.storage.sqlite_storage import SQLiteStorage


@pytest.fixture(autouse=True)
def _keep_pytest_logging(monkeypatch):
    """The script reconfigures the root logger; leave pytest's handlers alone."""
    monkeypatch.setattr(sweep_links, "setup_logging", lambda *args, **kwargs: None)


def _seed(path):
    storage = SQLiteStorage(path)
    storage.init_schema()
    now = datetime.now(timezone.utc)
    storage.insert_link(Link("old001", "https://old.example", now - timedelta(days=10)))
    storage.insert_link(Link("new001", "https://new.example", now - timedelta(days=2)))
    return storage


def test_sweep_script_removes_old_links(tmp_path, capsys):
    path = str(tmp_path / "links.db")
    storage = _seed(path)

    rc = sweep_links.main(["--backend", "sqlite", "--db-path", path, "--days", "7"])

    assert rc == 0
    assert storage.get_link("old001") is None
    assert storage.get_link("new001") is not None
    assert "REMOVED: 1 links older than 7 days" in capsys.readouterr().out


def test_sweep_script_reports_storage_failure(tmp_path):
    bad_path = str(tmp_path / "missing-dir" / "links.db")
    assert sweep_links.main(["--backend", "sqlite", "--db-path", bad_path]) == 1


def test_sweep_script_postgres_without_dsn_fails(monkeypatch):
    monkeypatch.delenv("TIDYLINK_DB_DSN", raising=False)
    assert sweep_links.main(["--backend", "postgres", "--dsn", ""]) == 1
