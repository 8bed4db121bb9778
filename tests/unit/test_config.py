from tidylink.config import load_settings


def test_defaults(monkeypatch):
    for name in (
        "TIDYLINK_STORAGE_BACKEND", "TIDYLINK_DB_PATH", "TIDYLINK_SHORT_DOMAIN",
        "TIDYLINK_RETENTION_DAYS", "TIDYLINK_CODE_LENGTH", "TIDYLINK_CODE_MAX_ATTEMPTS",
        "TIDYLINK_SWEEP_INTERVAL_SECONDS", "TIDYLINK_LOG_LEVEL", "TIDYLINK_PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    s = load_settings()
    assert s.STORAGE_BACKEND == "sqlite"
    assert s.DB_PATH == "./shortlinks.db"
    assert s.SHORT_DOMAIN == "http://localhost"
    assert s.RETENTION_DAYS == 30
    assert s.CODE_LENGTH == 6
    assert s.CODE_MAX_ATTEMPTS == 5
    assert s.SWEEP_INTERVAL_SECONDS == 86400
    assert s.LOG_LEVEL == "info"
    assert s.PORT == 8889


def test_overrides_and_normalization(monkeypatch):
    monkeypatch.setenv("TIDYLINK_STORAGE_BACKEND", "  Postgres ")
    monkeypatch.setenv("TIDYLINK_SHORT_DOMAIN", "https://tidy.example/")
    monkeypatch.setenv("TIDYLINK_RETENTION_DAYS", "7")
    s = load_settings()
    assert s.STORAGE_BACKEND == "postgres"
    assert s.SHORT_DOMAIN == "https://tidy.example"
    assert s.RETENTION_DAYS == 7


def test_bad_integers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("TIDYLINK_RETENTION_DAYS", "thirty")
    monkeypatch.setenv("TIDYLINK_CODE_LENGTH", "")
    s = load_settings()
    assert s.RETENTION_DAYS == 30
    assert s.CODE_LENGTH == 6


def test_code_length_and_attempts_are_clamped(monkeypatch):
    monkeypatch.setenv("TIDYLINK_CODE_LENGTH", "2")
    monkeypatch.setenv("TIDYLINK_CODE_MAX_ATTEMPTS", "500")
    s = load_settings()
    assert s.CODE_LENGTH == 4
    assert s.CODE_MAX_ATTEMPTS == 20

    monkeypatch.setenv("TIDYLINK_CODE_LENGTH", "99")
    assert load_settings().CODE_LENGTH == 32
