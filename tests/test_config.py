"""Settings tests — env overrides and validation."""

import pytest
from pydantic import ValidationError

from ama.config import Settings


def test_defaults():
    s = Settings()
    assert s.port == 8080
    assert s.db_pool_size == 5
    assert s.db_max_overflow == 10
    assert s.send_timeout_seconds == 5.0


def test_env_override(monkeypatch):
    monkeypatch.setenv("AMA_DB_POOL_SIZE", "20")
    monkeypatch.setenv("AMA_SEND_TIMEOUT_SECONDS", "0.5")
    s = Settings()
    assert s.db_pool_size == 20
    assert s.send_timeout_seconds == 0.5


@pytest.mark.parametrize("field", ["AMA_SEND_TIMEOUT_SECONDS", "AMA_CLOSE_TIMEOUT_SECONDS"])
def test_timeouts_must_be_positive(monkeypatch, field):
    monkeypatch.setenv(field, "0")
    with pytest.raises(ValidationError):
        Settings()
