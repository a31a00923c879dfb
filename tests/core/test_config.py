"""Settings - URL normalization and bcrypt cost bounds."""

import pytest
from pydantic import ValidationError

from book_api.config import Settings


def test_postgres_url_rewritten_for_asyncpg():
    settings = Settings(database_url="postgresql://u:p@host:5432/db")
    assert settings.database_url == "postgresql+asyncpg://u:p@host:5432/db"


def test_sqlite_url_left_alone():
    settings = Settings(database_url="sqlite+aiosqlite:///:memory:")
    assert settings.database_url == "sqlite+aiosqlite:///:memory:"


@pytest.mark.parametrize("rounds", [3, 32])
def test_bcrypt_rounds_out_of_range_rejected(rounds):
    with pytest.raises(ValidationError):
        Settings(bcrypt_rounds=rounds)


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("BCRYPT_ROUNDS", "5")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    settings = Settings()
    assert settings.bcrypt_rounds == 5
    assert settings.log_level == "DEBUG"
