"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from gameaccounts.core.config import (
    DatabaseSettings,
    LogSettings,
    RateLimitSettings,
    SecuritySettings,
    Settings,
)


def test_rate_limit_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("RATE_LIMIT_BURST", "RATE_LIMIT_REQUESTS_PER_SECOND", "RATE_LIMIT_EXPORT_BURST"):
        monkeypatch.delenv(name, raising=False)

    cfg = RateLimitSettings()

    assert cfg.enabled is True
    assert cfg.requests_per_second == 100.0
    assert cfg.burst == 20
    assert cfg.export_requests_per_second == 10.0
    assert cfg.export_burst == 2


def test_security_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SECURITY_BCRYPT_ROUNDS", raising=False)

    cfg = SecuritySettings()

    assert cfg.bcrypt_rounds == 12
    assert cfg.min_password_length == 6
    assert cfg.import_placeholder_password == "imported123"
    assert cfg.api_key_required is False


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RATE_LIMIT_BURST", "7")
    monkeypatch.setenv("SECURITY_API_KEY_REQUIRED", "true")
    monkeypatch.setenv("DB_URL", "sqlite:////tmp/other.db")
    monkeypatch.setenv("LOG_REQUEST_ID_HEADER", "X-Correlation-ID")

    cfg = Settings()

    assert cfg.rate_limit.burst == 7
    assert cfg.security.api_key_required is True
    assert cfg.database.url == "sqlite:////tmp/other.db"
    assert cfg.log.request_id_header == "X-Correlation-ID"


def test_test_environment_is_isolated() -> None:
    cfg = Settings()

    assert cfg.app_env == "testing"
    assert cfg.security.bcrypt_rounds == 4


@pytest.mark.parametrize(
    ("factory", "env", "value"),
    [
        (SecuritySettings, "SECURITY_BCRYPT_ROUNDS", "3"),
        (SecuritySettings, "SECURITY_BCRYPT_ROUNDS", "32"),
        (RateLimitSettings, "RATE_LIMIT_BURST", "0"),
        (RateLimitSettings, "RATE_LIMIT_REQUESTS_PER_SECOND", "0"),
        (RateLimitSettings, "RATE_LIMIT_RECLAIM_INTERVAL_SECONDS", "-1"),
    ],
)
def test_invalid_values_fail_fast(monkeypatch: pytest.MonkeyPatch, factory, env: str, value: str) -> None:
    monkeypatch.setenv(env, value)

    with pytest.raises(ValidationError):
        factory()


def test_explicit_values_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_ECHO", "true")

    assert DatabaseSettings(echo=False).echo is False
    assert LogSettings(level="DEBUG").level == "DEBUG"
