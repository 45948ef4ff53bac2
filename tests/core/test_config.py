from __future__ import annotations

import pytest

from inspira.core.config import load_settings

_ENV_VARS = (
    "APP_ENV",
    "LOG_LEVEL",
    "LOG_JSON",
    "PORT",
    "DATABASE_URL",
    "REDIS_URL",
    "CHECKOUT_WHATSAPP_NUMBER",
    "SUPPORT_WHATSAPP_NUMBER",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.is_dev
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.port == 8000
    assert settings.database_url is None
    assert settings.redis_url is None
    assert settings.checkout_whatsapp_number.isdigit()
    assert settings.support_whatsapp_number.isdigit()


def test_values_are_normalized(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "  PROD ")
    monkeypatch.setenv("LOG_LEVEL", "Warning")
    monkeypatch.setenv("LOG_JSON", "yes")
    monkeypatch.setenv("DATABASE_URL", "  ")
    settings = load_settings()
    assert settings.is_prod
    assert settings.log_level == "warning"
    assert settings.log_json is True
    assert settings.database_url is None


def test_whatsapp_numbers_accept_leading_plus(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHECKOUT_WHATSAPP_NUMBER", "+5521988887777")
    assert load_settings().checkout_whatsapp_number == "5521988887777"


@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("APP_ENV", "staging", "APP_ENV must be"),
        ("LOG_LEVEL", "verbose", "LOG_LEVEL must be"),
        ("LOG_JSON", "maybe", "LOG_JSON must be a boolean"),
        ("PORT", "eighty", "PORT must be an integer"),
        ("PORT", "70000", "PORT must be between 1 and 65535"),
        ("SUPPORT_WHATSAPP_NUMBER", "55 53 9911", "SUPPORT_WHATSAPP_NUMBER must contain only digits"),
        ("CHECKOUT_WHATSAPP_NUMBER", "wa.me/55", "CHECKOUT_WHATSAPP_NUMBER must contain only digits"),
    ],
)
def test_invalid_values_are_rejected(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str, message: str
) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=message):
        load_settings()


def test_settings_are_frozen() -> None:
    settings = load_settings()
    with pytest.raises(AttributeError):
        settings.port = 9000  # type: ignore[misc]
