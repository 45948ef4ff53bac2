"""Process configuration read once from the environment.

Every value is validated at import time so a typo in a deployment fails
the boot instead of surfacing on the first request.  ``SETTINGS`` is the
only instance the application reads.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, get_args

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_BOOLEANS = {
    **dict.fromkeys(("1", "true", "yes", "on"), True),
    **dict.fromkeys(("0", "false", "no", "off", ""), False),
}


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    redis_url: str | None
    # Digits only, country code first: the targets of the wa.me links.
    checkout_whatsapp_number: str
    support_whatsapp_number: str

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def _one_of(name: str, default: str, allowed: tuple[str, ...]) -> str:
    value = _env(name, default).lower()
    if value not in allowed:
        raise ValueError(f"{name} must be {'|'.join(allowed)} (got {value!r})")
    return value


def _flag(name: str, default: bool) -> bool:
    raw = _env(name, "true" if default else "false").lower()
    try:
        return _BOOLEANS[raw]
    except KeyError:
        raise ValueError(f"{name} must be a boolean (got {raw!r})") from None


def _port(name: str, default: int) -> int:
    raw = _env(name, str(default))
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None
    if not 0 < port < 65536:
        raise ValueError(f"{name} must be between 1 and 65535 (got {port})")
    return port


def _phone(name: str, default: str) -> str:
    raw = _env(name, default)
    digits = raw.removeprefix("+")
    if not digits.isdigit():
        raise ValueError(f"{name} must contain only digits (got {raw!r})")
    return digits


def load_settings() -> Settings:
    return Settings(
        app_env=_one_of("APP_ENV", "dev", get_args(AppEnv)),  # type: ignore[arg-type]
        log_level=_one_of("LOG_LEVEL", "info", get_args(LogLevel)),  # type: ignore[arg-type]
        log_json=_flag("LOG_JSON", False),
        port=_port("PORT", 8000),
        database_url=_env("DATABASE_URL") or None,
        redis_url=_env("REDIS_URL") or None,
        checkout_whatsapp_number=_phone("CHECKOUT_WHATSAPP_NUMBER", "5511999999999"),
        support_whatsapp_number=_phone("SUPPORT_WHATSAPP_NUMBER", "5553991152051"),
    )


SETTINGS = load_settings()
