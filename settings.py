from __future__ import annotations

import os
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_JWT_SECRET_ENV = "JWT_SECRET"
_JWT_EXPIRES_IN_ENV = "JWT_EXPIRES_IN"
_PASSWORD_ROUNDS_ENV = "PASSWORD_HASH_ROUNDS"
_STORE_PATH_ENV = "STORE_PERSISTENCE_PATH"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_EXPIRES_IN = "7d"
DEFAULT_PASSWORD_ROUNDS = 10

_DURATION_PATTERN = re.compile(r"^(\d+)\s*([smhdw]?)$")
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}


class ConfigurationError(Exception):
    """Raised when the process environment cannot produce valid settings."""


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    jwt_expires_in: str = DEFAULT_EXPIRES_IN
    token_ttl_seconds: int = 7 * 86400
    password_rounds: int = DEFAULT_PASSWORD_ROUNDS
    store_persistence_path: Optional[str] = None
    log_level: str = "INFO"


def parse_duration(text: str) -> int:
    """Convert ``"7d"``, ``"12h"``, ``"90"`` style durations to seconds."""
    match = _DURATION_PATTERN.match(text.strip().lower())
    if match is None:
        raise ConfigurationError(f"Invalid duration {text!r}.")
    amount, unit = match.groups()
    seconds = int(amount) * _UNIT_SECONDS[unit]
    if seconds <= 0:
        raise ConfigurationError(f"Duration {text!r} must be positive.")
    return seconds


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_password_rounds(default: int) -> int:
    value = os.getenv(_PASSWORD_ROUNDS_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    # bcrypt only accepts cost factors in this range
    return parsed if 4 <= parsed <= 31 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


def load_settings() -> Settings:
    secret = _read_optional_env(_JWT_SECRET_ENV, None)
    if secret is None:
        raise ConfigurationError(f"{_JWT_SECRET_ENV} environment variable is not set.")
    expires_in = _read_str_env(_JWT_EXPIRES_IN_ENV, DEFAULT_EXPIRES_IN)
    return Settings(
        jwt_secret=secret,
        jwt_expires_in=expires_in,
        token_ttl_seconds=parse_duration(expires_in),
        password_rounds=_read_password_rounds(DEFAULT_PASSWORD_ROUNDS),
        store_persistence_path=_read_optional_env(_STORE_PATH_ENV, None),
        log_level=_read_log_level("INFO"),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
