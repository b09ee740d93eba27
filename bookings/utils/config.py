"""Environment-driven application settings."""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    in_production: bool

    database_path: Path
    database_timeout_seconds: float
    database_max_connections: int

    session_secret_key: str
    session_cookie_name: str
    session_max_age_seconds: int

    date_format: str = "%Y-%m-%d"
    first_name_min_length: int = 3
    seed_room_names: tuple[str, ...] = ("General's Quarters", "Major's Suite")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests derive variants with `replace`."""
    return Settings(
        app_name=os.getenv("BOOKINGS_APP_NAME", "Bookings"),
        app_version=os.getenv("BOOKINGS_APP_VERSION", "1.0.0"),
        log_level=os.getenv("BOOKINGS_LOG_LEVEL", "INFO"),
        in_production=_env_bool("BOOKINGS_IN_PRODUCTION", False),
        database_path=Path(os.getenv("BOOKINGS_DATABASE_PATH", "data/bookings.db")),
        database_timeout_seconds=float(
            os.getenv("BOOKINGS_DATABASE_TIMEOUT_SECONDS", "5.0")
        ),
        database_max_connections=int(
            os.getenv("BOOKINGS_DATABASE_MAX_CONNECTIONS", "10")
        ),
        # A random key invalidates sessions on restart; set one in production.
        session_secret_key=os.getenv("BOOKINGS_SESSION_SECRET_KEY")
        or secrets.token_urlsafe(32),
        session_cookie_name=os.getenv("BOOKINGS_SESSION_COOKIE", "session"),
        session_max_age_seconds=int(
            os.getenv("BOOKINGS_SESSION_MAX_AGE_SECONDS", str(24 * 60 * 60))
        ),
    )
