"""
Configuration helpers for the social backend.

Routers/services read settings through get_settings() instead of fetching
os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    db_path: str
    host: str
    port: int
    posts_require_user: bool
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        db_path=os.getenv("DB_PATH") or "db.json",
        host=os.getenv("HOST") or "localhost",
        port=_int(os.getenv("PORT", "8080"), 8080),
        posts_require_user=_bool(os.getenv("POSTS_REQUIRE_USER"), False),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
