# app/core/config.py

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

# =========================
# DEFAULTS
# =========================

DEFAULT_ALLOWED_ORIGINS = ("http://localhost:5173",)
DEFAULT_STORE_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_BODY_BYTES = 200 * 1024


@dataclass(frozen=True)
class Settings:
    database_url: str
    admin_key: str = ""
    allowed_origins: Tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    log_level: str = "INFO"
    port: int = 8080

    @property
    def admin_enabled(self) -> bool:
        return bool(self.admin_key)


def _database_url_from_parts() -> str:
    db_user = os.getenv("DB_USER", "quicktext")
    db_pass = os.getenv("DB_PASS", "quicktext")
    db_host = os.getenv("DB_HOST", "localhost")
    db_port = os.getenv("DB_PORT", "5432")
    db_name = os.getenv("DB_NAME", "quicktext")
    return f"postgresql://{db_user}:{db_pass}@{db_host}:{db_port}/{db_name}"


def _split_origins(raw: Optional[str]) -> Tuple[str, ...]:
    if raw is None:
        return DEFAULT_ALLOWED_ORIGINS
    return tuple(o.strip() for o in raw.split(",") if o.strip())


def load_settings(env_file: Optional[str] = ".env") -> Settings:
    """
    Build the process-wide settings once, at startup.
    Values come from the environment; a .env file, when present, fills gaps.
    """
    if env_file:
        load_dotenv(env_file)

    return Settings(
        database_url=os.getenv("DATABASE_URL") or _database_url_from_parts(),
        admin_key=os.getenv("ADMIN_KEY", ""),
        allowed_origins=_split_origins(os.getenv("ALLOWED_ORIGINS")),
        store_timeout_seconds=float(
            os.getenv("STORE_TIMEOUT_SECONDS", str(DEFAULT_STORE_TIMEOUT_SECONDS))
        ),
        max_body_bytes=int(os.getenv("MAX_BODY_BYTES", str(DEFAULT_MAX_BODY_BYTES))),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        port=int(os.getenv("PORT", "8080")),
    )
