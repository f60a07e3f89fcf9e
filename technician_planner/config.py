# technician_planner/config.py
"""Process configuration, read from the environment once at startup."""

import logging
import os
from dataclasses import dataclass, field

from technician_planner.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_ORIGINS = "http://localhost:4200"
DEFAULT_API_URL = "http://localhost:8000/api"
DEFAULT_TIMEOUT = 10.0


def _split_origins(raw: str) -> tuple[str, ...]:
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    """Server settings, built once and handed to ``create_app``."""

    database_url: str
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: tuple[str, ...] = field(
        default_factory=lambda: _split_origins(DEFAULT_ORIGINS)
    )
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: dict | None = None) -> "Settings":
        """Build settings from environment variables.

        Raises:
            ConfigError: If ``DATABASE_URL`` is unset or ``PORT`` is not
                an integer.
        """
        env = os.environ if environ is None else environ

        database_url = env.get("DATABASE_URL", "").strip()
        if not database_url:
            raise ConfigError("DATABASE_URL is not defined in environment variables")

        raw_port = env.get("PORT", "8000")
        try:
            port = int(raw_port)
        except ValueError:
            raise ConfigError(f"PORT must be an integer, got {raw_port!r}") from None

        return cls(
            database_url=database_url,
            host=env.get("HOST", "0.0.0.0"),
            port=port,
            allowed_origins=_split_origins(env.get("CORS_ORIGINS", DEFAULT_ORIGINS)),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )


@dataclass(frozen=True)
class ClientSettings:
    """Where the task client sends requests, and how long it waits."""

    base_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls, environ: dict | None = None) -> "ClientSettings":
        env = os.environ if environ is None else environ
        raw_timeout = env.get("TASK_API_TIMEOUT", "")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ConfigError(
                f"TASK_API_TIMEOUT must be a number, got {raw_timeout!r}"
            ) from None
        return cls(
            base_url=env.get("TASK_API_URL", DEFAULT_API_URL).rstrip("/"),
            timeout=timeout,
        )
