"""
Runtime configuration.

Values come from environment variables, after loading a ``.env`` file from
the working directory or the user's ``~/.khata`` folder when present.
"""

from __future__ import annotations

import logging
import os
from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from khata.remote.http_client import DEFAULT_BASE_URL

ENV_PREFIX = "KHATA_"


def _load_env_files() -> None:
    for env_path in (Path.cwd() / ".env", Path("~/.khata/.env").expanduser()):
        if env_path.exists():
            load_dotenv(env_path)


class Settings(BaseModel):
    """Client settings."""

    api_base_url: str = DEFAULT_BASE_URL
    api_timeout: float = Field(default=30.0, gt=0)
    cache_path: Path = Path("~/.khata/cache.sqlite")
    stale_after_seconds: int = Field(default=300, ge=0)
    log_level: str = "WARNING"

    @property
    def stale_after(self) -> timedelta:
        return timedelta(seconds=self.stale_after_seconds)

    @property
    def resolved_cache_path(self) -> Path:
        return self.cache_path.expanduser()

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from ``KHATA_*`` variables; unset ones keep their defaults."""
        if environ is None:
            _load_env_files()
            environ = dict(os.environ)

        values = {}
        for name in cls.model_fields:
            env_key = f"{ENV_PREFIX}{name.upper()}"
            if env_key in environ:
                values[name] = environ[env_key]
        return cls.model_validate(values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def configure_logging(level: str | int = "WARNING") -> None:
    """Set up root logging for command-line use. The library never calls this."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
