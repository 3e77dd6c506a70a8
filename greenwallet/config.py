"""Runtime configuration and logging setup."""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from ``GREENWALLET_*`` environment variables (or ``.env``)."""

    model_config = SettingsConfigDict(
        env_prefix="GREENWALLET_",
        env_file=".env",
        extra="ignore",
    )

    storage_backend: Literal["document", "file"] = "document"
    data_dir: str = "var/accounts"

    log_level: str = "INFO"

    history_page_size: int = Field(default=20, ge=1)
    history_max_page_size: int = Field(default=100, ge=1)

    bonus_window_hours: int = Field(default=24, ge=1)
    bonus_multiplier: int = Field(default=2, ge=1)

    persist_max_retries: int = Field(default=3, ge=1)


@lru_cache
def get_settings() -> Settings:
    return Settings()


_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a basic root handler for the ``greenwallet`` loggers.

    Safe to call more than once; only the level is updated on later calls.
    """
    root = logging.getLogger("greenwallet")
    root.setLevel(level.upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)
