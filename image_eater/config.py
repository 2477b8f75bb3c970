"""Application configuration for the image ingestion service."""

from __future__ import annotations

import logging
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.toml"
CONFIG_FILE_ENV = "IMAGE_EATER_CONFIG"


class Settings(BaseSettings):
    """
    Immutable service settings.

    Values come from keyword arguments (usually a TOML config file), then
    environment variables, then ``.env``. Config file keys may be spelled
    either ``files_dir`` or ``FilesDir``.
    """

    port: int = Field(
        default=4000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("port", "Port"),
    )
    files_field: str = Field(
        default="files",
        min_length=1,
        validation_alias=AliasChoices("files_field", "FilesField"),
        description="Multipart form field that carries uploaded images.",
    )
    files_dir: str = Field(
        default="files/",
        validation_alias=AliasChoices("files_dir", "FilesDir"),
        description="Directory that receives originals and their thumbnails.",
    )
    fetch_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        validation_alias=AliasChoices("fetch_timeout_seconds", "FetchTimeoutSeconds"),
        description="Connect and read timeout for remote image downloads.",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @property
    def storage_dir(self) -> Path:
        return Path(self.files_dir or ".")


def load_settings(config_file: str | Path) -> Settings:
    """
    Read settings from a TOML file.

    A missing, unparsable or invalid file is not fatal: the problem is logged
    and the defaults are used instead.
    """
    path = Path(config_file)
    if not path.is_file():
        logger.warning("Config file '%s' is missing; using defaults.", path)
        return Settings()

    try:
        with path.open("rb") as handle:
            values = tomllib.load(handle)
        return Settings(**values)
    except (OSError, tomllib.TOMLDecodeError, ValidationError) as exc:
        logger.warning(
            "Config file '%s' could not be parsed; using defaults.",
            path,
            extra={"error": str(exc)},
        )
        return Settings()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""
    settings = load_settings(os.environ.get(CONFIG_FILE_ENV, DEFAULT_CONFIG_FILE))
    settings.storage_dir.mkdir(parents=True, exist_ok=True)
    return settings
