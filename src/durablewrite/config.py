from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .fs import DEFAULT_FILE_MODE

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
ENV_PREFIX = "DURABLEWRITE_"


class Settings(BaseModel):
    model_config = ConfigDict(extra="forbid")
    max_workers: int | None = Field(default=None, ge=1)
    log_level: str = "WARNING"
    file_mode: int = Field(default=DEFAULT_FILE_MODE, ge=0, le=0o7777)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return upper


class SettingsError(RuntimeError):
    pass


def _env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key in ("max_workers", "log_level"):
        value = os.environ.get(f"{ENV_PREFIX}{key.upper()}")
        if value:
            overrides[key] = value
    return overrides


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a YAML file, then apply environment overrides.

    A missing `path` (None) or an empty file yields the defaults.

    Raises:
        SettingsError: If the file is missing, is not valid YAML, or fails
            validation.
    """
    data: dict = {}
    if path is not None:
        try:
            loaded = yaml.safe_load(path.read_text())
        except FileNotFoundError as exc:
            raise SettingsError(f"Settings file not found: {path}") from exc
        except yaml.YAMLError as exc:
            raise SettingsError(f"Failed to parse settings file {path}: {exc}") from exc
        if loaded is not None:
            if not isinstance(loaded, dict):
                raise SettingsError(f"Settings file must contain a mapping: {path}")
            data = loaded
    data.update(_env_overrides())
    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise SettingsError(str(exc)) from exc


_active: Settings | None = None


def get_settings() -> Settings:
    global _active
    if _active is None:
        _active = load_settings()
    return _active


def configure(settings: Settings) -> None:
    global _active
    _active = settings
