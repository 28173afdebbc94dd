"""User settings, read from an optional YAML file."""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from api_workbench.errors import ConfigError

CONFIG_ENV = "API_WORKBENCH_CONFIG"
STORE_ENV = "API_WORKBENCH_STORE"

DEFAULT_CONFIG_PATH = Path("~/.config/api-workbench/config.yaml")
DEFAULT_STORE_PATH = Path("~/.api-workbench-workspaces.json")


class Settings(BaseModel):
    store_path: Path = DEFAULT_STORE_PATH
    log_level: str = "WARNING"
    timeout: float | None = None  # seconds; None leaves the transport default

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level {value}")
        return value


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from ``path``, ``$API_WORKBENCH_CONFIG`` or the default file.

    A missing file yields defaults. ``$API_WORKBENCH_STORE`` overrides the
    store path from the file.
    """
    if path is None:
        path = Path(os.environ.get(CONFIG_ENV, DEFAULT_CONFIG_PATH))
    path = path.expanduser()

    data = {}
    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid config {path}: expected a mapping")

    if os.environ.get(STORE_ENV):
        data["store_path"] = os.environ[STORE_ENV]

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e
    settings.store_path = settings.store_path.expanduser()
    return settings
