"""User configuration for Shift.

Stored as JSON in ``$XDG_CONFIG_HOME/st/config.json`` (``~/.config/st``
when the variable is unset).
"""

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

APP_DIR = "st"
DB_FILE = "events.db"

logger = logging.getLogger(__name__)


def _xdg_dir(variable: str, fallback: str) -> Path:
    value = os.environ.get(variable)
    if value:
        return Path(value)
    return Path.home() / fallback


def get_config_dir() -> Path:
    """Get the Shift config directory."""
    return _xdg_dir("XDG_CONFIG_HOME", ".config") / APP_DIR


def get_data_dir() -> Path:
    """Get the directory holding the event database."""
    return _xdg_dir("XDG_DATA_HOME", ".local/share") / APP_DIR


def default_db_path() -> str:
    return str(get_data_dir() / DB_FILE)


class Settings(BaseModel):
    """Persisted user preferences."""

    db_path: str = Field(default_factory=default_db_path)
    default_count: int = Field(default=10, ge=1)
    # Refuse `switch NAME` when NAME is already the only ongoing session.
    reject_switch_to_current: bool = True
    log_level: str = "WARNING"


def read_settings(path: Path | None = None) -> Settings:
    """Read the stored settings, falling back to defaults for a missing or broken file.

    Only the file is consulted; per-invocation overrides such as ``--db``
    (or ``ST_DB_PATH``) are applied by the CLI callback.
    """
    config_file = path or get_config_dir() / "config.json"
    settings = Settings()
    if config_file.exists():
        try:
            data = json.loads(config_file.read_text(encoding="utf-8"))
            settings = Settings(**data)
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.warning(f"Ignoring unreadable config {config_file}: {e}")

    return settings


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Save settings, creating the config directory if needed."""
    config_file = path or get_config_dir() / "config.json"
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(
        json.dumps(settings.model_dump(), indent=2),
        encoding="utf-8",
    )
