"""Application settings (settings.yaml) and logging setup."""

import logging
from pathlib import Path
from typing import Optional

import yaml

from .config import config_dir
from .errors import ConfigError

SETTINGS_NAME = "settings.yaml"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def settings_path() -> Path:
    return config_dir() / SETTINGS_NAME


def load_settings(path: Optional[Path] = None) -> dict:
    """Load settings from YAML file. A missing file means defaults."""
    path = path or settings_path()

    if not path.exists():
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load settings {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")
    return data


def setup_logging(settings: dict, verbose: bool = False) -> None:
    """Configure root logging once for a CLI run.

    Curses owns the terminal while a picker is open, so anything above the
    default WARNING level is best sent to 'logging.file'.
    """
    log_settings = settings.get("logging") or {}
    if verbose:
        level = logging.DEBUG
    else:
        level_name = str(log_settings.get("level", "WARNING")).upper()
        level = getattr(logging, level_name, logging.WARNING)
        if not isinstance(level, int):
            level = logging.WARNING

    kwargs = {"level": level, "format": LOG_FORMAT}
    log_file = log_settings.get("file")
    if log_file:
        kwargs["filename"] = str(Path(log_file).expanduser())
    logging.basicConfig(**kwargs)
