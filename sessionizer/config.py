"""Layered window configuration: repository-local, global, built-in default."""

import json
import logging
import os
from pathlib import Path
from typing import Callable, List, Optional

from .errors import ConfigError
from .models import SessionizerConfig, default_config

logger = logging.getLogger(__name__)

APP_DIR_NAME = "tmux-sessionizer"
GLOBAL_CONFIG_NAME = "config.json"
REPO_CONFIG_NAME = "tmux-sessionizer.json"
GIT_DIR_NAME = ".git"


def config_dir() -> Path:
    """Per-user config directory ($XDG_CONFIG_HOME/tmux-sessionizer)."""
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def global_config_path() -> Path:
    return config_dir() / GLOBAL_CONFIG_NAME


def repo_config_path(repo_dir: str) -> Path:
    """Repository-local config, kept inside the repo's .git directory."""
    return Path(repo_dir) / GIT_DIR_NAME / REPO_CONFIG_NAME


def has_repo_config(repo_dir: str) -> bool:
    return repo_config_path(repo_dir).is_file()


def load_config_file(path: Path) -> SessionizerConfig:
    """
    Read and validate one config document.

    Raises:
        ConfigError: missing, unreadable, malformed or invalid document
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}")

    try:
        return SessionizerConfig.from_dict(data)
    except ValueError as e:
        raise ConfigError(f"Invalid config file {path}: {e}")


def save_config_file(path: Path, config: SessionizerConfig) -> None:
    """
    Validate and write a config document atomically.

    The document is written to '<path>.tmp' and renamed over the target, so
    readers never observe a partial file.
    """
    if config is None:
        raise ConfigError("config cannot be None")
    try:
        config.validate()
    except ValueError as e:
        raise ConfigError(str(e))

    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except OSError as e:
        try:
            tmp_path.unlink()
        except OSError:
            pass
        raise ConfigError(f"Failed to save config {path}: {e}")

    logger.info(f"Saved config to {path}")


def load_global_config() -> SessionizerConfig:
    return load_config_file(global_config_path())


def save_global_config(config: SessionizerConfig) -> None:
    save_config_file(global_config_path(), config)


def load_repo_config(repo_dir: str) -> SessionizerConfig:
    return load_config_file(repo_config_path(repo_dir))


def save_repo_config(repo_dir: str, config: SessionizerConfig) -> None:
    save_config_file(repo_config_path(repo_dir), config)


ConfigProvider = Callable[[], Optional[SessionizerConfig]]


def _file_provider(path: Path) -> ConfigProvider:
    def provide() -> Optional[SessionizerConfig]:
        try:
            return load_config_file(path)
        except ConfigError as e:
            logger.debug(f"Skipping config layer: {e}")
            return None
    return provide


def config_providers(repo_dir: Optional[str]) -> List[ConfigProvider]:
    """Config sources in priority order: repo, global, default."""
    providers: List[ConfigProvider] = []
    if repo_dir:
        providers.append(_file_provider(repo_config_path(repo_dir)))
    providers.append(_file_provider(global_config_path()))
    providers.append(default_config)
    return providers


def resolve_config(
    repo_dir: Optional[str],
    providers: Optional[List[ConfigProvider]] = None,
) -> SessionizerConfig:
    """Return the first config any provider yields. Never raises."""
    for provide in providers if providers is not None else config_providers(repo_dir):
        config = provide()
        if config is not None:
            return config
    return default_config()


def load_editable_config(repo_dir: Optional[str] = None) -> SessionizerConfig:
    """
    Starting point for the config editor.

    A repository without its own config starts from the global config, and a
    missing or broken global config starts from the default.
    """
    sources = []
    if repo_dir:
        sources.append(repo_config_path(repo_dir))
    sources.append(global_config_path())
    return resolve_config(repo_dir, [_file_provider(p) for p in sources] + [default_config])
