"""Shared pytest fixtures for tmux-sessionizer tests."""

import json
from pathlib import Path
from typing import Callable, Optional
from unittest.mock import MagicMock

import pytest

from sessionizer.models import SessionSpec, WindowSpec
from sessionizer.tmux_controller import TmuxController


@pytest.fixture
def mock_tmux() -> MagicMock:
    """
    Mock TmuxController for testing without a tmux server.

    Returns:
        MagicMock where no session exists and every command succeeds
    """
    mock = MagicMock(spec=TmuxController)
    mock.session_exists.return_value = False
    mock.create_session.return_value = None
    mock.create_window.return_value = None
    mock.send_keys.return_value = None
    mock.select_window.return_value = None
    mock.kill_session.return_value = None
    mock.attach.return_value = None
    return mock


@pytest.fixture(autouse=True)
def config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Point XDG_CONFIG_HOME at a temp dir so no test touches the real config.

    Returns:
        The temporary config home
    """
    home = tmp_path / "xdg-config"
    home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home))
    return home


@pytest.fixture
def global_config_file(config_home: Path) -> Path:
    """Path of the global config inside the temporary config home."""
    return config_home / "tmux-sessionizer" / "config.json"


@pytest.fixture
def make_repo(tmp_path: Path) -> Callable[..., Path]:
    """
    Factory creating a directory with a .git directory.

    Usage: make_repo("projects/alpha", config={...})
    """
    def _make(relative: str, config: Optional[object] = None, raw_config: Optional[str] = None) -> Path:
        repo = tmp_path / relative
        (repo / ".git").mkdir(parents=True)
        target = repo / ".git" / "tmux-sessionizer.json"
        if config is not None:
            target.write_text(json.dumps(config))
        elif raw_config is not None:
            target.write_text(raw_config)
        return repo
    return _make


@pytest.fixture
def proj_spec() -> SessionSpec:
    """Three-window session spec: editor with a command, two bare windows."""
    return SessionSpec(
        session_name="proj",
        working_directory="/tmp/proj",
        windows=[
            WindowSpec("edit", "nvim"),
            WindowSpec("srv", ""),
            WindowSpec("term", ""),
        ],
        initial_active_window=0,
    )
