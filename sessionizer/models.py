"""Data models for tmux-sessionizer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

CONFIG_VERSION = "1.0"


class SessionConflictDecision(Enum):
    """What to do when the target tmux session already exists."""
    ATTACH = "attach"
    KILL_AND_RECREATE = "kill_and_recreate"
    CANCEL = "cancel"


class ReconcileOutcome(Enum):
    """Result of a reconcile call."""
    ATTACHED_EXISTING = "attached_existing"  # Existing session reused
    CREATED = "created"                      # Session (re)built and attached
    CANCELLED = "cancelled"                  # User backed out, nothing changed


@dataclass(frozen=True)
class Option:
    """A selectable entry: display label plus opaque payload (a repo path)."""
    label: str
    value: str


@dataclass(frozen=True)
class WindowSpec:
    """One window to create in a session."""
    name: str
    startup_command: str = ""

    def command_tokens(self) -> List[str]:
        """Whitespace-split startup command.

        Quoted arguments are not honoured: 'echo "a b"' becomes
        ['echo', '"a', 'b"'].
        """
        return self.startup_command.split()


@dataclass
class SessionSpec:
    """Desired end state of a tmux session."""
    session_name: str
    working_directory: str
    windows: List[WindowSpec]
    initial_active_window: int = 0

    def __post_init__(self):
        if not self.windows:
            raise ValueError("no windows configured")
        if not 0 <= self.initial_active_window < len(self.windows):
            self.initial_active_window = 0


@dataclass(frozen=True)
class ExistsPolicy:
    """Flags that pre-answer the session conflict prompt."""
    force_attach: bool = False
    force_recreate: bool = False


@dataclass
class WindowConfig:
    """A window entry as persisted in a config document."""
    name: str
    command: str = ""

    def to_dict(self) -> dict:
        return {"name": self.name, "command": self.command}

    @classmethod
    def from_dict(cls, data: dict) -> "WindowConfig":
        if not isinstance(data, dict):
            raise ValueError("window entry must be an object")
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("window name cannot be empty")
        command = data.get("command") or ""
        if not isinstance(command, str):
            raise ValueError(f"command for window '{name}' must be a string")
        return cls(name=name, command=command)


@dataclass
class SessionizerConfig:
    """A window configuration document (global or repository-local)."""
    windows: List[WindowConfig] = field(default_factory=list)
    initial_active_window: int = 0
    version: str = CONFIG_VERSION

    def validate(self) -> None:
        """Raise ValueError unless there is at least one window and every name is set."""
        if not self.windows:
            raise ValueError("config must have at least one window")
        for window in self.windows:
            if not window.name:
                raise ValueError("window name cannot be empty")

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "windows": [w.to_dict() for w in self.windows],
            "initialActiveWindow": self.initial_active_window,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionizerConfig":
        if not isinstance(data, dict):
            raise ValueError("config document must be an object")
        raw_windows = data.get("windows")
        if not isinstance(raw_windows, list):
            raise ValueError("'windows' must be a list")
        initial = data.get("initialActiveWindow", 0)
        if not isinstance(initial, int) or isinstance(initial, bool):
            initial = 0
        version = data.get("version")
        config = cls(
            windows=[WindowConfig.from_dict(w) for w in raw_windows],
            initial_active_window=initial,
            version=version if isinstance(version, str) and version else CONFIG_VERSION,
        )
        config.validate()
        return config

    def copy(self) -> "SessionizerConfig":
        return SessionizerConfig(
            windows=[WindowConfig(w.name, w.command) for w in self.windows],
            initial_active_window=self.initial_active_window,
            version=self.version,
        )


def default_config() -> SessionizerConfig:
    """Built-in window layout used when no config layer applies."""
    return SessionizerConfig(
        windows=[
            WindowConfig(name="nvim", command="nvim"),
            WindowConfig(name="server", command=""),
            WindowConfig(name="term", command=""),
        ],
        initial_active_window=0,
    )


def build_session_spec(
    session_name: str,
    working_directory: str,
    config: Optional[SessionizerConfig] = None,
) -> SessionSpec:
    """Turn a resolved config into the SessionSpec handed to the reconciler."""
    config = config or default_config()
    return SessionSpec(
        session_name=session_name,
        working_directory=working_directory,
        windows=[WindowSpec(name=w.name, startup_command=w.command) for w in config.windows],
        initial_active_window=config.initial_active_window,
    )
