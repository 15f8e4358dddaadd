"""Exception types for tmux-sessionizer."""

from typing import Optional, Sequence


class SessionizerError(Exception):
    """Base class for errors surfaced to the CLI."""


class ConfigError(SessionizerError):
    """A configuration document could not be read, parsed, validated or written."""


class DiscoveryError(SessionizerError):
    """Repository discovery could not traverse the search root."""


class TmuxError(SessionizerError):
    """A tmux command failed.

    Carries the command that was run and tmux's own stderr so the CLI can
    print the underlying error verbatim.
    """

    def __init__(self, message: str, command: Optional[Sequence[str]] = None, stderr: str = ""):
        super().__init__(message)
        self.command = list(command) if command else []
        self.stderr = stderr or ""
