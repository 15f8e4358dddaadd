"""tmux operations for building and attaching repository sessions."""

import subprocess
from typing import List, Optional, Sequence
import logging

from .errors import TmuxError

logger = logging.getLogger(__name__)


def window_target(session_name: str, index: int) -> str:
    """tmux target for window `index` of a session, e.g. 'proj:1'."""
    return f"{session_name}:{index}"


def exact_session_target(session_name: str) -> str:
    """Session target that only matches this exact name, not a prefix."""
    return f"={session_name}"


def typed_keys(tokens: Sequence[str]) -> List[str]:
    """send-keys arguments that type `tokens` separated by single spaces.

    tmux joins send-keys arguments with nothing in between, so the words are
    interleaved with the Space key.
    """
    keys: List[str] = []
    for token in tokens:
        if keys:
            keys.append("Space")
        keys.append(token)
    return keys


class TmuxController:
    """Controls tmux sessions for repository workspaces.

    Every method raises TmuxError when tmux fails; nothing is retried.
    """

    def __init__(self, config: Optional[dict] = None):
        self.config = config or {}

        tmux_settings = self.config.get("tmux", {}) or {}
        timeouts = tmux_settings.get("timeouts", {}) or {}

        self.binary = tmux_settings.get("binary", "tmux")
        self.command_timeout_seconds = timeouts.get("command_seconds", 10)

    def _run_tmux(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        """Run a tmux command and capture its output."""
        cmd = [self.binary] + list(args)
        logger.debug(f"Running tmux command: {' '.join(cmd)}")
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=check,
                timeout=self.command_timeout_seconds,
            )
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise TmuxError(
                stderr or f"tmux {args[0]} exited with status {e.returncode}",
                command=cmd,
                stderr=stderr,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise TmuxError(
                f"tmux {args[0]} timed out after {self.command_timeout_seconds}s",
                command=cmd,
            ) from e
        except FileNotFoundError as e:
            raise TmuxError(f"{self.binary} not found", command=cmd) from e

    def session_exists(self, session_name: str) -> bool:
        """Check if a tmux session with exactly this name exists."""
        result = self._run_tmux("has-session", "-t", exact_session_target(session_name), check=False)
        return result.returncode == 0

    def create_session(self, session_name: str, working_dir: str, first_window_name: str) -> None:
        """
        Create a new detached session.

        Args:
            session_name: Name for the tmux session
            working_dir: Directory every window starts in
            first_window_name: Name of window 0
        """
        self._run_tmux(
            "new-session",
            "-d",
            "-s", session_name,
            "-c", working_dir,
            "-n", first_window_name,
        )
        logger.info(f"Created session {session_name} in {working_dir}")

    def create_window(self, session_name: str, index: int, window_name: str, working_dir: str) -> None:
        """Create a window at a fixed index of an existing session."""
        self._run_tmux(
            "new-window",
            "-t", window_target(session_name, index),
            "-n", window_name,
            "-c", working_dir,
        )
        logger.debug(f"Created window {index} ({window_name}) in {session_name}")

    def send_keys(self, target: str, keys: Sequence[str]) -> None:
        """
        Send keys to a window followed by Enter.

        Args:
            target: Window target such as 'proj:0'
            keys: send-keys arguments, see typed_keys()
        """
        self._run_tmux("send-keys", "-t", target, *keys, "Enter")
        logger.debug(f"Sent keys to {target}: {' '.join(keys)}")

    def select_window(self, target: str) -> None:
        self._run_tmux("select-window", "-t", target)

    def kill_session(self, session_name: str) -> None:
        """Kill a tmux session."""
        self._run_tmux("kill-session", "-t", exact_session_target(session_name))
        logger.info(f"Killed session {session_name}")

    def attach(self, session_name: str) -> None:
        """
        Attach the calling terminal to a session.

        Blocks until the user detaches. stdin, stdout and stderr are inherited,
        so there is no capture and no timeout here.
        """
        cmd = [self.binary, "attach", "-t", exact_session_target(session_name)]
        logger.debug(f"Running tmux command: {' '.join(cmd)}")
        try:
            subprocess.run(cmd, check=True)
        except subprocess.CalledProcessError as e:
            raise TmuxError(
                f"tmux attach exited with status {e.returncode}",
                command=cmd,
            ) from e
        except FileNotFoundError as e:
            raise TmuxError(f"{self.binary} not found", command=cmd) from e
