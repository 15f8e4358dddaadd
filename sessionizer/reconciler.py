"""Bring a tmux session to the state described by a SessionSpec."""

import logging
from typing import Callable, Optional, Tuple

from .models import (
    ExistsPolicy,
    ReconcileOutcome,
    SessionConflictDecision,
    SessionSpec,
)
from .tmux_controller import TmuxController, typed_keys, window_target

logger = logging.getLogger(__name__)

# Prompt answers, matched after strip() + lower(). Empty input cancels.
CONFLICT_CHOICES = {
    "a": SessionConflictDecision.ATTACH,
    "y": SessionConflictDecision.ATTACH,
    "k": SessionConflictDecision.KILL_AND_RECREATE,
    "n": SessionConflictDecision.KILL_AND_RECREATE,
    "q": SessionConflictDecision.CANCEL,
    "c": SessionConflictDecision.CANCEL,
    "": SessionConflictDecision.CANCEL,
}

CONFLICT_MENU = (
    "[a/y] Attach",
    "[k/n] Kill and recreate",
    "[q/c] Cancel",
)


def parse_conflict_choice(raw: str) -> Tuple[SessionConflictDecision, bool]:
    """Map a prompt answer to a decision.

    Returns (decision, recognized). Unrecognized answers cancel.
    """
    key = (raw or "").strip().lower()
    decision = CONFLICT_CHOICES.get(key)
    if decision is None:
        return SessionConflictDecision.CANCEL, False
    return decision, True


def _read_line(prompt: str) -> str:
    try:
        return input(prompt)
    except EOFError:
        return ""


class SessionReconciler:
    """Attach to, recreate, or build a tmux session from a declarative window list."""

    def __init__(
        self,
        tmux: TmuxController,
        read_line: Callable[[str], str] = _read_line,
        write_line: Callable[[str], None] = print,
    ):
        self.tmux = tmux
        self.read_line = read_line
        self.write_line = write_line

    def decide(self, session_name: str, policy: ExistsPolicy) -> SessionConflictDecision:
        """Resolve what to do with an existing session: flags first, then one prompt."""
        if policy.force_attach:
            return SessionConflictDecision.ATTACH
        if policy.force_recreate:
            return SessionConflictDecision.KILL_AND_RECREATE

        self.write_line(f"Session '{session_name}' already exists. Choose an option:")
        for line in CONFLICT_MENU:
            self.write_line(line)
        decision, recognized = parse_conflict_choice(self.read_line(""))
        if not recognized:
            self.write_line("Invalid option, canceling operation")
        return decision

    def reconcile(self, spec: SessionSpec, policy: Optional[ExistsPolicy] = None) -> ReconcileOutcome:
        """
        Converge tmux on `spec` and attach the terminal to it.

        Raises:
            TmuxError: any tmux command failed; a partially built session is left as-is
        """
        policy = policy or ExistsPolicy()
        name = spec.session_name

        if self.tmux.session_exists(name):
            decision = self.decide(name, policy)
            logger.info(f"Session {name} exists, decision={decision.value}")

            if decision is SessionConflictDecision.ATTACH:
                self.tmux.attach(name)
                return ReconcileOutcome.ATTACHED_EXISTING
            if decision is SessionConflictDecision.CANCEL:
                return ReconcileOutcome.CANCELLED
            self.tmux.kill_session(name)

        self._build(spec)
        self.tmux.select_window(window_target(name, spec.initial_active_window))
        self.tmux.attach(name)
        return ReconcileOutcome.CREATED

    def _build(self, spec: SessionSpec) -> None:
        name = spec.session_name
        first = spec.windows[0]
        self.tmux.create_session(name, spec.working_directory, first.name)
        self._start_command(name, 0, first.command_tokens())

        for index in range(1, len(spec.windows)):
            window = spec.windows[index]
            self.tmux.create_window(name, index, window.name, spec.working_directory)
            self._start_command(name, index, window.command_tokens())

        logger.info(f"Built session {name} with {len(spec.windows)} windows")

    def _start_command(self, session_name: str, index: int, tokens) -> None:
        if tokens:
            self.tmux.send_keys(window_target(session_name, index), typed_keys(tokens))
