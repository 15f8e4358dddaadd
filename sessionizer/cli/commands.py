"""Command implementations for the tmux-sessionizer CLI."""

import logging
import os
import sys
from typing import Optional

from ..config import (
    has_repo_config,
    load_editable_config,
    resolve_config,
    save_global_config,
    save_repo_config,
)
from ..errors import ConfigError, DiscoveryError, TmuxError
from ..models import ExistsPolicy, Option, ReconcileOutcome, build_session_spec
from ..reconciler import SessionReconciler
from ..repo_discovery import (
    find_git_repos,
    is_git_repo,
    repo_qualifiers,
    repos_to_options,
    session_name_for,
)
from ..tmux_controller import TmuxController
from .config_tui import run_config_editor, scope_label
from .picker_tui import run_picker

logger = logging.getLogger(__name__)

REPO_PICKER_TITLE = "Select a repository:"
CONFIG_SCOPE_TITLE = "Choose configuration type:"
CONFIGURED_SUFFIX = " [configured]"

GLOBAL_SCOPE = "global"
REPO_SCOPE = "repo"


def _error(message: str) -> int:
    print(message, file=sys.stderr)
    return 1


def _tmux_detail(e: TmuxError) -> str:
    return e.stderr or str(e)


def open_session(
    tmux: TmuxController,
    repo_dir: str,
    session_name: str,
    policy: ExistsPolicy,
) -> int:
    """Resolve the window layout for a repository and reconcile its session."""
    config = resolve_config(repo_dir)
    spec = build_session_spec(session_name, repo_dir, config)
    try:
        outcome = SessionReconciler(tmux).reconcile(spec, policy)
    except TmuxError as e:
        return _error(f"Error creating tmux session: {_tmux_detail(e)}")
    logger.info(f"Session {session_name}: {outcome.value}")
    return 0


def _discover_repos(search_dir: str) -> Optional[list]:
    """Print the search banner and return repo paths, or None after printing why not."""
    print(f"Searching for git repositories in: {search_dir}")
    repos = find_git_repos(search_dir)
    if not repos:
        print("No git repositories found.")
        return None
    return repos


def cmd_open(tmux: TmuxController, search_dir: str, policy: ExistsPolicy) -> int:
    """Pick a repository below search_dir and open its session."""
    try:
        repos = _discover_repos(search_dir)
    except DiscoveryError as e:
        return _error(f"Error finding git repositories: {e}")
    if repos is None:
        return 0

    selected = run_picker(REPO_PICKER_TITLE, repos_to_options(repos))
    if selected is None:
        print("No repository selected.")
        return 0

    repo_dir = selected.value
    session_name = session_name_for(repo_dir, repo_qualifiers(repos).get(repo_dir, ""))
    return open_session(tmux, repo_dir, session_name, policy)


def cmd_current(tmux: TmuxController, policy: ExistsPolicy) -> int:
    """Open a session for the current directory without discovery or picker."""
    try:
        current_dir = os.getcwd()
    except OSError as e:
        return _error(f"Error getting current directory: {e}")
    return open_session(tmux, current_dir, session_name_for(current_dir), policy)


def _edit(repo_dir: Optional[str]) -> int:
    config = load_editable_config(repo_dir)
    if repo_dir:
        def save(cfg):
            save_repo_config(repo_dir, cfg)
    else:
        save = save_global_config

    saved = run_config_editor(config, save, scope_label(repo_dir))
    if saved:
        print("Configuration saved.")
    return 0


def _pick_config_scope() -> Optional[str]:
    options = [
        Option(label="Global configuration", value=GLOBAL_SCOPE),
        Option(label="Repo-level configuration", value=REPO_SCOPE),
    ]
    selected = run_picker(CONFIG_SCOPE_TITLE, options, allow_search=False)
    return selected.value if selected else None


def _config_repo_options(options: list) -> list:
    """Mark repositories that already carry their own config."""
    return [
        Option(label=opt.label + CONFIGURED_SUFFIX, value=opt.value) if has_repo_config(opt.value) else opt
        for opt in options
    ]


def cmd_config(search_dir: str, use_current: bool) -> int:
    """
    Edit the global or a repository's window configuration.

    With use_current, the current directory's repository config is edited
    directly; otherwise the user chooses the scope first.
    """
    try:
        if use_current:
            try:
                current_dir = os.getcwd()
            except OSError as e:
                return _error(f"Error getting current directory: {e}")
            if not is_git_repo(current_dir):
                return _error(
                    "Error: current directory is not a git repository "
                    "(use --config without -c for the global config)"
                )
            return _edit(current_dir)

        scope = _pick_config_scope()
        if scope is None:
            return 0
        if scope == GLOBAL_SCOPE:
            return _edit(None)

        try:
            repos = _discover_repos(search_dir)
        except DiscoveryError as e:
            return _error(f"Error finding git repositories: {e}")
        if repos is None:
            return 0

        selected = run_picker(REPO_PICKER_TITLE, _config_repo_options(repos_to_options(repos)))
        if selected is None:
            print("No repository selected.")
            return 0
        return _edit(selected.value)
    except ConfigError as e:
        return _error(f"Error editing config: {e}")
