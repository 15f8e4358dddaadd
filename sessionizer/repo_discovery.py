"""Find git repositories below a directory."""

import logging
import os
from typing import Dict, Iterable, List

from .errors import DiscoveryError
from .models import Option

logger = logging.getLogger(__name__)


def is_git_repo(path: str) -> bool:
    """True if `path` contains a .git directory."""
    return os.path.isdir(os.path.join(path, ".git"))


def find_git_repos(root: str) -> List[str]:
    """
    Search for git repositories recursively from `root`.

    Hidden directories are skipped and repositories are not descended into,
    so a root that is itself a repository is returned on its own.

    Raises:
        DiscoveryError: root is missing or not a directory, or traversal failed
    """
    root = os.path.abspath(root)
    if not os.path.isdir(root):
        raise DiscoveryError(f"not a directory: {root}")
    if is_git_repo(root):
        return [root]

    repos: List[str] = []

    def on_error(err: OSError):
        # An unreadable root means there is nothing to search.
        if isinstance(err, PermissionError) and err.filename != root:
            logger.warning(f"Permission denied: {err.filename}")
            return
        raise DiscoveryError(str(err)) from err

    for dirpath, dirnames, _ in os.walk(root, onerror=on_error):
        keep = []
        for name in sorted(dirnames):
            if name.startswith("."):
                continue
            path = os.path.join(dirpath, name)
            if is_git_repo(path):
                repos.append(path)
            else:
                keep.append(name)
        dirnames[:] = keep

    logger.debug(f"Found {len(repos)} repositories under {root}")
    return repos


def _dir_name(path: str) -> str:
    return os.path.basename(os.path.normpath(path))


def repo_qualifiers(paths: Iterable[str]) -> Dict[str, str]:
    """
    Map each path to the qualifier that tells it apart from same-named repos.

    Unique directory names get "". Colliding ones get their parent directory's
    name, or the full parent path when the parents share a name too.
    """
    paths = list(paths)
    by_name: Dict[str, List[str]] = {}
    for path in paths:
        by_name.setdefault(_dir_name(path), []).append(path)

    qualifiers = {}
    for group in by_name.values():
        if len(group) == 1:
            qualifiers[group[0]] = ""
            continue
        parents = [os.path.dirname(os.path.normpath(p)) for p in group]
        short = [os.path.basename(p) or p for p in parents]
        use_short = len(set(short)) == len(short)
        for path, parent, name in zip(group, parents, short):
            qualifiers[path] = name if use_short else parent
    return qualifiers


def repos_to_options(paths: Iterable[str]) -> List[Option]:
    """Options labelled by directory name, sorted case-insensitively.

    Repositories sharing a directory name are labelled 'api (work)'.
    """
    paths = list(paths)
    qualifiers = repo_qualifiers(paths)
    options = []
    for path in paths:
        label = _dir_name(path)
        if qualifiers[path]:
            label = f"{label} ({qualifiers[path]})"
        options.append(Option(label=label, value=path))
    options.sort(key=lambda o: (o.label.lower(), o.value))
    return options


def session_name_for(path: str, qualifier: str = "") -> str:
    """
    tmux session name for a repository.

    Its directory name, suffixed with '-<qualifier>' when one is given, with
    characters tmux rejects in targets ('.', ':') replaced by '_'.
    """
    name = _dir_name(path) or "root"
    qualifier = qualifier.strip("/").replace("/", "_")
    if qualifier:
        name = f"{name}-{qualifier}"
    return name.replace(".", "_").replace(":", "_")
