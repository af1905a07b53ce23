"""Write registered git hooks into repositories as wrapper scripts.

Each git event gets one POSIX shell wrapper at ``.git/hooks/<name>`` that runs
the enabled hooks for that event in priority order. Wrappers are fully
regenerated on every sync and depend only on the store contents, so syncing
twice without changes produces identical files. Wrappers for events that no
longer have any registrations are removed.
"""

import logging
import os
import shlex
from pathlib import Path
from typing import Iterable, Optional, Union

from .manager import HookManager, resolve_path
from .schema import HookRegistration, HookType, make_hook_key, sort_by_priority, split_hook_key


DEFAULT_SEARCH_PATHS = ("~/github.com", "~/projects", "~/code")
DEFAULT_MAX_DEPTH = 3

_WRAPPER_MARKER = "# Hookify git hook:"

_log = logging.getLogger(__name__)


def render_wrapper(name: str, registrations: Iterable[HookRegistration]) -> str:
    """Render the wrapper script for one git event."""
    hooks = [h for h in sort_by_priority(registrations) if h.enabled]

    lines = [
        "#!/bin/sh",
        f"{_WRAPPER_MARKER} {name}",
        "# Auto-generated wrapper - DO NOT EDIT",
        "# Regenerate with: hookify sync",
        "",
        'export CHITTY_HOOK_TYPE="git"',
        f"export CHITTY_HOOK_NAME={shlex.quote(name)}",
    ]

    for hook in hooks:
        hook_id = shlex.quote(hook.id)
        on_failure = (
            "    exit 1"
            if hook.blocking
            else '    echo "Non-blocking hook failed, continuing..."'
        )
        lines.extend([
            "",
            f"echo {shlex.quote(f'Running: {hook.id}')}",
            f"CHITTY_HOOK_ID={hook_id} {shlex.quote(hook.script_path)} \"$@\"",
            "HOOK_EXIT=$?",
            'if [ "$HOOK_EXIT" -ne 0 ]; then',
            f"    echo {shlex.quote(f'Hook failed: {hook.id}')} >&2",
            on_failure,
            "fi",
        ])

    lines.extend(["", "exit 0", ""])
    return "\n".join(lines)


def find_git_repos(root: Union[str, Path], max_depth: int = DEFAULT_MAX_DEPTH) -> list[Path]:
    """Find directories containing ``.git`` under ``root``.

    Hidden directories are skipped and unreadable ones ignored.
    """
    if max_depth <= 0:
        return []

    root = Path(root).expanduser()
    repos: list[Path] = []
    try:
        entries = sorted(os.scandir(root), key=lambda e: e.name)
    except OSError:
        return repos

    for entry in entries:
        try:
            if not entry.is_dir():
                continue
        except OSError:
            continue
        if entry.name == ".git":
            repos.append(root)
        elif not entry.name.startswith("."):
            repos.extend(find_git_repos(entry.path, max_depth - 1))

    return repos


def is_git_repo(path: Union[str, Path]) -> bool:
    return (Path(path).expanduser() / ".git").is_dir()


def _is_wrapper(path: Path) -> bool:
    try:
        with open(path, "r", encoding="utf-8") as f:
            head = [f.readline(), f.readline()]
    except (OSError, UnicodeDecodeError):
        return False
    return head[1].startswith(_WRAPPER_MARKER)


def _stale_wrappers(hooks_dir: Path, live: Iterable[str]) -> list[Path]:
    """Hookify wrappers in ``hooks_dir`` whose event has no registrations.

    Files not written by hookify (samples, hand-written hooks) are left alone.
    """
    live = set(live)
    return [
        path for path in sorted(hooks_dir.iterdir())
        if path.is_file() and path.name not in live and _is_wrapper(path)
    ]


class GitHookSynchronizer:
    """Materialize git-typed registrations into ``.git/hooks``."""

    def __init__(self, manager: HookManager):
        self.manager = manager

    def _git_groups(self) -> dict[str, list[HookRegistration]]:
        doc = self.manager.store.load()
        groups = {}
        for hook_key in sorted(doc.hooks):
            hook_type, name = split_hook_key(hook_key)
            if hook_type == HookType.GIT.value:
                groups[name] = doc.group(hook_key)
        return groups

    def preview(self, name: str, repo_path: Optional[Union[str, Path]] = None) -> str:
        """The wrapper that a sync would write for ``name``."""
        hooks = self.manager.get(make_hook_key(HookType.GIT.value, name))
        if repo_path is not None:
            repo = resolve_path(repo_path)
            hooks = [h for h in hooks if h.applies_to_repo(repo)]
        return render_wrapper(name, hooks)

    def sync_to_repo(self, repo_path: Union[str, Path]) -> bool:
        """Rewrite every git wrapper in ``repo_path`` and drop stale ones.

        Returns False (and logs) when the directory has no ``.git/hooks``
        or a wrapper cannot be written.
        """
        repo = resolve_path(repo_path)
        hooks_dir = Path(repo) / ".git" / "hooks"
        if not hooks_dir.is_dir():
            _log.error("Not a git repository: %s", repo)
            return False

        groups = self._git_groups()
        try:
            for name, group in groups.items():
                hooks = [h for h in group if h.applies_to_repo(repo)]
                hook_path = hooks_dir / name
                hook_path.write_text(render_wrapper(name, hooks), encoding="utf-8")
                os.chmod(hook_path, 0o755)
                _log.info("Synced %s to %s", name, repo)

            for stale in _stale_wrappers(hooks_dir, groups):
                stale.unlink()
                _log.info("Removed stale wrapper %s from %s", stale.name, repo)
        except OSError as e:
            _log.error("Failed to sync hooks to %s: %s", repo, e)
            return False

        return True

    def sync_repos(self, repo_paths: Iterable[Union[str, Path]]) -> int:
        """Sync each repo; returns how many succeeded."""
        return sum(1 for repo in repo_paths if self.sync_to_repo(repo))

    def sync_all(
        self,
        search_paths: Iterable[Union[str, Path]] = DEFAULT_SEARCH_PATHS,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> int:
        """Sync every repository found under the search paths."""
        repos = []
        for search_path in search_paths:
            path = Path(search_path).expanduser()
            if path.is_dir():
                repos.extend(find_git_repos(path, max_depth))
        return self.sync_repos(repos)
