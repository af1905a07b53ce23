"""Exception types raised by the hook subsystem."""

from typing import Iterable, Optional


class HookifyError(Exception):
    """Base class for expected, operator-facing failures."""


class ScriptNotFoundError(HookifyError):
    """The script given at registration does not exist."""

    def __init__(self, script_path: str):
        super().__init__(f"Script not found: {script_path}")
        self.script_path = script_path


class UnknownTemplateError(HookifyError):
    """The hook name is not part of the template catalogue."""

    def __init__(self, name: str, available: Iterable[str] = ()):
        message = f"Unknown hook: {name}"
        available = tuple(available)
        if available:
            message += f" (available: {', '.join(available)})"
        super().__init__(message)
        self.name = name
        self.available = available


class NotAGitRepositoryError(HookifyError):
    """The target directory has no .git/hooks directory."""

    def __init__(self, repo_path: str):
        super().__init__(f"Not a git repository: {repo_path}")
        self.repo_path = repo_path


class ValidationError(HookifyError):
    """A candidate registration failed structural or policy checks.

    Carries every violated rule, not just the first one.
    """

    def __init__(self, errors: Iterable[str]):
        self.errors = tuple(errors)
        super().__init__("Hook validation failed: " + "; ".join(self.errors))


class StoreCorruptError(HookifyError):
    """The hook store exists but cannot be parsed."""

    def __init__(self, path: str, reason: str, backup_path: Optional[str] = None):
        message = f"Hook store {path} is unreadable: {reason}"
        if backup_path:
            message += f" (copy saved to {backup_path})"
        super().__init__(message)
        self.path = path
        self.backup_path = backup_path


class ExecutionError(HookifyError):
    """A hook script could not be run to completion."""

    def __init__(self, message: str, output: str = ""):
        super().__init__(message)
        self.output = output


class HookTimeoutError(ExecutionError):
    """A hook script exceeded its timeout and was killed."""
