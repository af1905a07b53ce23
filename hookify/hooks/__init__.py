"""Hook registration, execution, and git synchronization."""

from .contract import (
    HookValidator,
    NullValidator,
    RemoteGovernance,
    TerritoryPolicy,
    ValidationResult,
    build_validator,
    check_structure,
)
from .errors import (
    ExecutionError,
    HookifyError,
    HookTimeoutError,
    NotAGitRepositoryError,
    ScriptNotFoundError,
    StoreCorruptError,
    UnknownTemplateError,
    ValidationError,
)
from .executor import ExecutionOutput, ScriptExecutor, SubprocessExecutor
from .manager import HookManager
from .schema import (
    ExecutionReport,
    Governance,
    HookRegistration,
    HookResult,
    HookScope,
    HookType,
    make_hook_key,
)
from .store import HookStore
from .sync import GitHookSynchronizer, find_git_repos, render_wrapper
from .templates import HookTemplate, create_script, get_template
from .terminal import install_terminal_hooks, render_shell_snippet

__all__ = [
    "HookValidator",
    "NullValidator",
    "RemoteGovernance",
    "TerritoryPolicy",
    "ValidationResult",
    "build_validator",
    "check_structure",
    "ExecutionError",
    "HookifyError",
    "HookTimeoutError",
    "NotAGitRepositoryError",
    "ScriptNotFoundError",
    "StoreCorruptError",
    "UnknownTemplateError",
    "ValidationError",
    "ExecutionOutput",
    "ScriptExecutor",
    "SubprocessExecutor",
    "HookManager",
    "ExecutionReport",
    "Governance",
    "HookRegistration",
    "HookResult",
    "HookScope",
    "HookType",
    "make_hook_key",
    "HookStore",
    "GitHookSynchronizer",
    "find_git_repos",
    "render_wrapper",
    "HookTemplate",
    "create_script",
    "get_template",
    "install_terminal_hooks",
    "render_shell_snippet",
]
