"""Hook registration records and execution results."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional


DEFAULT_PRIORITY = 50
DEFAULT_TIMEOUT_MS = 30000
MIN_PRIORITY = 0
MAX_PRIORITY = 100


class HookType(str, Enum):
    """Categories a hook can be registered under."""

    GIT = "git"
    TERMINAL = "terminal"
    CUSTOM = "custom"


class HookScope(str, Enum):
    """Propagation intent of a hook."""

    GLOBAL = "global"
    REPO = "repo"
    PROJECT = "project"


HOOK_TYPES = tuple(t.value for t in HookType)
HOOK_SCOPES = tuple(s.value for s in HookScope)


def make_hook_key(hook_type: str, name: str) -> str:
    """Join a type and event name into the grouping key."""
    return f"{hook_type}:{name}"


def split_hook_key(hook_key: str) -> tuple[str, str]:
    """Split ``type:name`` back into its parts."""
    hook_type, _, name = hook_key.partition(":")
    return hook_type, name


@dataclass(frozen=True)
class Governance:
    """Administrative tags checked by governance policy."""

    territory: str
    blocking: bool
    priority: int
    scope: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "territory": self.territory,
            "blocking": self.blocking,
            "priority": self.priority,
            "scope": self.scope,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Governance":
        return cls(
            territory=str(data["territory"]),
            blocking=bool(data["blocking"]),
            priority=int(data["priority"]),
            scope=str(data["scope"]),
        )


@dataclass(frozen=True)
class HookRegistration:
    """A single script bound to a lifecycle event.

    Registrations are immutable apart from ``enabled``; use
    :meth:`with_enabled` to get a toggled copy.
    """

    id: str
    type: HookType
    name: str
    script_path: str
    created: str
    enabled: bool = True
    scope: HookScope = HookScope.REPO
    repos: tuple[str, ...] = ()
    priority: int = DEFAULT_PRIORITY
    blocking: bool = False
    timeout: int = DEFAULT_TIMEOUT_MS
    description: str = ""
    governance: Optional[Governance] = None

    @property
    def hook_key(self) -> str:
        return make_hook_key(self.type.value, self.name)

    def with_enabled(self, enabled: bool) -> "HookRegistration":
        return replace(self, enabled=enabled)

    def applies_to_repo(self, repo_path: str) -> bool:
        """True unless the hook is targeted at an explicit list of other repos."""
        if not self.repos:
            return True
        return repo_path in self.repos

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "name": self.name,
            "script": self.script_path,
            "enabled": self.enabled,
            "scope": self.scope.value,
            "repos": list(self.repos),
            "priority": self.priority,
            "blocking": self.blocking,
            "timeout": self.timeout,
            "description": self.description,
            "created": self.created,
        }
        if self.governance is not None:
            data["governance"] = self.governance.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HookRegistration":
        """Build a registration from its stored form.

        Raises KeyError or ValueError on malformed entries.
        """
        governance = data.get("governance")
        return cls(
            id=str(data["id"]),
            type=HookType(data["type"]),
            name=str(data["name"]),
            script_path=str(data["script"]),
            created=str(data["created"]),
            enabled=bool(data.get("enabled", True)),
            scope=HookScope(data.get("scope", HookScope.REPO.value)),
            repos=tuple(str(r) for r in data.get("repos") or ()),
            priority=int(data.get("priority", DEFAULT_PRIORITY)),
            blocking=bool(data.get("blocking", False)),
            timeout=int(data.get("timeout") or DEFAULT_TIMEOUT_MS),
            description=str(data.get("description", "")),
            governance=Governance.from_dict(governance) if governance else None,
        )


def sort_by_priority(registrations) -> list[HookRegistration]:
    """Ascending priority; ties keep their registration order."""
    return sorted(registrations, key=lambda r: r.priority)


@dataclass(frozen=True)
class HookResult:
    """Outcome of running one hook script."""

    hook_id: str
    success: bool
    return_code: int
    output: str = ""
    error: str = ""
    duration: float = 0.0


@dataclass(frozen=True)
class ExecutionReport:
    """Outcome of running every enabled hook in a group."""

    success: bool
    results: tuple[HookResult, ...] = field(default_factory=tuple)
    stopped_by: Optional[str] = None

    @property
    def failed(self) -> tuple[HookResult, ...]:
        return tuple(r for r in self.results if not r.success)
