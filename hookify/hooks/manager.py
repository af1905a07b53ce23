"""Hook manager: register, toggle, list, and execute hooks.

Registrations live in a :class:`~hookify.hooks.store.HookStore` grouped by
hookKey (``type:name``). Executing a group runs every enabled script in
priority order, one after another, with CHITTY_HOOK_* environment variables
describing the hook and the caller's context.
"""

import json
import logging
import os
import stat
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from .contract import HookValidator, NullValidator, validate
from .errors import ExecutionError, ScriptNotFoundError, ValidationError
from .executor import ScriptExecutor, SubprocessExecutor
from .schema import (
    DEFAULT_PRIORITY,
    DEFAULT_TIMEOUT_MS,
    ExecutionReport,
    HookRegistration,
    HookResult,
    HookScope,
    HookType,
    make_hook_key,
    sort_by_priority,
)
from .store import HookStore


DEFAULT_LOG_DIR = "~/.chitty/logs"

_log = logging.getLogger(__name__)


def _value(item: Union[str, HookType, HookScope]) -> str:
    return item.value if isinstance(item, (HookType, HookScope)) else str(item)


def resolve_path(path: Union[str, Path]) -> str:
    return str(Path(path).expanduser().resolve())


class HookManager:
    """Manage hook registrations and run them."""

    def __init__(
        self,
        store: HookStore,
        log_dir: Optional[Union[str, Path]] = None,
        validator: Optional[HookValidator] = None,
        executor: Optional[ScriptExecutor] = None,
    ):
        self.store = store
        self.log_dir = Path(log_dir or DEFAULT_LOG_DIR).expanduser()
        self.validator = validator or NullValidator()
        self.executor = executor or SubprocessExecutor()

    # -- registration --

    def register(
        self,
        hook_type: Union[str, HookType],
        name: str,
        script_path: Union[str, Path],
        *,
        scope: Union[str, HookScope] = HookScope.REPO,
        repos: tuple[str, ...] = (),
        priority: int = DEFAULT_PRIORITY,
        blocking: bool = False,
        timeout: int = DEFAULT_TIMEOUT_MS,
        description: str = "",
        territory: Optional[str] = None,
    ) -> HookRegistration:
        """Validate and store a new registration.

        Raises ScriptNotFoundError if the script does not exist and
        ValidationError (with every violated rule) if validation fails.
        Nothing is stored on failure.
        """
        script = Path(script_path).expanduser().resolve()
        if not script.is_file():
            raise ScriptNotFoundError(str(script_path))

        candidate: dict[str, Any] = {
            "type": _value(hook_type),
            "name": name,
            "script": str(script),
            "enabled": True,
            "scope": _value(scope),
            "repos": [resolve_path(r) for r in repos],
            "priority": priority,
            "blocking": blocking,
            "timeout": timeout,
            "description": description,
            "created": datetime.now(timezone.utc).isoformat(),
        }
        if territory:
            candidate["governance"] = {
                "territory": territory,
                "blocking": blocking,
                "priority": priority,
                "scope": candidate["scope"],
            }

        result = validate(candidate, self.validator)
        if not result.valid:
            _log.info("Rejected %s:%s: %s", candidate["type"], name, "; ".join(result.errors))
            raise ValidationError(result.errors)

        _make_executable(script)

        hook_key = make_hook_key(candidate["type"], name)
        with self.store.transaction() as doc:
            taken = doc.ids()
            stamp = int(time.time() * 1000)
            while f"{hook_key}:{stamp}" in taken:
                stamp += 1
            candidate["id"] = f"{hook_key}:{stamp}"
            registration = HookRegistration.from_dict(candidate)
            doc.add(registration)

        _log.info("Registered hook: %s (%s)", hook_key, registration.id)
        return registration

    def unregister(self, hook_key: str, script_path: Optional[Union[str, Path]] = None) -> int:
        """Remove a group, or only the registrations for one script.

        Returns the number of registrations removed; zero is not an error.
        """
        with self.store.transaction() as doc:
            group = doc.group(hook_key)
            if script_path is None:
                kept = []
            else:
                target = resolve_path(script_path)
                kept = [r for r in group if r.script_path != target]
            doc.replace_group(hook_key, kept)

        removed = len(group) - len(kept)
        if removed:
            _log.info("Unregistered %d hook(s) from %s", removed, hook_key)
        return removed

    def toggle(self, hook_key: str, enabled: bool) -> int:
        """Enable or disable every registration under ``hook_key``."""
        with self.store.transaction() as doc:
            group = doc.group(hook_key)
            doc.replace_group(hook_key, [r.with_enabled(enabled) for r in group])

        if group:
            _log.info("%s hook: %s", "Enabled" if enabled else "Disabled", hook_key)
        return len(group)

    # -- queries --

    def get(self, hook_key: str) -> list[HookRegistration]:
        """One group, lowest priority first."""
        return sort_by_priority(self.store.load().group(hook_key))

    # -- execution --

    def execute(
        self,
        hook_type: Union[str, HookType],
        name: str,
        context: Optional[dict[str, Any]] = None,
    ) -> ExecutionReport:
        """Run every enabled hook in the group, in priority order.

        A failing blocking hook stops the run and is reported as
        ``stopped_by``; failing non-blocking hooks are recorded and skipped.
        """
        hook_key = make_hook_key(_value(hook_type), name)
        hooks = [h for h in self.get(hook_key) if h.enabled]
        if not hooks:
            return ExecutionReport(success=True)

        _log.info("Executing %d hook(s) for %s", len(hooks), hook_key)
        context_json = json.dumps(context or {})

        results = []
        for hook in hooks:
            result = self._run_single(hook, context_json)
            results.append(result)
            if not result.success and hook.blocking:
                _log.warning("Blocking hook %s failed, stopping execution", hook.id)
                return ExecutionReport(
                    success=False, results=tuple(results), stopped_by=hook.id,
                )

        return ExecutionReport(success=True, results=tuple(results))

    def _hook_env(self, hook: HookRegistration, context_json: str) -> dict[str, str]:
        env = dict(os.environ)
        env["CHITTY_HOOK_TYPE"] = hook.type.value
        env["CHITTY_HOOK_NAME"] = hook.name
        env["CHITTY_HOOK_ID"] = hook.id
        env["CHITTY_HOOK_CONTEXT"] = context_json
        if hook.governance is not None:
            env["CHITTY_HOOK_TERRITORY"] = hook.governance.territory
        return env

    def _run_single(self, hook: HookRegistration, context_json: str) -> HookResult:
        """Execute one hook; never raises."""
        env = self._hook_env(hook, context_json)
        log_lines = [f"\n=== {datetime.now(timezone.utc).isoformat()} - {hook.id} ===\n"]

        try:
            output = self.executor.execute(hook.script_path, env, hook.timeout)
        except ExecutionError as e:
            if e.output:
                log_lines.append(e.output)
            log_lines.append(f"ERROR: {e}\n")
            self._write_log(hook, log_lines)
            return HookResult(
                hook_id=hook.id, success=False, return_code=-1,
                output=e.output.strip(), error=str(e),
            )
        except Exception as e:
            log_lines.append(f"ERROR: Hook failed: {e}\n")
            self._write_log(hook, log_lines)
            return HookResult(
                hook_id=hook.id, success=False, return_code=-1,
                error=f"Hook failed: {e}",
            )

        log_lines.append(output.stdout)
        log_lines.append(output.stderr)
        error = ""
        if not output.success:
            error = f"exited with code {output.return_code}"
            log_lines.append(f"ERROR: {error}\n")
        self._write_log(hook, log_lines)

        return HookResult(
            hook_id=hook.id,
            success=output.success,
            return_code=output.return_code,
            output=output.text,
            error=error,
            duration=output.duration,
        )

    def log_path(self, hook: HookRegistration) -> Path:
        return self.log_dir / f"{hook.type.value}-{hook.name}.log"

    def _write_log(self, hook: HookRegistration, lines: list[str]) -> None:
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            with open(self.log_path(hook), "a", encoding="utf-8") as f:
                f.write("".join(lines))
        except OSError as e:
            _log.warning("Could not write hook log for %s: %s", hook.id, e)

    # Keep last: this name shadows the builtin list in the class body.
    def list(
        self,
        hook_type: Optional[Union[str, HookType]] = None,
        enabled: Optional[bool] = None,
        scope: Optional[Union[str, HookScope]] = None,
    ) -> list[HookRegistration]:
        """All registrations matching the filter, lowest priority first."""
        type_value = _value(hook_type) if hook_type is not None else None
        scope_value = _value(scope) if scope is not None else None

        matches = [
            reg for reg in self.store.load().all()
            if (type_value is None or reg.type.value == type_value)
            and (enabled is None or reg.enabled == enabled)
            and (scope_value is None or reg.scope.value == scope_value)
        ]
        return sort_by_priority(matches)


def _make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
