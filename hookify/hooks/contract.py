"""Structural and governance validation for hook registrations.

Validation runs on the candidate's stored form (a plain dict) so malformed
values can be reported before they are turned into a HookRegistration.
Validators are pluggable: :class:`NullValidator` for environments without
governance, :class:`TerritoryPolicy` for locally configured rules, and
:class:`RemoteGovernance` for a governance service reached over HTTP.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import httpx

from .errors import HookifyError
from .schema import HOOK_SCOPES, HOOK_TYPES, MAX_PRIORITY, MIN_PRIORITY, make_hook_key


_log = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("type", "name", "script")


@dataclass(frozen=True)
class ValidationResult:
    """Pass/fail plus every reason for failure."""

    valid: bool
    errors: tuple[str, ...] = ()

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def failed(cls, errors: Iterable[str]) -> "ValidationResult":
        errors = tuple(errors)
        return cls(valid=not errors, errors=errors)

    def __add__(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(
            valid=self.valid and other.valid,
            errors=self.errors + other.errors,
        )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_structure(candidate: dict[str, Any]) -> ValidationResult:
    """Built-in structural rules applied to every registration."""
    errors = []

    for key in _REQUIRED_FIELDS:
        if not candidate.get(key):
            errors.append(f"missing required field: {key}")

    # Git hook names become file names under .git/hooks.
    name = candidate.get("name")
    if isinstance(name, str) and name and (
        "/" in name or "\\" in name or name.startswith(".")
    ):
        errors.append(f"invalid name '{name}' (no path separators or leading '.')")

    hook_type = candidate.get("type")
    if hook_type and hook_type not in HOOK_TYPES:
        errors.append(
            f"invalid type '{hook_type}' (expected one of: {', '.join(HOOK_TYPES)})"
        )

    scope = candidate.get("scope")
    if scope is not None and scope not in HOOK_SCOPES:
        errors.append(
            f"invalid scope '{scope}' (expected one of: {', '.join(HOOK_SCOPES)})"
        )

    priority = candidate.get("priority")
    if not _is_int(priority) or not MIN_PRIORITY <= priority <= MAX_PRIORITY:
        errors.append(
            f"priority must be an integer between {MIN_PRIORITY} and {MAX_PRIORITY}, "
            f"got {priority!r}"
        )

    timeout = candidate.get("timeout")
    if not _is_int(timeout) or timeout <= 0:
        errors.append(f"timeout must be a positive number of milliseconds, got {timeout!r}")

    return ValidationResult.failed(errors)


class HookValidator(ABC):
    """Pluggable contract check for candidate registrations."""

    @abstractmethod
    def validate_structure(self, candidate: dict[str, Any]) -> ValidationResult:
        """Check the shape of the candidate beyond the built-in rules."""

    @abstractmethod
    def validate_policy(self, candidate: dict[str, Any]) -> ValidationResult:
        """Check the candidate against governance policy."""


class NullValidator(HookValidator):
    """Accept everything. Used when no governance is configured."""

    def validate_structure(self, candidate: dict[str, Any]) -> ValidationResult:
        return ValidationResult.ok()

    def validate_policy(self, candidate: dict[str, Any]) -> ValidationResult:
        return ValidationResult.ok()


class TerritoryPolicy(HookValidator):
    """Territory-based rules loaded from the ``governance`` config section.

    ``territories`` maps a territory to the hook types it may register.
    ``rules`` maps a hookKey to ``require_blocking`` and ``max_timeout``.
    """

    def __init__(
        self,
        territories: Optional[dict[str, list[str]]] = None,
        rules: Optional[dict[str, dict[str, Any]]] = None,
        require_territory: bool = False,
    ):
        self.territories = {k: tuple(v or ()) for k, v in (territories or {}).items()}
        self.rules = dict(rules or {})
        self.require_territory = require_territory

    def validate_structure(self, candidate: dict[str, Any]) -> ValidationResult:
        governance = candidate.get("governance")
        if governance is None:
            return ValidationResult.ok()

        errors = []
        if not isinstance(governance, dict):
            return ValidationResult.failed(["governance must be a mapping"])
        for key in ("territory", "blocking", "priority", "scope"):
            if key not in governance:
                errors.append(f"governance is missing '{key}'")
        return ValidationResult.failed(errors)

    def validate_policy(self, candidate: dict[str, Any]) -> ValidationResult:
        errors = []
        hook_type = candidate.get("type", "")
        governance = candidate.get("governance") or {}
        territory = governance.get("territory")

        if territory is None:
            if self.require_territory:
                errors.append("a territory is required by governance policy")
        elif self.territories:
            allowed = self.territories.get(territory)
            if allowed is None:
                errors.append(f"unknown territory '{territory}'")
            elif hook_type not in allowed:
                errors.append(
                    f"territory '{territory}' may not register {hook_type} hooks"
                )

        rule = self.rules.get(make_hook_key(hook_type, candidate.get("name", "")))
        if rule:
            if rule.get("require_blocking") and not candidate.get("blocking"):
                errors.append("policy requires this hook to be blocking")
            max_timeout = rule.get("max_timeout")
            timeout = candidate.get("timeout")
            if max_timeout and _is_int(timeout) and timeout > max_timeout:
                errors.append(
                    f"timeout {timeout}ms exceeds policy maximum of {max_timeout}ms"
                )

        return ValidationResult.failed(errors)


class RemoteGovernance(HookValidator):
    """Ask a governance service to validate the candidate.

    The service answers ``POST {url}/validate/structure`` and
    ``POST {url}/validate/policy`` with ``{"valid": bool, "errors": [str]}``.
    Any transport or protocol failure rejects the candidate.
    """

    def __init__(
        self,
        url: str,
        token: str = "",
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.url = url.rstrip("/")
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.client = client or httpx.Client(timeout=timeout, headers=headers)

    def validate_structure(self, candidate: dict[str, Any]) -> ValidationResult:
        return self._post("structure", candidate)

    def validate_policy(self, candidate: dict[str, Any]) -> ValidationResult:
        return self._post("policy", candidate)

    def _post(self, check: str, candidate: dict[str, Any]) -> ValidationResult:
        endpoint = f"{self.url}/validate/{check}"
        try:
            response = self.client.post(endpoint, json={"hook": candidate})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            _log.warning("Governance %s check rejected: %s", check, e)
            return ValidationResult.failed(
                [f"governance service returned {e.response.status_code} for {check} check"]
            )
        except (httpx.HTTPError, ValueError) as e:
            _log.warning("Governance %s check failed: %s", check, e)
            return ValidationResult.failed([f"governance service unavailable: {e}"])

        if not isinstance(data, dict) or "valid" not in data:
            return ValidationResult.failed(
                [f"governance service sent a malformed {check} response"]
            )
        errors = [str(e) for e in data.get("errors") or ()]
        if not data["valid"] and not errors:
            errors = [f"rejected by governance {check} check"]
        return ValidationResult(valid=bool(data["valid"]) and not errors, errors=tuple(errors))


def validate(candidate: dict[str, Any], validator: HookValidator) -> ValidationResult:
    """Run built-in, structural, and policy checks and merge every error."""
    return (
        check_structure(candidate)
        + validator.validate_structure(candidate)
        + validator.validate_policy(candidate)
    )


def build_validator(governance: dict[str, Any]) -> HookValidator:
    """Pick a validator from the ``governance`` config section."""
    mode = governance.get("mode", "none")

    if mode == "policy":
        return TerritoryPolicy(
            territories=governance.get("territories"),
            rules=governance.get("rules"),
            require_territory=bool(governance.get("require_territory", False)),
        )
    if mode == "remote":
        url = governance.get("url", "")
        if not url:
            raise HookifyError("governance.mode is 'remote' but governance.url is empty")
        return RemoteGovernance(
            url,
            token=governance.get("token", ""),
            timeout=float(governance.get("timeout", 10)),
        )
    if mode not in ("none", "", None):
        raise HookifyError(f"unknown governance mode: {mode}")
    return NullValidator()
