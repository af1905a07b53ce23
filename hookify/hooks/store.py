"""JSON-file hook store.

The whole document is loaded and saved on every operation. Mutations go
through :meth:`HookStore.transaction`, which holds an exclusive file lock for
the read-modify-write cycle and replaces the file atomically.
"""

import json
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from filelock import FileLock, Timeout

from .errors import HookifyError, StoreCorruptError
from .schema import HookRegistration, HookScope


STORE_VERSION = "1.0.0"
DEFAULT_STORE_PATH = "~/.chitty/hooks.json"
LOCK_TIMEOUT = 10

_log = logging.getLogger(__name__)


class StoreDocument:
    """In-memory form of the store: hookKey -> registrations in insert order."""

    def __init__(
        self,
        hooks: Optional[dict[str, list[HookRegistration]]] = None,
        version: str = STORE_VERSION,
    ):
        self.version = version
        self.hooks: dict[str, list[HookRegistration]] = hooks or {}

    def group(self, hook_key: str) -> list[HookRegistration]:
        return list(self.hooks.get(hook_key, ()))

    def all(self) -> list[HookRegistration]:
        return [reg for group in self.hooks.values() for reg in group]

    def ids(self) -> set[str]:
        return {reg.id for reg in self.all()}

    def add(self, registration: HookRegistration) -> None:
        self.hooks.setdefault(registration.hook_key, []).append(registration)

    def replace_group(self, hook_key: str, registrations: list[HookRegistration]) -> None:
        if registrations:
            self.hooks[hook_key] = list(registrations)
        else:
            self.hooks.pop(hook_key, None)

    def to_dict(self) -> dict[str, Any]:
        """Serialize, rebuilding the scope indexes from the registrations."""
        global_hooks: dict[str, list[str]] = {}
        repo_hooks: dict[str, list[str]] = {}

        for hook_key, group in self.hooks.items():
            for reg in group:
                if reg.scope == HookScope.GLOBAL:
                    global_hooks.setdefault(hook_key, []).append(reg.id)
                for repo in reg.repos:
                    repo_hooks.setdefault(repo, []).append(reg.id)

        return {
            "version": self.version,
            "hooks": {
                key: [reg.to_dict() for reg in group]
                for key, group in self.hooks.items()
            },
            "global_hooks": global_hooks,
            "repo_hooks": repo_hooks,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "StoreDocument":
        """Parse a loaded JSON document. Raises ValueError on bad shape."""
        if not isinstance(data, dict):
            raise ValueError("top level is not an object")
        raw_hooks = data.get("hooks", {})
        if not isinstance(raw_hooks, dict):
            raise ValueError("'hooks' is not an object")

        hooks: dict[str, list[HookRegistration]] = {}
        for hook_key, entries in raw_hooks.items():
            if not isinstance(entries, list):
                raise ValueError(f"hooks[{hook_key!r}] is not a list")
            try:
                hooks[hook_key] = [HookRegistration.from_dict(e) for e in entries]
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"bad registration under {hook_key!r}: {e}") from e

        return cls(hooks=hooks, version=str(data.get("version", STORE_VERSION)))


class HookStore:
    """Persist hook registrations to a single JSON file."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or DEFAULT_STORE_PATH).expanduser()
        self.lock_path = self.path.with_suffix(self.path.suffix + ".lock")

    def ensure(self) -> None:
        """Create an empty store on first run."""
        if not self.path.exists():
            self.save(StoreDocument())

    def load(self) -> StoreDocument:
        """Read the store.

        A missing file is an empty store. A file that exists but cannot be
        parsed is copied aside and reported with StoreCorruptError.
        """
        if not self.path.exists():
            return StoreDocument()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return StoreDocument.from_dict(json.load(f))
        except (OSError, ValueError) as e:
            backup = self._backup_corrupt()
            _log.error("Failed to load hook store %s: %s", self.path, e)
            raise StoreCorruptError(str(self.path), str(e), backup) from e

    def save(self, doc: StoreDocument) -> None:
        """Write the document atomically (temp file + rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(doc.to_dict(), indent=2) + "\n"

        fd, temp_path = tempfile.mkstemp(
            suffix=".tmp",
            prefix=self.path.stem + "_",
            dir=self.path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(temp_path, self.path)
        except Exception:
            Path(temp_path).unlink(missing_ok=True)
            raise

    @contextmanager
    def transaction(self) -> Iterator[StoreDocument]:
        """Lock, load, yield the document, and save it if the block succeeds."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        lock = FileLock(str(self.lock_path), timeout=LOCK_TIMEOUT)
        try:
            with lock:
                doc = self.load()
                yield doc
                self.save(doc)
        except Timeout as e:
            raise HookifyError(
                f"Hook store {self.path} is locked by another process"
            ) from e

    def _backup_corrupt(self) -> Optional[str]:
        backup = self.path.with_suffix(self.path.suffix + ".corrupt")
        try:
            shutil.copyfile(self.path, backup)
        except OSError as e:
            _log.warning("Could not back up corrupt store %s: %s", self.path, e)
            return None
        return str(backup)
