"""Run hook scripts as child processes.

The manager talks to an executor through :class:`ScriptExecutor` so the
timeout and logging behaviour can be tested with a fake executor.
"""

import subprocess
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .errors import ExecutionError, HookTimeoutError


@dataclass(frozen=True)
class ExecutionOutput:
    """What a finished script produced."""

    return_code: int
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return self.return_code == 0

    @property
    def text(self) -> str:
        return self.stdout.strip() or self.stderr.strip()


class ScriptExecutor(ABC):
    """Run one script with an environment and a timeout."""

    @abstractmethod
    def execute(self, script_path: str, env: dict[str, str], timeout_ms: int) -> ExecutionOutput:
        """Run ``script_path`` to completion.

        Returns the output for any exit code. Raises HookTimeoutError when the
        script is killed for exceeding ``timeout_ms`` and ExecutionError when it
        cannot be started.
        """


class SubprocessExecutor(ScriptExecutor):
    """Execute scripts directly (no shell) with subprocess.run."""

    def execute(self, script_path: str, env: dict[str, str], timeout_ms: int) -> ExecutionOutput:
        start = time.monotonic()
        try:
            proc = subprocess.run(
                [script_path],
                capture_output=True,
                text=True,
                timeout=timeout_ms / 1000,
                env=env,
            )
        except subprocess.TimeoutExpired as e:
            raise HookTimeoutError(
                f"Hook timed out after {timeout_ms}ms",
                output=_decode(e.stdout) + _decode(e.stderr),
            ) from e
        except OSError as e:
            raise ExecutionError(f"Hook failed to start: {e}") from e

        return ExecutionOutput(
            return_code=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
            duration=round(time.monotonic() - start, 3),
        )


def _decode(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
