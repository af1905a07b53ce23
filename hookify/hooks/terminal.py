"""Shell integration for terminal hooks.

Appends a guarded block to the user's shell rc files so that new sessions
run ``session-start`` and every ``cd`` runs ``cd-change``. The block is
written once per file; a second install leaves the file unchanged.
"""

import logging
import shlex
from pathlib import Path
from typing import Iterable, Optional, Union

from .errors import HookifyError


SHELL_RC_FILES = (".bashrc", ".zshrc")
TERMINAL_MARKER = "# Hookify terminal hooks"

_log = logging.getLogger(__name__)


def render_shell_snippet(command: str = "hookify") -> str:
    """The rc block; ``command`` is the hookify invocation (with any --config)."""
    return f"""
{TERMINAL_MARKER}
export CHITTY_HOOKS_ENABLED=1

if [ -z "$CHITTY_SESSION_STARTED" ]; then
    export CHITTY_SESSION_STARTED=1
    {command} run session-start >/dev/null 2>&1
fi

hookify_cd_hook() {{
    builtin cd "$@" || return
    {command} run cd-change -c "cwd=$(pwd)" >/dev/null 2>&1
}}
alias cd=hookify_cd_hook
# End hookify terminal hooks
"""


def hookify_command(config_path: Optional[Union[str, Path]] = None) -> str:
    if config_path is None:
        return "hookify"
    return f"hookify --config {shlex.quote(str(config_path))}"


def install_terminal_hooks(
    home: Optional[Union[str, Path]] = None,
    command: str = "hookify",
    rc_files: Iterable[str] = SHELL_RC_FILES,
) -> list[Path]:
    """Append the snippet to each existing rc file that lacks it.

    Missing rc files are not created. Returns the files that were changed.
    """
    home = Path(home).expanduser() if home is not None else Path.home()
    snippet = render_shell_snippet(command)

    installed = []
    for rc_name in rc_files:
        rc_path = home / rc_name
        if not rc_path.is_file():
            continue
        if TERMINAL_MARKER in rc_path.read_text(encoding="utf-8", errors="replace"):
            _log.debug("Terminal hooks already present in %s", rc_path)
            continue
        try:
            with open(rc_path, "a", encoding="utf-8") as f:
                f.write(snippet)
        except OSError as e:
            raise HookifyError(f"Cannot write {rc_path}: {e}") from e
        _log.info("Installed terminal hooks to %s", rc_path)
        installed.append(rc_path)

    return installed
