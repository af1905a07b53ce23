"""Tests for shell rc integration of terminal hooks."""

import os
import subprocess

import pytest

from hookify.hooks.errors import HookifyError
from hookify.hooks.terminal import (
    TERMINAL_MARKER,
    hookify_command,
    install_terminal_hooks,
    render_shell_snippet,
)


@pytest.fixture
def home(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    return home


class TestRenderShellSnippet:

    def test_runs_terminal_events(self):
        snippet = render_shell_snippet()
        assert TERMINAL_MARKER in snippet
        assert "hookify run session-start" in snippet
        assert 'hookify run cd-change -c "cwd=$(pwd)"' in snippet
        assert "alias cd=hookify_cd_hook" in snippet

    def test_session_start_guarded(self):
        snippet = render_shell_snippet()
        assert 'if [ -z "$CHITTY_SESSION_STARTED" ]; then' in snippet

    def test_parses_as_shell(self, tmp_path):
        rc = tmp_path / "rc"
        rc.write_text(render_shell_snippet(hookify_command("/tmp/my config.yaml")))
        assert subprocess.run(["sh", "-n", str(rc)]).returncode == 0


class TestHookifyCommand:

    def test_default(self):
        assert hookify_command() == "hookify"

    def test_config_quoted(self):
        assert hookify_command("/tmp/my config.yaml") == "hookify --config '/tmp/my config.yaml'"


class TestInstallTerminalHooks:

    def test_appends_to_existing_rc_files(self, home):
        (home / ".bashrc").write_text("export PATH=/bin\n")
        (home / ".zshrc").write_text("")

        installed = install_terminal_hooks(home)

        assert installed == [home / ".bashrc", home / ".zshrc"]
        bashrc = (home / ".bashrc").read_text()
        assert bashrc.startswith("export PATH=/bin\n")
        assert TERMINAL_MARKER in bashrc

    def test_missing_rc_not_created(self, home):
        (home / ".bashrc").write_text("")
        assert install_terminal_hooks(home) == [home / ".bashrc"]
        assert not (home / ".zshrc").exists()

    def test_idempotent(self, home):
        (home / ".bashrc").write_text("")
        install_terminal_hooks(home)
        first = (home / ".bashrc").read_text()

        assert install_terminal_hooks(home) == []
        assert (home / ".bashrc").read_text() == first
        assert first.count(TERMINAL_MARKER) == 1

    def test_custom_command(self, home):
        (home / ".zshrc").write_text("")
        install_terminal_hooks(home, command="hookify --config /etc/h.yaml")
        assert "hookify --config /etc/h.yaml run session-start" in (home / ".zshrc").read_text()

    @pytest.mark.skipif(os.geteuid() == 0, reason="root ignores file modes")
    def test_unwritable_rc_raises(self, home):
        rc = home / ".bashrc"
        rc.write_text("")
        rc.chmod(0o444)
        try:
            with pytest.raises(HookifyError):
                install_terminal_hooks(home)
        finally:
            rc.chmod(0o644)
