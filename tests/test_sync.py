"""Tests for git hook wrapper generation and repository sync."""

import os
import subprocess
from pathlib import Path

import pytest

from hookify.hooks.errors import ValidationError
from hookify.hooks.manager import HookManager
from hookify.hooks.schema import HookRegistration, HookType
from hookify.hooks.store import HookStore
from hookify.hooks.sync import GitHookSynchronizer, find_git_repos, is_git_repo, render_wrapper


def _script(tmp_path, name: str, body: str = "exit 0") -> str:
    path = tmp_path / "scripts" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!/bin/sh\n{body}\n")
    path.chmod(0o755)
    return str(path.resolve())


def _repo(tmp_path, name: str = "repo") -> Path:
    repo = tmp_path / name
    (repo / ".git" / "hooks").mkdir(parents=True)
    return repo


@pytest.fixture
def manager(tmp_path):
    return HookManager(HookStore(str(tmp_path / "hooks.json")), tmp_path / "logs")


@pytest.fixture
def synchronizer(manager):
    return GitHookSynchronizer(manager)


class TestRenderWrapper:

    def _reg(self, id_, script, priority=50, blocking=False, enabled=True):
        return HookRegistration(
            id=id_, type=HookType.GIT, name="pre-commit", script_path=script,
            created="2026-01-01T00:00:00+00:00", priority=priority,
            blocking=blocking, enabled=enabled,
        )

    def test_header_and_exports(self):
        text = render_wrapper("pre-commit", [])
        assert text.startswith("#!/bin/sh\n")
        assert 'export CHITTY_HOOK_TYPE="git"' in text
        assert "export CHITTY_HOOK_NAME=pre-commit" in text
        assert text.rstrip().endswith("exit 0")

    def test_priority_order(self):
        text = render_wrapper("pre-commit", [
            self._reg("b", "/s/format.sh", priority=20),
            self._reg("a", "/s/lint.sh", priority=10),
        ])
        assert text.index("/s/lint.sh") < text.index("/s/format.sh")

    def test_blocking_exits(self):
        text = render_wrapper("pre-commit", [self._reg("a", "/s/lint.sh", blocking=True)])
        assert "    exit 1" in text
        assert "continuing" not in text

    def test_non_blocking_continues(self):
        text = render_wrapper("pre-commit", [self._reg("a", "/s/lint.sh")])
        assert "exit 1" not in text
        assert "Non-blocking hook failed, continuing..." in text

    def test_forwards_arguments(self):
        text = render_wrapper("pre-commit", [self._reg("a", "/s/lint.sh")])
        assert '/s/lint.sh "$@"' in text

    def test_disabled_excluded(self):
        text = render_wrapper("pre-commit", [self._reg("a", "/s/lint.sh", enabled=False)])
        assert "/s/lint.sh" not in text

    def test_paths_with_spaces_quoted(self):
        text = render_wrapper("pre-commit", [self._reg("a", "/my scripts/lint.sh")])
        assert "'/my scripts/lint.sh' \"$@\"" in text


class TestSyncToRepo:

    def test_not_a_repo(self, tmp_path, synchronizer):
        (tmp_path / "plain").mkdir()
        assert synchronizer.sync_to_repo(tmp_path / "plain") is False

    def test_writes_executable_wrapper(self, tmp_path, manager, synchronizer):
        repo = _repo(tmp_path)
        script = _script(tmp_path, "lint.sh")
        manager.register("git", "pre-commit", script)

        assert synchronizer.sync_to_repo(repo) is True
        hook_file = repo / ".git" / "hooks" / "pre-commit"
        assert script in hook_file.read_text()
        assert os.access(hook_file, os.X_OK)

    def test_only_git_hooks_written(self, tmp_path, manager, synchronizer):
        repo = _repo(tmp_path)
        manager.register("terminal", "session-start", _script(tmp_path, "a.sh"))
        manager.register("custom", "pre-deploy", _script(tmp_path, "b.sh"))
        synchronizer.sync_to_repo(repo)
        assert list((repo / ".git" / "hooks").iterdir()) == []

    def test_idempotent(self, tmp_path, manager, synchronizer):
        repo = _repo(tmp_path)
        manager.register("git", "pre-commit", _script(tmp_path, "lint.sh"), priority=10, blocking=True)
        manager.register("git", "pre-commit", _script(tmp_path, "fmt.sh"), priority=20)
        manager.register("git", "pre-push", _script(tmp_path, "test.sh"))

        synchronizer.sync_to_repo(repo)
        first = {p.name: p.read_bytes() for p in (repo / ".git" / "hooks").iterdir()}
        synchronizer.sync_to_repo(repo)
        second = {p.name: p.read_bytes() for p in (repo / ".git" / "hooks").iterdir()}
        assert first == second
        assert set(first) == {"pre-commit", "pre-push"}

    def test_disabled_hooks_excluded(self, tmp_path, manager, synchronizer):
        repo = _repo(tmp_path)
        lint = _script(tmp_path, "lint.sh")
        manager.register("git", "pre-commit", lint)
        manager.toggle("git:pre-commit", False)

        synchronizer.sync_to_repo(repo)
        assert lint not in (repo / ".git" / "hooks" / "pre-commit").read_text()
        assert len(manager.list()) == 1

    def test_targeted_repos(self, tmp_path, manager, synchronizer):
        repo_a = _repo(tmp_path, "a")
        repo_b = _repo(tmp_path, "b")
        script = _script(tmp_path, "lint.sh")
        manager.register("git", "pre-commit", script, repos=(str(repo_a),))

        synchronizer.sync_to_repo(repo_a)
        synchronizer.sync_to_repo(repo_b)
        assert script in (repo_a / ".git" / "hooks" / "pre-commit").read_text()
        assert script not in (repo_b / ".git" / "hooks" / "pre-commit").read_text()

    def test_removed_group_wrapper_deleted(self, tmp_path, manager, synchronizer):
        repo = _repo(tmp_path)
        manager.register("git", "pre-commit", _script(tmp_path, "lint.sh", "exit 1"), blocking=True)
        manager.register("git", "pre-push", _script(tmp_path, "test.sh"))
        synchronizer.sync_to_repo(repo)

        manager.unregister("git:pre-commit")
        assert synchronizer.sync_to_repo(repo) is True

        hooks_dir = repo / ".git" / "hooks"
        assert not (hooks_dir / "pre-commit").exists()
        assert (hooks_dir / "pre-push").exists()

    def test_foreign_hooks_left_alone(self, tmp_path, manager, synchronizer):
        repo = _repo(tmp_path)
        hooks_dir = repo / ".git" / "hooks"
        (hooks_dir / "pre-rebase").write_text("#!/bin/sh\necho mine\n")
        (hooks_dir / "pre-commit.sample").write_text("#!/bin/sh\nexit 0\n")

        synchronizer.sync_to_repo(repo)
        assert (hooks_dir / "pre-rebase").read_text() == "#!/bin/sh\necho mine\n"
        assert (hooks_dir / "pre-commit.sample").exists()

    def test_unsafe_name_never_reaches_repo(self, tmp_path, manager, synchronizer):
        repo = _repo(tmp_path)
        with pytest.raises(ValidationError):
            manager.register("git", "../../evil", _script(tmp_path, "evil.sh"))

        synchronizer.sync_to_repo(repo)
        assert not (repo / "evil").exists()
        assert manager.list() == []

    def test_preview_matches_written_file(self, tmp_path, manager, synchronizer):
        repo = _repo(tmp_path)
        manager.register("git", "commit-msg", _script(tmp_path, "msg.sh"))
        synchronizer.sync_to_repo(repo)
        written = (repo / ".git" / "hooks" / "commit-msg").read_text()
        assert synchronizer.preview("commit-msg", repo) == written


class TestWrapperBehaviour:
    """Run the generated wrapper with a real shell."""

    def _run(self, repo: Path, name: str, *args):
        return subprocess.run(
            [str(repo / ".git" / "hooks" / name), *args],
            capture_output=True, text=True, timeout=10,
        )

    def test_blocking_failure_halts(self, tmp_path, manager, synchronizer):
        repo = _repo(tmp_path)
        marker = tmp_path / "format-ran"
        manager.register("git", "pre-commit", _script(tmp_path, "lint.sh", "exit 1"),
                         priority=10, blocking=True)
        manager.register("git", "pre-commit", _script(tmp_path, "format.sh", f"touch {marker}"),
                         priority=20, blocking=False)
        synchronizer.sync_to_repo(repo)

        proc = self._run(repo, "pre-commit")
        assert proc.returncode == 1
        assert not marker.exists()

    def test_non_blocking_failure_continues(self, tmp_path, manager, synchronizer):
        repo = _repo(tmp_path)
        marker = tmp_path / "format-ran"
        manager.register("git", "pre-commit", _script(tmp_path, "lint.sh", "exit 0"),
                         priority=10, blocking=True)
        manager.register("git", "pre-commit", _script(tmp_path, "format.sh", f"touch {marker}\nexit 1"),
                         priority=20, blocking=False)
        synchronizer.sync_to_repo(repo)

        proc = self._run(repo, "pre-commit")
        assert proc.returncode == 0
        assert marker.exists()

    def test_arguments_forwarded(self, tmp_path, manager, synchronizer):
        repo = _repo(tmp_path)
        out = tmp_path / "args"
        manager.register("git", "commit-msg", _script(tmp_path, "msg.sh", f'echo "$1" > {out}'))
        synchronizer.sync_to_repo(repo)

        self._run(repo, "commit-msg", ".git/COMMIT_EDITMSG")
        assert out.read_text().strip() == ".git/COMMIT_EDITMSG"


    def test_removed_hook_no_longer_blocks(self, tmp_path, manager, synchronizer):
        repo = _repo(tmp_path)
        manager.register("git", "pre-commit", _script(tmp_path, "lint.sh", "exit 1"), blocking=True)
        synchronizer.sync_to_repo(repo)
        assert self._run(repo, "pre-commit").returncode == 1

        manager.unregister("git:pre-commit")
        synchronizer.sync_to_repo(repo)
        assert not (repo / ".git" / "hooks" / "pre-commit").exists()


class TestFindGitRepos:

    def test_finds_nested(self, tmp_path):
        _repo(tmp_path, "one")
        _repo(tmp_path, "group/two")
        found = find_git_repos(tmp_path, max_depth=3)
        assert sorted(p.name for p in found) == ["one", "two"]

    def test_depth_limit(self, tmp_path):
        _repo(tmp_path, "a/b/c/deep")
        assert find_git_repos(tmp_path, max_depth=2) == []

    def test_skips_hidden(self, tmp_path):
        _repo(tmp_path, ".cache/hidden")
        assert find_git_repos(tmp_path) == []

    def test_missing_root(self, tmp_path):
        assert find_git_repos(tmp_path / "missing") == []

    def test_is_git_repo(self, tmp_path):
        assert is_git_repo(_repo(tmp_path))
        assert not is_git_repo(tmp_path)


class TestSyncAll:

    def test_syncs_discovered(self, tmp_path, manager, synchronizer):
        root = tmp_path / "code"
        _repo(root, "a")
        _repo(root, "b")
        manager.register("git", "pre-push", _script(tmp_path, "t.sh"))

        count = synchronizer.sync_all([root, tmp_path / "nowhere"], max_depth=3)
        assert count == 2
        assert (root / "a" / ".git" / "hooks" / "pre-push").exists()

    def test_repo_without_hooks_dir_not_counted(self, tmp_path, synchronizer):
        root = tmp_path / "code"
        (root / "bare" / ".git").mkdir(parents=True)
        assert synchronizer.sync_all([root]) == 0
