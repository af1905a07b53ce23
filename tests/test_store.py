"""Tests for the JSON hook store."""

import json

import pytest

from hookify.hooks.errors import StoreCorruptError
from hookify.hooks.schema import HookRegistration, HookScope, HookType
from hookify.hooks.store import HookStore, StoreDocument


def _reg(id_: str, name: str = "pre-commit", **overrides) -> HookRegistration:
    fields = dict(
        id=id_,
        type=HookType.GIT,
        name=name,
        script_path="/scripts/lint.sh",
        created="2026-01-01T00:00:00+00:00",
    )
    fields.update(overrides)
    return HookRegistration(**fields)


class TestLoad:

    def test_missing_file_is_empty(self, tmp_path):
        store = HookStore(str(tmp_path / "hooks.json"))
        doc = store.load()
        assert doc.hooks == {}
        assert not store.path.exists()

    def test_ensure_creates_empty_store(self, tmp_path):
        store = HookStore(str(tmp_path / "nested" / "hooks.json"))
        store.ensure()
        data = json.loads(store.path.read_text())
        assert data == {"version": "1.0.0", "hooks": {}, "global_hooks": {}, "repo_hooks": {}}

    def test_ensure_leaves_existing_store(self, tmp_path):
        store = HookStore(str(tmp_path / "hooks.json"))
        store.save(StoreDocument(hooks={"git:pre-commit": [_reg("a")]}))
        store.ensure()
        assert len(store.load().group("git:pre-commit")) == 1

    def test_corrupt_file_raises_and_backs_up(self, tmp_path):
        path = tmp_path / "hooks.json"
        path.write_text("{not json")
        store = HookStore(str(path))

        with pytest.raises(StoreCorruptError) as exc_info:
            store.load()

        backup = tmp_path / "hooks.json.corrupt"
        assert backup.read_text() == "{not json"
        assert exc_info.value.backup_path == str(backup)
        # Corrupt file left in place for inspection.
        assert path.read_text() == "{not json"

    def test_bad_registration_is_corrupt(self, tmp_path):
        path = tmp_path / "hooks.json"
        path.write_text(json.dumps({"hooks": {"git:pre-commit": [{"type": "git"}]}}))
        with pytest.raises(StoreCorruptError):
            HookStore(str(path)).load()

    def test_hooks_not_a_mapping_is_corrupt(self, tmp_path):
        path = tmp_path / "hooks.json"
        path.write_text(json.dumps({"hooks": []}))
        with pytest.raises(StoreCorruptError):
            HookStore(str(path)).load()


class TestSave:

    def test_round_trip(self, tmp_path):
        store = HookStore(str(tmp_path / "hooks.json"))
        doc = StoreDocument()
        doc.add(_reg("a", priority=10))
        doc.add(_reg("b", name="pre-push", blocking=True))
        store.save(doc)

        loaded = store.load()
        assert loaded.group("git:pre-commit") == [_reg("a", priority=10)]
        assert loaded.group("git:pre-push") == [_reg("b", name="pre-push", blocking=True)]

    def test_indexes_rebuilt(self, tmp_path):
        store = HookStore(str(tmp_path / "hooks.json"))
        doc = StoreDocument()
        doc.add(_reg("a", scope=HookScope.GLOBAL))
        doc.add(_reg("b", repos=("/repo/x",)))
        store.save(doc)

        data = json.loads(store.path.read_text())
        assert data["global_hooks"] == {"git:pre-commit": ["a"]}
        assert data["repo_hooks"] == {"/repo/x": ["b"]}

    def test_no_temp_files_left(self, tmp_path):
        store = HookStore(str(tmp_path / "hooks.json"))
        store.save(StoreDocument())
        assert [p.name for p in tmp_path.iterdir()] == ["hooks.json"]


class TestTransaction:

    def test_changes_saved(self, tmp_path):
        store = HookStore(str(tmp_path / "hooks.json"))
        with store.transaction() as doc:
            doc.add(_reg("a"))
        assert store.load().ids() == {"a"}

    def test_exception_discards_changes(self, tmp_path):
        store = HookStore(str(tmp_path / "hooks.json"))
        store.ensure()
        with pytest.raises(RuntimeError):
            with store.transaction() as doc:
                doc.add(_reg("a"))
                raise RuntimeError("boom")
        assert store.load().ids() == set()

    def test_corrupt_store_not_overwritten(self, tmp_path):
        path = tmp_path / "hooks.json"
        path.write_text("garbage")
        store = HookStore(str(path))
        with pytest.raises(StoreCorruptError):
            with store.transaction() as doc:
                doc.add(_reg("a"))
        assert path.read_text() == "garbage"


class TestStoreDocument:

    def test_replace_group_drops_empty(self):
        doc = StoreDocument()
        doc.add(_reg("a"))
        doc.replace_group("git:pre-commit", [])
        assert "git:pre-commit" not in doc.hooks

    def test_group_returns_copy(self):
        doc = StoreDocument()
        doc.add(_reg("a"))
        doc.group("git:pre-commit").clear()
        assert len(doc.group("git:pre-commit")) == 1
