"""Tests for the sync engine."""

import logging
import os
from pathlib import Path
from unittest.mock import Mock

import pytest

from pyassetsync.sync import (
    BindingStore,
    FileOperations,
    SettingsManager,
    SyncEngine,
    SyncMode,
)


def _write(path: Path, content: str, mtime: float) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    os.utime(path, (mtime, mtime))


class TestSyncEngine:
    """Test SyncEngine functionality."""

    @pytest.fixture
    def project(self, tmp_path):
        """Create a project layout and return (data_path, external_dir)."""
        data_path = tmp_path / "proj" / "Assets"
        external_dir = tmp_path / "proj" / "external"
        data_path.mkdir(parents=True)
        external_dir.mkdir(parents=True)
        return data_path, external_dir

    @pytest.fixture
    def store(self, project):
        data_path, _ = project
        return BindingStore(data_path=str(data_path))

    @pytest.fixture
    def file_ops(self):
        """Real filesystem operations wrapped in a mock to count calls."""
        return Mock(wraps=FileOperations())

    @pytest.fixture
    def prompt(self):
        prompt = Mock()
        prompt.confirm.return_value = True
        return prompt

    @pytest.fixture
    def on_refresh(self):
        return Mock()

    @pytest.fixture
    def persistence(self):
        return Mock(spec=SettingsManager)

    @pytest.fixture
    def engine(self, store, file_ops, prompt, on_refresh, persistence):
        return SyncEngine(
            store,
            file_ops=file_ops,
            prompt=prompt,
            on_refresh=on_refresh,
            persistence=persistence,
        )

    def test_create_sync_engine(self, store):
        """Test creating a sync engine with default collaborators."""
        engine = SyncEngine(store)
        assert engine.store is store
        assert isinstance(engine.file_ops, FileOperations)
        assert engine.prompt is None
        assert engine.comparator is not None

    def test_creates_missing_asset(self, engine, store, project, file_ops, on_refresh):
        """A new SOURCE_TO_ASSET binding seeds its asset on the first tick."""
        data_path, external_dir = project
        source = external_dir / "logo.png"
        _write(source, "image data", 1000.0)
        store.register(str(source), "Assets/Textures/logo.png")
        store.notify_before_update = False

        stats = engine.tick()

        asset = data_path / "Textures" / "logo.png"
        assert asset.read_bytes() == source.read_bytes()
        assert stats["creates"] == 1
        assert file_ops.delete.call_count == 0
        on_refresh.assert_called_once_with()

    def test_two_way_source_newer_updates_asset(self, engine, store, project):
        data_path, external_dir = project
        source = external_dir / "a.txt"
        asset = data_path / "a.txt"
        _write(source, "new content", 2000.0)
        _write(asset, "old", 1000.0)
        store.register(str(source), "Assets/a.txt", mode=SyncMode.TWO_WAY)
        store.notify_before_update = False

        stats = engine.tick()

        assert stats["updates"] == 1
        assert asset.read_text() == "new content"
        assert asset.stat().st_mtime == source.stat().st_mtime

    def test_two_way_asset_newer_updates_source(self, engine, store, project):
        data_path, external_dir = project
        source = external_dir / "a.txt"
        asset = data_path / "a.txt"
        _write(source, "old", 1000.0)
        _write(asset, "edited in project", 2000.0)
        store.register(
            str(source), "Assets/a.txt", mode="twoWay", notify_before_update=False
        )

        engine.tick()

        assert source.read_text() == "edited in project"

    def test_asset_to_source_without_notification(
        self, engine, store, project, file_ops, prompt
    ):
        """A newer asset overwrites the source: one delete and one copy."""
        data_path, external_dir = project
        source = external_dir / "a.txt"
        asset = data_path / "a.txt"
        _write(source, "old", 1000.0)
        _write(asset, "newer", 2000.0)
        store.register(str(source), "Assets/a.txt", mode=SyncMode.ASSET_TO_SOURCE)
        store.notify_before_update = False

        stats = engine.tick()

        file_ops.delete.assert_called_once_with(str(source))
        file_ops.copy.assert_called_once_with(str(asset), str(source))
        prompt.confirm.assert_not_called()
        assert stats["updates"] == 1
        assert source.read_text() == "newer"

    def test_second_tick_is_idempotent(self, engine, store, project, file_ops):
        """Once in sync, another tick performs no copy."""
        data_path, external_dir = project
        _write(external_dir / "a.txt", "content", 2000.0)
        _write(data_path / "a.txt", "stale", 1000.0)
        _write(external_dir / "b.txt", "content", 1000.0)
        store.register(str(external_dir / "a.txt"), "Assets/a.txt", mode="twoWay")
        store.register(str(external_dir / "b.txt"), "Assets/b.txt")
        store.notify_before_update = False

        engine.tick()
        assert file_ops.copy.call_count == 2
        file_ops.copy.reset_mock()

        stats = engine.tick()

        assert file_ops.copy.call_count == 0
        assert stats["skips"] == 2

    def test_missing_mandatory_file_logged_once(
        self, engine, store, project, file_ops, caplog
    ):
        """A missing required file logs one error and leaves flags alone."""
        data_path, external_dir = project
        _write(data_path / "b.txt", "asset", 1000.0)
        store.register(str(external_dir / "a.txt"), "Assets/a.txt")
        store.register(
            str(external_dir / "b.txt"), "Assets/c.txt", mode="assetToSource"
        )

        with caplog.at_level(logging.ERROR, logger="pyassetsync"):
            stats = engine.tick()

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 2
        assert stats["errors"] == 2
        assert file_ops.copy.call_count == 0
        assert all(binding.auto_update for binding in store)

    def test_declined_confirmation_disables_auto_update(
        self, engine, store, project, file_ops, prompt, persistence
    ):
        data_path, external_dir = project
        _write(external_dir / "a.txt", "new", 2000.0)
        _write(data_path / "a.txt", "old", 1000.0)
        binding = store.register(str(external_dir / "a.txt"), "Assets/a.txt")
        prompt.confirm.return_value = False

        stats = engine.tick()

        assert stats["declined"] == 1
        assert binding.auto_update is False
        assert file_ops.copy.call_count == 0
        persistence.save_if_dirty.assert_called_once_with(store)
        title, message = prompt.confirm.call_args[0]
        assert title == "External asset modified"
        assert "Assets/a.txt" in message

        prompt.confirm.reset_mock()
        engine.tick()

        prompt.confirm.assert_not_called()
        assert file_ops.copy.call_count == 0
        assert (data_path / "a.txt").read_text() == "old"

    def test_accepted_confirmation_updates(self, engine, store, project, prompt):
        data_path, external_dir = project
        _write(external_dir / "a.txt", "new", 2000.0)
        _write(data_path / "a.txt", "old", 1000.0)
        store.register(str(external_dir / "a.txt"), "Assets/a.txt")

        engine.tick()

        prompt.confirm.assert_called_once()
        assert (data_path / "a.txt").read_text() == "new"

    def test_binding_notify_disabled_skips_prompt(
        self, engine, store, project, prompt
    ):
        data_path, external_dir = project
        _write(external_dir / "a.txt", "new", 2000.0)
        store.register(
            str(external_dir / "a.txt"), "Assets/a.txt", notify_before_update=False
        )

        engine.tick()

        prompt.confirm.assert_not_called()
        assert (data_path / "a.txt").read_text() == "new"

    def test_manual_request_bypasses_prompt_and_auto_update(
        self, engine, store, project, prompt
    ):
        """A requested update runs once even with auto update disabled."""
        data_path, external_dir = project
        _write(external_dir / "a.txt", "new", 2000.0)
        _write(data_path / "a.txt", "old", 1000.0)
        binding = store.register(
            str(external_dir / "a.txt"), "Assets/a.txt", auto_update=False
        )
        store.request_update(binding)

        stats = engine.tick()

        assert stats["updates"] == 1
        assert binding.request_update is False
        prompt.confirm.assert_not_called()
        assert (data_path / "a.txt").read_text() == "new"

    def test_global_switch_disables_ticks(self, engine, store, project, file_ops):
        data_path, external_dir = project
        _write(external_dir / "a.txt", "new", 2000.0)
        binding = store.register(str(external_dir / "a.txt"), "Assets/a.txt")
        store.request_update(binding)
        store.auto_synchronization = False

        stats = engine.tick()

        assert sum(stats.values()) == 0
        file_ops.stat.assert_not_called()
        assert not (data_path / "a.txt").exists()

    def test_update_binding_ignores_global_switch(self, engine, store, project, prompt):
        data_path, external_dir = project
        _write(external_dir / "a.txt", "new", 2000.0)
        binding = store.register(
            str(external_dir / "a.txt"), "Assets/a.txt", auto_update=False
        )
        store.auto_synchronization = False

        stats = engine.update_binding(binding)

        assert stats["creates"] == 1
        prompt.confirm.assert_not_called()
        assert (data_path / "a.txt").read_text() == "new"

    def test_no_prompt_skips_without_disabling(self, store, project):
        """Without a prompt, bindings needing confirmation are left alone."""
        data_path, external_dir = project
        _write(external_dir / "a.txt", "new", 2000.0)
        binding = store.register(str(external_dir / "a.txt"), "Assets/a.txt")
        engine = SyncEngine(store)

        stats = engine.tick()

        assert stats["skips"] == 1
        assert binding.auto_update is True
        assert not (data_path / "a.txt").exists()

    def test_copy_failure_continues_with_next_binding(
        self, engine, store, project, file_ops, on_refresh, caplog
    ):
        """An IO error is logged; the next binding is still processed."""
        data_path, external_dir = project
        _write(external_dir / "a.txt", "a", 2000.0)
        _write(external_dir / "b.txt", "b", 2000.0)
        first = store.register(str(external_dir / "a.txt"), "Assets/a.txt")
        store.register(str(external_dir / "b.txt"), "Assets/b.txt")
        store.notify_before_update = False
        real_copy = FileOperations().copy

        def copy(source, destination):
            if source.endswith("a.txt"):
                raise PermissionError("denied")
            real_copy(source, destination)

        file_ops.copy.side_effect = copy

        with caplog.at_level(logging.ERROR, logger="pyassetsync"):
            stats = engine.tick()

        assert stats["errors"] == 1
        assert stats["creates"] == 1
        assert "denied" in caplog.text
        assert first.auto_update is True
        assert first.notify_before_update is True
        assert (data_path / "b.txt").read_text() == "b"
        on_refresh.assert_called_once_with()

    def test_failed_copy_after_delete_recovers_next_tick(
        self, engine, store, project, file_ops
    ):
        """A destination deleted by a failed update is recreated later."""
        data_path, external_dir = project
        asset = data_path / "a.txt"
        _write(external_dir / "a.txt", "new", 2000.0)
        _write(asset, "old", 1000.0)
        store.register(str(external_dir / "a.txt"), "Assets/a.txt")
        store.notify_before_update = False
        file_ops.copy.side_effect = OSError("disk full")

        stats = engine.tick()

        assert stats["errors"] == 1
        assert not asset.exists()

        file_ops.copy.side_effect = None
        stats = engine.tick()

        assert stats["creates"] == 1
        assert asset.read_text() == "new"

    def test_plan_reports_decisions(self, engine, store, project):
        data_path, external_dir = project
        _write(external_dir / "a.txt", "new", 2000.0)
        binding = store.register(str(external_dir / "a.txt"), "Assets/a.txt")

        [decision] = engine.plan(binding)

        assert decision.action.value == "create"
        assert not (data_path / "a.txt").exists()

    @pytest.mark.parametrize(
        "entry,existing",
        [
            (
                {"externalFilePath": "./../external/secret.txt"},
                "external/secret.txt",
            ),
            (
                {"assetPath": "Assets/secret.txt", "mode": "assetToSource"},
                "Assets/secret.txt",
            ),
        ],
    )
    def test_unresolved_path_is_skipped_without_copy(
        self, project, file_ops, tmp_path, monkeypatch, caplog, entry, existing
    ):
        """A loaded binding with one empty side never copies into the cwd."""
        data_path, _ = project
        _write(data_path.parent / existing, "secret", 1000.0)
        cwd = tmp_path / "cwd"
        cwd.mkdir()
        monkeypatch.chdir(cwd)
        store = BindingStore.from_dict(
            {"notifyBeforeUpdate": False, "externalAssets": [entry]},
            data_path=str(data_path),
        )
        engine = SyncEngine(store, file_ops=file_ops)

        with caplog.at_level(logging.ERROR, logger="pyassetsync"):
            stats = engine.tick()

        assert stats["errors"] == 1
        assert stats["creates"] == 0
        assert file_ops.copy.call_count == 0
        assert list(cwd.iterdir()) == []
        assert "doesn't exist" in caplog.text

    def test_failing_refresh_does_not_stop_tick(
        self, store, project, file_ops, caplog
    ):
        """A raising refresh callback is logged and later bindings still sync."""
        data_path, external_dir = project
        _write(external_dir / "a.txt", "a", 2000.0)
        _write(external_dir / "b.txt", "b", 2000.0)
        store.register(str(external_dir / "a.txt"), "Assets/a.txt")
        store.register(str(external_dir / "b.txt"), "Assets/b.txt")
        store.notify_before_update = False
        on_refresh = Mock(side_effect=RuntimeError("host refresh failed"))
        engine = SyncEngine(store, file_ops=file_ops, on_refresh=on_refresh)

        with caplog.at_level(logging.ERROR, logger="pyassetsync"):
            stats = engine.tick()

        assert stats["creates"] == 2
        assert stats["errors"] == 0
        assert (data_path / "b.txt").read_text() == "b"
        assert on_refresh.call_count == 2
        assert "host refresh failed" in caplog.text
        assert "Assets/a.txt" in caplog.text

    def test_directory_in_place_of_asset_is_not_updated(
        self, engine, store, project, file_ops
    ):
        """A directory at the asset path is not treated as an existing file."""
        data_path, external_dir = project
        _write(external_dir / "a.txt", "a", 2000.0)
        (data_path / "a.txt").mkdir()
        binding = store.register(str(external_dir / "a.txt"), "Assets/a.txt")

        [decision] = engine.plan(binding)

        assert binding.asset_meta.exists is False
        assert decision.action.value == "create"
        assert file_ops.delete.call_count == 0

        stats = engine.tick()

        assert stats["errors"] == 1
        assert list((data_path / "a.txt").iterdir()) == []
