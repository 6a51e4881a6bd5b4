"""Tests for save module."""
import json

import pytest

from garageengine._types import ManualClock
from garageengine.events import GameEvent
from garageengine.runtime import GameRuntime
from garageengine.save import SaveError, SaveManager


def _make_manager(tmp_path, clock=None) -> SaveManager:
    rt = GameRuntime(clock=clock or ManualClock(1000.0))
    return SaveManager(rt, tmp_path / "garage.json")


def test_save_writes_envelope(tmp_path):
    manager = _make_manager(tmp_path)
    manager.runtime.state.currency = 77
    saved = []
    manager.runtime.bus.on(GameEvent.GAME_SAVED, saved.append)

    assert manager.save()
    envelope = json.loads((tmp_path / "garage.json").read_text())
    assert envelope["version"] == 2
    assert envelope["timestamp"] == 1000.0
    assert envelope["state"]["currency"] == 77
    assert manager.runtime.state.last_save_time == 1000.0
    assert len(saved) == 1


def test_load_restores_state(tmp_path):
    clock = ManualClock(1000.0)
    manager = _make_manager(tmp_path, clock)
    manager.runtime.state.currency = 77
    manager.runtime.state.upgrades = {"wrench": 2}
    manager.save()

    fresh = SaveManager(GameRuntime(clock=clock), tmp_path / "garage.json")
    loaded = []
    fresh.runtime.bus.on(GameEvent.GAME_LOADED, loaded.append)
    offline = fresh.load()

    assert offline is not None
    assert offline.is_empty
    assert fresh.runtime.state.currency == 77
    assert fresh.runtime.state.click_power == 3
    assert loaded[0]["timestamp"] == 1000.0


def test_load_grants_offline_progress(tmp_path):
    clock = ManualClock(0.0)
    manager = _make_manager(tmp_path, clock)
    manager.runtime.state.currency = 50
    manager.runtime.hire_worker("junior_maid")
    manager.save()

    clock.advance(3_600_000)
    offline = manager.load()
    assert offline.cars_repaired == 12
    assert manager.runtime.state.currency == 1200


def test_load_missing_file(tmp_path):
    manager = _make_manager(tmp_path)
    assert not manager.has_save()
    assert manager.load() is None


def test_load_corrupt_file_notifies(tmp_path):
    manager = _make_manager(tmp_path)
    (tmp_path / "garage.json").write_text("{not json")
    notes = []
    manager.runtime.bus.on(GameEvent.NOTIFICATION, notes.append)
    assert manager.load() is None
    assert notes[-1]["message"] == "Save load failed"


def test_load_rejects_missing_state(tmp_path):
    manager = _make_manager(tmp_path)
    (tmp_path / "garage.json").write_text(json.dumps({"version": 2}))
    assert manager.load() is None


def test_v1_save_is_migrated(tmp_path):
    manager = _make_manager(tmp_path)
    v1 = {
        "version": 1,
        "timestamp": 1000.0,
        "state": {"currency": 100, "total_earned": 100, "prestige_currency": 3},
    }
    (tmp_path / "garage.json").write_text(json.dumps(v1))

    assert manager.load() is not None
    state = manager.runtime.state
    assert state.currency == 100
    assert state.lifetime_earnings == 100
    assert state.total_prestige_earned == 3
    assert state.nip_upgrades == {}
    assert state.current_car is not None
    assert len(state.job_contracts) == 3


def test_newer_version_is_rejected(tmp_path):
    manager = _make_manager(tmp_path)
    with pytest.raises(SaveError):
        manager.migrate({"version": 99, "state": {}})
    (tmp_path / "garage.json").write_text(json.dumps({"version": 99, "state": {}}))
    assert manager.load() is None


def test_export_and_import(tmp_path):
    manager = _make_manager(tmp_path)
    manager.runtime.state.currency = 42
    manager.save()
    encoded = manager.export_save()
    assert encoded

    manager.delete_save()
    assert not manager.has_save()
    manager.runtime.state.currency = 0

    assert manager.import_save(encoded)
    assert manager.has_save()
    assert manager.runtime.state.currency == 42


def test_import_garbage_fails(tmp_path):
    manager = _make_manager(tmp_path)
    assert not manager.import_save("not base64!!")
    assert not manager.has_save()


def test_export_without_save(tmp_path):
    assert _make_manager(tmp_path).export_save() == ""


def test_delete_missing_save_is_fine(tmp_path):
    assert _make_manager(tmp_path).delete_save()


def test_autosave_interval(tmp_path):
    clock = ManualClock(0.0)
    manager = _make_manager(tmp_path, clock)
    assert not manager.maybe_autosave()
    clock.advance(30_000)
    assert manager.maybe_autosave()
    assert not manager.maybe_autosave()
