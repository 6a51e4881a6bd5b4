"""Tests for progression module."""
import pytest

from garageengine._types import ManualClock
from garageengine.events import GameEvent
from garageengine.progression import build_xp_table, level_from_xp, tier_for_level
from garageengine.runtime import GameRuntime


def _make_runtime() -> GameRuntime:
    return GameRuntime(clock=ManualClock())


def test_xp_table_shape():
    table = build_xp_table(100, 1.15, 100)
    assert len(table) == 100
    assert table[0] == 0
    assert table[1] == 100
    assert all(b > a for a, b in zip(table, table[1:]))


def test_level_from_xp_boundaries():
    table = build_xp_table(100, 1.15, 100)
    assert level_from_xp(table, 0) == 1
    assert level_from_xp(table, 99) == 1
    assert level_from_xp(table, 100) == 2
    assert level_from_xp(table, 10**12) == 100


def test_tier_for_level():
    assert tier_for_level(1) == 1
    assert tier_for_level(9) == 1
    assert tier_for_level(10) == 2
    assert tier_for_level(19) == 2
    assert tier_for_level(20) == 3


def test_add_xp_level_boundary():
    rt = _make_runtime()
    levels = []
    rt.bus.on(GameEvent.LEVEL_UP, levels.append)
    rt.progression.add_xp(99)
    assert rt.state.garage_level == 1
    assert levels == []
    rt.progression.add_xp(1)
    assert rt.state.garage_level == 2
    assert levels == [{"old_level": 1, "new_level": 2, "tier": 1}]


def test_multi_level_jump_unlocks_every_milestone():
    rt = _make_runtime()
    unlocked = []
    tiers = []
    rt.bus.on(GameEvent.CAR_UNLOCKED, lambda d: unlocked.append(d["car_id"]))
    rt.bus.on(GameEvent.TIER_UP, tiers.append)

    rt.progression.add_xp(rt.progression.xp_for_level(10))

    assert rt.state.garage_level == 10
    assert rt.state.current_tier == 2
    assert unlocked == ["sedan", "suv", "pickup"]
    assert rt.state.unlocked_cars == ["hatchback", "sedan", "suv", "pickup"]
    assert tiers[0]["new_tier"] == 2


def test_events_fire_after_mutation():
    rt = _make_runtime()
    seen = []
    rt.bus.on(GameEvent.XP_EARNED, lambda d: seen.append(rt.state.garage_level))
    rt.progression.add_xp(500)
    assert seen == [rt.state.garage_level]


def test_non_positive_xp_is_ignored():
    rt = _make_runtime()
    rt.progression.add_xp(0)
    rt.progression.add_xp(-10)
    assert rt.state.garage_xp == 0


def test_xp_for_level_extends_past_table():
    rt = _make_runtime()
    prog = rt.progression
    assert prog.xp_for_level(1) == 0
    assert prog.xp_for_level(2) == 100
    assert prog.xp_for_level(102) - prog.xp_for_level(101) == (
        prog.xp_for_level(101) - prog.xp_for_level(100)
    )


def test_progress_info():
    rt = _make_runtime()
    rt.progression.add_xp(150)
    info = rt.progress_info()
    assert info.level == 2
    assert info.xp_into_level == 50
    assert info.xp_for_next_level == rt.progression.xp_for_level(3) - 100
    assert info.tier_multiplier == 1.0
    assert info.next_unlock.car_id == "sedan"
    assert info.next_unlock.level == 3
    assert info.unlocked_cars == 1
    assert info.total_cars == 8


def test_no_next_unlock_at_the_top():
    rt = _make_runtime()
    rt.progression.add_xp(rt.progression.xp_for_level(40))
    assert rt.progression.next_unlock() is None
    assert rt.progression.is_car_unlocked("hypercar")


def test_tier_multiplier():
    rt = _make_runtime()
    assert rt.progression.tier_multiplier(1) == 1.0
    assert rt.progression.tier_multiplier(3) == pytest.approx(2.0)
