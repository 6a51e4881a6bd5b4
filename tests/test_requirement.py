"""Tests for requirement module."""
import pytest

from garageengine.data import define_garage
from garageengine.requirement import Req
from garageengine.state import GameState


def _make_state() -> GameState:
    return GameState(define_garage(), clock=lambda: 0.0)


def test_stat_requirement():
    state = _make_state()
    req = Req.stat("total_clicks", ">=", 10)
    assert not req.evaluate(state)
    state.total_clicks = 10
    assert req.evaluate(state)


def test_derived_stats():
    state = _make_state()
    state.upgrades = {"wrench": 3, "toolbox": 2}
    assert Req.stat("total_upgrades", "==", 5).evaluate(state)
    assert Req.stat("total_workers", "==", 0).evaluate(state)


def test_unknown_stat_raises():
    state = _make_state()
    with pytest.raises(ValueError, match="Unknown stat"):
        Req.stat("mana", ">=", 1).evaluate(state)


def test_level_requirement():
    state = _make_state()
    assert Req.level(">=", 1).evaluate(state)
    assert not Req.level(">=", 2).evaluate(state)


def test_achievement_requirement():
    state = _make_state()
    req = Req.achievement("first_click")
    assert not req.evaluate(state)
    state.achievements["first_click"] = 0.0
    assert req.evaluate(state)


def test_composites_and_operators():
    state = _make_state()
    state.currency = 100
    rich = Req.stat("currency", ">=", 50)
    busy = Req.stat("cars_repaired", ">=", 1)
    assert not (rich & busy).evaluate(state)
    assert (rich | busy).evaluate(state)
    assert Req.any(busy, rich).evaluate(state)
    assert not Req.all(rich, busy).evaluate(state)


def test_custom_requirement():
    state = _make_state()
    req = Req.custom(lambda s: s.current_car is None)
    assert req.evaluate(state)
