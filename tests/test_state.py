"""Tests for state module."""
import json

import pytest

from garageengine._types import ManualClock
from garageengine.contract import JobContract
from garageengine.data import define_garage
from garageengine.events import EventBus, GameEvent
from garageengine.runtime import GameRuntime
from garageengine.state import GameState


def _make_state(clock=None) -> GameState:
    return GameState(define_garage(), EventBus(), clock or ManualClock())


def test_initial_state():
    state = _make_state()
    assert state.currency == 0
    assert state.garage_level == 1
    assert state.current_tier == 1
    assert state.unlocked_cars == ["hatchback"]
    assert state.click_power == 1
    assert state.prestige_multiplier == 1.0
    assert state.current_car is None


def test_add_currency_applies_multipliers_and_floors():
    state = _make_state()
    state.stats.income_multiplier = 1.05
    state.stats.prestige_multiplier = 1.1
    credited = state.add_currency(100)
    assert credited == 115  # floor(115.5)
    assert state.currency == 115
    assert state.total_earned == 115
    assert state.lifetime_earnings == 115


def test_add_currency_emits_changed_then_earned():
    state = _make_state()
    seen = []
    state.bus.on(GameEvent.CURRENCY_CHANGED, lambda d: seen.append(("changed", d)))
    state.bus.on(GameEvent.CURRENCY_EARNED, lambda d: seen.append(("earned", d)))
    state.add_currency(10)
    assert seen == [("changed", 10), ("earned", 10)]


def test_spend_currency():
    state = _make_state()
    state.currency = 100
    assert state.spend_currency(40)
    assert state.currency == 60
    assert state.total_spent == 40
    assert not state.spend_currency(61)
    assert state.currency == 60
    assert not state.spend_currency(-5)


def test_spend_prestige_currency():
    state = _make_state()
    state.prestige_currency = 3
    assert state.spend_prestige_currency(2)
    assert state.prestige_currency == 1
    assert not state.spend_prestige_currency(2)


def test_recalculate_stats_is_idempotent():
    state = _make_state()
    state.upgrades = {"wrench": 3, "neon_sign": 2, "diagnostic_computer": 1}
    state.nip_upgrades = {"sharpened_paws": 2, "quick_dispatch": 3}
    state.total_prestige_earned = 4

    first = state.recalculate_stats()
    second = state.recalculate_stats()
    assert first == second
    assert state.click_power == pytest.approx(4 * 1.4)
    assert state.stats.income_multiplier == pytest.approx(1.10)
    assert state.car_value_multiplier() == pytest.approx(1.10)
    assert state.prestige_multiplier == pytest.approx(1.2)
    assert state.stats.queue_spawn_multiplier == pytest.approx(0.92 ** 3)


def test_incremental_matches_recalculation():
    rt = GameRuntime(clock=ManualClock())
    rt.state.currency = 10_000
    for _ in range(3):
        assert rt.purchase_upgrade("wrench")
    assert rt.purchase_upgrade("toolbox")
    incremental = rt.state.stats
    assert rt.state.recalculate_stats() == incremental


def test_recalculate_ignores_unknown_upgrade(caplog):
    state = _make_state()
    state.upgrades = {"laser_spanner": 5}
    state.recalculate_stats()
    assert state.click_power == 1
    assert "laser_spanner" in caplog.text


def test_stat_lookup():
    state = _make_state()
    state.total_clicks = 7
    assert state.stat("total_clicks") == 7
    with pytest.raises(ValueError):
        state.stat("nope")


def test_serialize_excludes_derived_stats():
    data = _make_state().serialize()
    assert "stats" not in data
    assert "click_power" not in data
    json.dumps(data)


def test_serialize_round_trip():
    clock = ManualClock(5_000.0)
    rt = GameRuntime(clock=clock)
    state = rt.state
    state.currency = 1234
    state.total_earned = 2000
    state.lifetime_earnings = 3000
    state.total_clicks = 321
    state.cars_repaired = 12
    state.upgrades = {"wrench": 4}
    state.nip_upgrades = {"tuned_crew": 1}
    state.prestige_currency = 2
    state.total_prestige_earned = 5
    state.currency += 50
    rt.hire_worker("junior_maid")
    state.recalculate_stats()
    rt.progression.add_xp(500)

    data = json.loads(json.dumps(state.serialize()))
    restored = GameState(define_garage(), EventBus(), clock)
    restored.deserialize(data)

    assert restored.currency == state.currency
    assert restored.total_clicks == 321
    assert restored.upgrades == {"wrench": 4}
    assert restored.nip_upgrades == {"tuned_crew": 1}
    assert restored.worker_counts == {"junior_maid": 1}
    assert restored.garage_xp == state.garage_xp
    assert restored.garage_level == state.garage_level
    assert restored.unlocked_cars == state.unlocked_cars
    assert restored.prestige_currency == 2
    assert restored.total_prestige_earned == 5
    assert restored.current_car.id == state.current_car.id
    assert [c.id for c in restored.job_contracts] == [c.id for c in state.job_contracts]
    assert restored.stats == state.stats
    assert restored.auto_repair_rate == pytest.approx(state.auto_repair_rate)


def test_deserialize_rederives_level_and_clamps():
    state = _make_state()
    state.deserialize(
        {
            "currency": -50,
            "garage_xp": 100,
            "garage_level": 42,
            "current_tier": 9,
            "prestige_currency": 7,
            "total_prestige_earned": 2,
            "upgrades": {"wrench": 2, "unknown_tool": 9},
            "car_queue": [{"id": "hatchback"}] * 8,
        }
    )
    assert state.currency == 0
    assert state.garage_level == 2
    assert state.current_tier == 1
    assert state.total_prestige_earned == 7
    assert state.upgrades == {"wrench": 2}
    assert len(state.car_queue) == 5
    assert state.click_power == 3


def test_deserialize_substitutes_unknown_types():
    state = _make_state()
    state.deserialize(
        {
            "current_car": {"id": "spaceship", "repair_progress": 10},
            "workers": [{"id": "ghost_maid"}],
        }
    )
    assert state.current_car.id == "hatchback"
    assert state.workers[0].id == "junior_maid"
    assert state.worker_counts == {"junior_maid": 1}


def test_deserialize_clamps_repair_progress():
    state = _make_state()
    state.deserialize({"current_car": {"id": "sedan", "repair_progress": 9999}})
    assert state.current_car.repair_progress == 100


def test_deserialize_unions_milestone_cars():
    state = _make_state()
    state.deserialize({"garage_xp": 10_000, "unlocked_cars": ["hatchback", "bogus"]})
    assert "bogus" not in state.unlocked_cars
    assert "sedan" in state.unlocked_cars
    assert "suv" in state.unlocked_cars


def test_deserialize_drops_offers_without_id():
    state = _make_state()
    state.deserialize(
        {
            "currency": 500,
            "job_contracts": [
                {"car_id": "sedan"},
                "junk",
                {"id": "job-3", "car_id": "suv", "bonus_xp": "lots"},
                {"id": "job-2", "car_id": "suv"},
            ],
        }
    )
    assert state.currency == 500
    assert [c.id for c in state.job_contracts] == ["job-2"]


def test_deserialize_drops_malformed_active_contract():
    state = _make_state()
    state.deserialize(
        {
            "contracts_failed": 2,
            "active_job_contract": {"car_id": "sedan"},
            "current_car": {
                "id": "sedan",
                "contract": {"contract_id": "job-9", "payout_multiplier": 2.0},
            },
        }
    )
    assert state.active_job_contract is None
    assert state.contracts_failed == 3
    assert state.current_car.contract.expired


def test_promote_next_car():
    state = _make_state()
    assert state.promote_next_car() is None
    rt = GameRuntime(clock=ManualClock())
    rt.queue.spawn_car()
    rt.state.current_car = None
    car = rt.state.promote_next_car()
    assert rt.state.current_car is car


def test_contract_round_trip():
    contract = JobContract(id="job-1", car_id="suv", payout_multiplier=1.5).accept(1000.0)
    again = JobContract.from_dict(json.loads(json.dumps(contract.to_dict())))
    assert again == contract
    assert again.expires_at == 1000.0 + contract.duration_ms
