"""Tests for MCP server tool functions."""

import pytest

from garageengine.data import define_garage
from garageengine.mcp.server import (
    _GameHolder,
    _new_holder,
    _tool_abandon_contract,
    _tool_accept_contract,
    _tool_click,
    _tool_get_game_info,
    _tool_get_game_state,
    _tool_get_job_board,
    _tool_get_shop,
    _tool_hire_worker,
    _tool_new_game,
    _tool_prestige,
    _tool_purchase_nip_upgrade,
    _tool_purchase_upgrade,
    _tool_wait,
)


def _make_holder() -> _GameHolder:
    return _new_holder(define_garage())


# ── Info & state ──────────────────────────────────────────────────────


def test_get_game_info():
    info = _tool_get_game_info(_make_holder())
    assert info["name"] == "Gato Garage"
    assert len(info["cars"]) == 8
    assert len(info["upgrades"]) == 8
    assert len(info["nip_upgrades"]) == 7
    assert len(info["workers"]) == 6
    assert info["car_unlocks"][0]["level"] == 1


def test_get_game_state_initial():
    state = _tool_get_game_state(_make_holder())
    assert state["currency"] == 0
    assert state["garage_level"] == 1
    assert state["current_car"] is not None
    assert state["claimable_nip"] == 0
    assert state["achievements"] == []


def test_get_shop():
    shop = _tool_get_shop(_make_holder())
    wrench = next(u for u in shop["upgrades"] if u["id"] == "wrench")
    assert wrench["cost"] == 15
    assert wrench["level"] == 0
    assert not wrench["can_afford"]
    assert len(shop["workers"]) == 6


# ── Click & wait ──────────────────────────────────────────────────────


def test_click_repairs_car():
    holder = _make_holder()
    result = _tool_click(holder, 60)
    assert result["clicks"] == 60
    assert len(result["cars_repaired"]) >= 1
    assert result["currency"] >= 25


@pytest.mark.parametrize("count", [0, 1001])
def test_click_bounds(count):
    assert "error" in _tool_click(_make_holder(), count)


def test_wait_advances_time():
    holder = _make_holder()
    result = _tool_wait(holder, 30)
    assert result["waited"] == 30
    assert result["time_elapsed_s"] == pytest.approx(30.0)
    assert result["cars_repaired"] == 0


def test_wait_with_worker_earns():
    holder = _make_holder()
    holder.runtime.state.currency = 50
    assert _tool_hire_worker(holder, "junior_maid")["success"]
    result = _tool_wait(holder, 120)
    assert result["cars_repaired"] >= 1
    assert result["currency_gained"] > 0


@pytest.mark.parametrize("seconds", [0, -5, 86401])
def test_wait_bounds(seconds):
    assert "error" in _tool_wait(_make_holder(), seconds)


# ── Purchases ─────────────────────────────────────────────────────────


def test_purchase_upgrade():
    holder = _make_holder()
    assert "error" in _tool_purchase_upgrade(holder, "nonexistent")
    assert _tool_purchase_upgrade(holder, "wrench")["reason"] == "Cannot afford"
    holder.runtime.state.currency = 100
    result = _tool_purchase_upgrade(holder, "wrench")
    assert result["success"]
    assert result["new_level"] == 1
    assert result["currency"] == 85


def test_purchase_upgrade_maxed():
    holder = _make_holder()
    holder.runtime.state.upgrades["wrench"] = 100
    assert _tool_purchase_upgrade(holder, "wrench")["reason"] == "Already at max level"


def test_purchase_nip_upgrade():
    holder = _make_holder()
    assert "error" in _tool_purchase_nip_upgrade(holder, "nonexistent")
    assert _tool_purchase_nip_upgrade(holder, "sharpened_paws")["reason"] == "Not enough Nip"
    holder.runtime.state.prestige_currency = 1
    result = _tool_purchase_nip_upgrade(holder, "sharpened_paws")
    assert result["success"]
    assert result["prestige_currency"] == 0


def test_hire_worker():
    holder = _make_holder()
    assert "error" in _tool_hire_worker(holder, "nonexistent")
    assert _tool_hire_worker(holder, "junior_maid")["reason"] == "Cannot afford"
    holder.runtime.state.currency = 50
    result = _tool_hire_worker(holder, "junior_maid")
    assert result["owned"] == 1
    assert result["auto_repair_rate"] > 0


# ── Contracts ─────────────────────────────────────────────────────────


def test_job_board_accept_and_abandon():
    holder = _make_holder()
    board = _tool_get_job_board(holder)
    assert len(board["offers"]) == 3
    assert board["active"] is None

    assert _tool_accept_contract(holder, "nope")["reason"] == "Contract not found."
    offer_id = board["offers"][0]["id"]
    assert _tool_accept_contract(holder, offer_id)["success"]
    assert _tool_get_job_board(holder)["active"]["id"] == offer_id

    assert _tool_abandon_contract(holder)["success"]
    assert _tool_abandon_contract(holder)["reason"] == "No active contract"


# ── Prestige & reset ──────────────────────────────────────────────────


def test_prestige():
    holder = _make_holder()
    assert _tool_prestige(holder)["reason"] == "Nothing to claim yet"
    holder.runtime.state.lifetime_earnings = 4_000_000
    result = _tool_prestige(holder)
    assert result["success"]
    assert result["reward_amount"] == 2
    assert result["prestige_currency"] == 2


def test_new_game_resets():
    holder = _make_holder()
    _tool_click(holder, 60)
    _tool_wait(holder, 10)
    old_runtime = holder.runtime
    assert _tool_new_game(holder)["success"]
    assert holder.runtime is not old_runtime
    state = _tool_get_game_state(holder)
    assert state["currency"] == 0
    assert state["total_clicks"] == 0
    assert state["time_elapsed_s"] == 0
