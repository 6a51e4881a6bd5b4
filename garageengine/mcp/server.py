"""MCP server wrapping GameRuntime for interactive AI playtesting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mcp.server.fastmcp import FastMCP

from garageengine._types import ManualClock
from garageengine.contract import JobContract
from garageengine.definition import GameDefinition
from garageengine.runtime import GameRuntime
from garageengine.upgrade import UpgradeInfo

# Maximum seconds per wait() call (24 hours)
_MAX_WAIT = 86400
# Maximum clicks per click() call
_MAX_CLICKS = 1000
# Milliseconds per simulated tick inside wait()
_WAIT_TICK_MS = 1000.0


@dataclass
class _GameHolder:
    """Holds the active game definition, clock and runtime."""

    definition: GameDefinition
    clock: ManualClock
    runtime: GameRuntime


def _new_holder(definition: GameDefinition) -> _GameHolder:
    clock = ManualClock()
    return _GameHolder(definition, clock, GameRuntime(definition, clock=clock))


def _upgrade_entry(info: UpgradeInfo) -> dict[str, Any]:
    return {
        "id": info.id,
        "name": info.name,
        "description": info.description,
        "level": info.level,
        "max_level": info.max_level,
        "cost": None if info.is_maxed else round(info.cost, 2),
        "can_afford": info.can_afford,
        "is_maxed": info.is_maxed,
    }


def _contract_entry(contract: JobContract, now: float) -> dict[str, Any]:
    return {
        "id": contract.id,
        "car": contract.car_name,
        "rarity": contract.rarity,
        "label": contract.label,
        "repair_multiplier": contract.repair_multiplier,
        "payout_multiplier": contract.payout_multiplier,
        "bonus_xp": contract.bonus_xp,
        "duration_s": round(contract.duration_ms / 1000.0, 1),
        "time_remaining_s": round(contract.time_remaining(now) / 1000.0, 1),
    }


# ── Tool logic functions (testable without MCP protocol) ────────────


def _tool_get_game_info(holder: _GameHolder) -> dict[str, Any]:
    defn = holder.definition
    return {
        "name": defn.config.name,
        "cars": [
            {
                "id": c.id,
                "name": c.name,
                "rarity": c.rarity.value,
                "repair_cost": c.repair_cost,
                "base_value": c.base_value,
            }
            for c in defn.cars
        ],
        "upgrades": [{"id": u.id, "name": u.name, "max_level": u.max_level} for u in defn.upgrades],
        "nip_upgrades": [
            {"id": u.id, "name": u.name, "max_level": u.max_level} for u in defn.nip_upgrades
        ],
        "workers": [
            {"id": w.id, "name": w.name, "repair_rate": w.repair_rate} for w in defn.workers
        ],
        "car_unlocks": [
            {"level": m.level, "car_ids": list(m.car_ids)} for m in defn.car_unlocks
        ],
        "achievements": [{"id": a.id, "name": a.name} for a in defn.achievements],
    }


def _tool_get_game_state(holder: _GameHolder) -> dict[str, Any]:
    runtime = holder.runtime
    state = runtime.state
    progress = runtime.progress_info()
    car = runtime.current_car_info()
    queue = runtime.queue_info()
    return {
        "time_elapsed_s": round(runtime.time_elapsed / 1000.0, 2),
        "currency": state.currency,
        "lifetime_earnings": state.lifetime_earnings,
        "click_power": state.click_power,
        "combo": round(runtime.combo, 2),
        "auto_repair_rate": round(state.auto_repair_rate, 4),
        "garage_level": progress.level,
        "garage_xp": progress.total_xp,
        "xp_into_level": progress.xp_into_level,
        "xp_for_next_level": progress.xp_for_next_level,
        "tier": progress.tier,
        "current_car": None
        if car is None
        else {
            "name": car.name,
            "rarity": car.rarity,
            "tier": car.tier,
            "repair_progress": round(car.repair_progress, 2),
            "repair_cost": car.repair_cost,
            "value": car.value,
            "contract": car.contract_label,
        },
        "queue_length": queue.queue_length,
        "cars_repaired": state.cars_repaired,
        "total_clicks": state.total_clicks,
        "workers": dict(state.worker_counts),
        "unlocked_cars": list(state.unlocked_cars),
        "prestige_currency": state.prestige_currency,
        "claimable_nip": runtime.calculate_claimable_nip(),
        "achievements": sorted(state.achievements),
    }


def _tool_get_shop(holder: _GameHolder) -> dict[str, Any]:
    runtime = holder.runtime
    return {
        "upgrades": [_upgrade_entry(i) for i in runtime.upgrade_shop.all_upgrade_info()],
        "nip_upgrades": [_upgrade_entry(i) for i in runtime.nip_shop.all_upgrade_info()],
        "workers": [
            {
                "id": w.id,
                "name": w.name,
                "owned": w.owned,
                "repair_rate": w.repair_rate,
                "cost": round(w.cost, 2),
                "can_afford": w.can_afford,
            }
            for w in runtime.workers.all_worker_info()
        ],
    }


def _tool_click(holder: _GameHolder, count: int = 1) -> dict[str, Any]:
    if count < 1:
        return {"error": "Count must be at least 1"}
    if count > _MAX_CLICKS:
        return {"error": f"Count cannot exceed {_MAX_CLICKS}"}

    runtime = holder.runtime
    clicks = 0
    crits = 0
    repaired: list[dict[str, Any]] = []
    for _ in range(count):
        result = runtime.click_at()
        if result is None:
            break
        clicks += 1
        if result.is_crit:
            crits += 1
        if result.repair is not None:
            repaired.append({"car": result.repair.car.name, "payment": result.repair.credited})
    return {
        "clicks": clicks,
        "crits": crits,
        "combo": round(runtime.combo, 2),
        "cars_repaired": repaired,
        "currency": runtime.state.currency,
    }


def _tool_wait(holder: _GameHolder, seconds: float) -> dict[str, Any]:
    if seconds <= 0:
        return {"error": "Seconds must be positive"}
    if seconds > _MAX_WAIT:
        return {"error": f"Cannot wait more than {_MAX_WAIT} seconds (24h) per call"}

    runtime = holder.runtime
    state = runtime.state
    currency_before = state.currency
    repaired_before = state.cars_repaired
    level_before = state.garage_level
    achievements_before = set(state.achievements)

    # Subdivide into 1-second ticks
    remaining = seconds * 1000.0
    while remaining > 0:
        dt = min(_WAIT_TICK_MS, remaining)
        holder.clock.advance(dt)
        runtime.update(dt)
        remaining -= dt

    result: dict[str, Any] = {
        "waited": seconds,
        "time_elapsed_s": round(runtime.time_elapsed / 1000.0, 2),
        "currency": state.currency,
        "currency_gained": state.currency - currency_before,
        "cars_repaired": state.cars_repaired - repaired_before,
        "garage_level": state.garage_level,
    }
    if state.garage_level > level_before:
        result["levels_gained"] = state.garage_level - level_before
    new_achievements = sorted(set(state.achievements) - achievements_before)
    if new_achievements:
        result["new_achievements"] = new_achievements
    return result


def _tool_purchase_upgrade(holder: _GameHolder, upgrade_id: str) -> dict[str, Any]:
    info = holder.runtime.upgrade_info(upgrade_id)
    if info is None:
        return {"error": f"Unknown upgrade: {upgrade_id!r}"}
    if info.is_maxed:
        return {"success": False, "reason": "Already at max level"}
    if not holder.runtime.purchase_upgrade(upgrade_id):
        return {"success": False, "reason": "Cannot afford"}
    return {
        "success": True,
        "upgrade_id": upgrade_id,
        "new_level": holder.runtime.state.upgrade_level(upgrade_id),
        "currency": holder.runtime.state.currency,
    }


def _tool_purchase_nip_upgrade(holder: _GameHolder, upgrade_id: str) -> dict[str, Any]:
    info = holder.runtime.nip_upgrade_info(upgrade_id)
    if info is None:
        return {"error": f"Unknown Nip upgrade: {upgrade_id!r}"}
    if info.is_maxed:
        return {"success": False, "reason": "Already at max level"}
    if not holder.runtime.purchase_nip_upgrade(upgrade_id):
        return {"success": False, "reason": "Not enough Nip"}
    return {
        "success": True,
        "upgrade_id": upgrade_id,
        "new_level": holder.runtime.state.nip_upgrade_level(upgrade_id),
        "prestige_currency": holder.runtime.state.prestige_currency,
    }


def _tool_hire_worker(holder: _GameHolder, worker_id: str) -> dict[str, Any]:
    if holder.runtime.worker_info(worker_id) is None:
        return {"error": f"Unknown worker: {worker_id!r}"}
    if not holder.runtime.hire_worker(worker_id):
        return {"success": False, "reason": "Cannot afford"}
    state = holder.runtime.state
    return {
        "success": True,
        "worker_id": worker_id,
        "owned": state.worker_count(worker_id),
        "auto_repair_rate": round(state.auto_repair_rate, 4),
    }


def _tool_get_job_board(holder: _GameHolder) -> dict[str, Any]:
    board = holder.runtime.board_info()
    now = holder.clock()
    return {
        "offers": [_contract_entry(c, now) for c in board.offers],
        "active": None if board.active is None else _contract_entry(board.active, now),
        "completed": board.completed,
        "failed": board.failed,
    }


def _tool_accept_contract(holder: _GameHolder, contract_id: str) -> dict[str, Any]:
    result = holder.runtime.accept_contract(contract_id)
    if not result.ok:
        return {"success": False, "reason": result.message}
    return {"success": True, "message": result.message}


def _tool_abandon_contract(holder: _GameHolder) -> dict[str, Any]:
    if not holder.runtime.abandon_active_contract():
        return {"success": False, "reason": "No active contract"}
    return {"success": True}


def _tool_prestige(holder: _GameHolder) -> dict[str, Any]:
    result = holder.runtime.perform_prestige()
    if not result.success:
        return {"success": False, "reason": result.reason}
    return {
        "success": True,
        "reward_amount": result.reward_amount,
        "prestige_currency": result.prestige_currency,
        "total_prestige_earned": result.total_prestige_earned,
    }


def _tool_new_game(holder: _GameHolder) -> dict[str, Any]:
    fresh = _new_holder(holder.definition)
    holder.clock = fresh.clock
    holder.runtime = fresh.runtime
    return {"success": True, "message": "Game reset to initial state"}


# ── Server factory ──────────────────────────────────────────────────


def create_server(definition: GameDefinition) -> FastMCP:
    """Create an MCP server wrapping a GameRuntime for the given definition."""
    holder = _new_holder(definition)

    mcp = FastMCP(name=f"Garage: {definition.config.name}")

    @mcp.tool()
    def get_game_info() -> dict[str, Any]:
        """Get static game overview: cars, upgrades, workers, unlocks, achievements."""
        return _tool_get_game_info(holder)

    @mcp.tool()
    def get_game_state() -> dict[str, Any]:
        """Get the current ledger: money, level, current car, workers, prestige."""
        return _tool_get_game_state(holder)

    @mcp.tool()
    def get_shop() -> dict[str, Any]:
        """List tool upgrades, Nip upgrades and workers with costs."""
        return _tool_get_shop(holder)

    @mcp.tool()
    def click(count: int = 1) -> dict[str, Any]:
        """Click the current car N times (max 1000)."""
        return _tool_click(holder, count)

    @mcp.tool()
    def wait(seconds: float) -> dict[str, Any]:
        """Advance game time by the given seconds (max 86400), in 1s ticks."""
        return _tool_wait(holder, seconds)

    @mcp.tool()
    def purchase_upgrade(upgrade_id: str) -> dict[str, Any]:
        """Buy one level of a tool upgrade with money."""
        return _tool_purchase_upgrade(holder, upgrade_id)

    @mcp.tool()
    def purchase_nip_upgrade(upgrade_id: str) -> dict[str, Any]:
        """Buy one level of a permanent upgrade with Nip."""
        return _tool_purchase_nip_upgrade(holder, upgrade_id)

    @mcp.tool()
    def hire_worker(worker_id: str) -> dict[str, Any]:
        """Hire one worker of the given type."""
        return _tool_hire_worker(holder, worker_id)

    @mcp.tool()
    def get_job_board() -> dict[str, Any]:
        """List contract offers and the active contract."""
        return _tool_get_job_board(holder)

    @mcp.tool()
    def accept_contract(contract_id: str) -> dict[str, Any]:
        """Accept a contract offer; its car jumps to the front of the queue."""
        return _tool_accept_contract(holder, contract_id)

    @mcp.tool()
    def abandon_contract() -> dict[str, Any]:
        """Abandon the active contract (counts as a failure)."""
        return _tool_abandon_contract(holder)

    @mcp.tool()
    def prestige() -> dict[str, Any]:
        """Reset the run for Nip if any is claimable."""
        return _tool_prestige(holder)

    @mcp.tool()
    def new_game() -> dict[str, Any]:
        """Reset the game to initial state."""
        return _tool_new_game(holder)

    return mcp
