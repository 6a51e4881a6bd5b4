from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from garageengine.events import GameEvent

if TYPE_CHECKING:
    from garageengine.runtime import GameRuntime


@dataclass
class StateSnapshot:
    time: float
    currency: int
    total_earned: int
    lifetime_earnings: int
    level: int
    xp: int
    click_power: float
    auto_repair_rate: float
    cars_repaired: int
    combo: float


@dataclass
class PurchaseEvent:
    time: float
    kind: str
    item_id: str
    cost: float
    currency_after: float


@dataclass
class LevelEvent:
    time: float
    level: int
    tier: int


@dataclass
class ContractEvent:
    time: float
    contract_id: str
    outcome: str  # "completed", "late", "expired" or "abandoned"


@dataclass
class PrestigeEvent:
    time: float
    reward_amount: int
    run_duration: float


@dataclass
class StallEvent:
    time: float
    duration: float = 0.0


class MetricsCollector:
    """Collects simulation metrics at configurable intervals.

    Times are simulated seconds. ``attach`` subscribes to the runtime's
    bus so level-ups and contract outcomes are captured as they happen.
    """

    def __init__(self, snapshot_interval: float = 1.0) -> None:
        self.snapshot_interval = snapshot_interval
        self._last_snapshot_time: float = -1.0
        self._runtime: GameRuntime | None = None

        self.snapshots: list[StateSnapshot] = []
        self.purchases: list[PurchaseEvent] = []
        self.level_ups: list[LevelEvent] = []
        self.contracts: list[ContractEvent] = []
        self.prestiges: list[PrestigeEvent] = []
        self.stalls: list[StallEvent] = []

    def _now(self) -> float:
        return self._runtime.time_elapsed / 1000.0 if self._runtime else 0.0

    def attach(self, runtime: GameRuntime) -> None:
        self._runtime = runtime
        bus = runtime.bus
        bus.on(GameEvent.LEVEL_UP, self._on_level_up)
        bus.on(GameEvent.JOB_COMPLETED, self._on_job_completed)
        bus.on(GameEvent.JOB_FAILED, self._on_job_failed)

    def _on_level_up(self, data: dict[str, Any]) -> None:
        self.level_ups.append(LevelEvent(self._now(), data["new_level"], data["tier"]))

    def _on_job_completed(self, data: dict[str, Any]) -> None:
        self.contracts.append(ContractEvent(self._now(), data["contract"].id, "completed"))

    def _on_job_failed(self, data: dict[str, Any]) -> None:
        self.contracts.append(ContractEvent(self._now(), data["contract"].id, data["reason"]))

    def record_tick(self, runtime: GameRuntime, combo: float = 1.0) -> None:
        """Record a snapshot if enough time has passed."""
        now = runtime.time_elapsed / 1000.0
        if now - self._last_snapshot_time >= self.snapshot_interval:
            self._take_snapshot(runtime, now, combo)
            self._last_snapshot_time = now

    def record_purchase(self, runtime: GameRuntime, kind: str, item_id: str, cost: float) -> None:
        currency_after = runtime.state.prestige_currency if kind == "nip" else runtime.state.currency
        self.purchases.append(
            PurchaseEvent(
                time=runtime.time_elapsed / 1000.0,
                kind=kind,
                item_id=item_id,
                cost=cost,
                currency_after=currency_after,
            )
        )

    def record_prestige(self, runtime: GameRuntime, reward_amount: int, run_duration: float) -> None:
        self.prestiges.append(
            PrestigeEvent(
                time=runtime.time_elapsed / 1000.0,
                reward_amount=reward_amount,
                run_duration=run_duration,
            )
        )

    def record_stall(self, runtime: GameRuntime, duration: float = 0.0) -> None:
        self.stalls.append(StallEvent(time=runtime.time_elapsed / 1000.0, duration=duration))

    def _take_snapshot(self, runtime: GameRuntime, now: float, combo: float) -> None:
        state = runtime.state
        self.snapshots.append(
            StateSnapshot(
                time=now,
                currency=state.currency,
                total_earned=state.total_earned,
                lifetime_earnings=state.lifetime_earnings,
                level=state.garage_level,
                xp=state.garage_xp,
                click_power=state.click_power,
                auto_repair_rate=state.auto_repair_rate,
                cars_repaired=state.cars_repaired,
                combo=combo,
            )
        )
