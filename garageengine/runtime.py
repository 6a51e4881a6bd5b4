from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from garageengine._types import Clock, system_clock
from garageengine.achievement import AchievementTracker
from garageengine.automation import WorkerEngine, WorkerInfo
from garageengine.car_queue import CarQueueEngine, CurrentCarInfo, QueueInfo
from garageengine.combo import ClickEngine, ClickResult
from garageengine.contract import ContractActionResult
from garageengine.definition import GameDefinition
from garageengine.events import EventBus, GameEvent
from garageengine.job_board import BoardInfo, JobBoardEngine
from garageengine.loop import FixedTimestepLoop
from garageengine.offline import OfflineProgress, estimate_offline_progress
from garageengine.prestige import PrestigeEngine, PrestigeResult
from garageengine.progression import ProgressInfo, ProgressionEngine
from garageengine.repair import RepairCompletionService
from garageengine.shop import NipShop, UpgradeShop
from garageengine.state import GameState
from garageengine.upgrade import UpgradeInfo

if TYPE_CHECKING:
    from garageengine.subsystem import Subsystem

logger = logging.getLogger(__name__)

_RESTORE_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


class GameRuntime:
    """Authoritative game logic processor.

    Owns the ledger and every engine, advances them in a fixed order each
    step and exposes the command surface. Commands never raise for
    game-level failures; they return booleans, result objects or None.
    """

    def __init__(
        self,
        definition: GameDefinition | None = None,
        *,
        clock: Clock = system_clock,
        rng: random.Random | None = None,
        bus: EventBus | None = None,
    ) -> None:
        if definition is None:
            from garageengine.data import define_garage

            definition = define_garage()
        errors = definition.validate()
        if errors:
            raise ValueError(
                "Invalid GameDefinition:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        self.definition = definition
        self.config = definition.config
        self.clock = clock
        self.rng = rng or random.Random()
        self.bus = bus or EventBus()
        self.state = GameState(definition, self.bus, clock)

        self.progression = ProgressionEngine(self.state)
        self.repairs = RepairCompletionService(self.state, self.progression)
        self.clicks = ClickEngine(self.state, self.repairs)
        self.workers = WorkerEngine(self.state, self.repairs)
        self.queue = CarQueueEngine(self.state, self.rng)
        self.job_board = JobBoardEngine(self.state, self.rng)
        self.upgrade_shop = UpgradeShop(self.state)
        self.nip_shop = NipShop(self.state)
        self.prestige_engine = PrestigeEngine(self.state)
        self.achievements = AchievementTracker(self.state, self.bus, clock)

        # Fixed per-step order: combo decay, worker accrual, queue, contract expiry
        self._subsystems: list[Subsystem] = [
            self.clicks,
            self.workers,
            self.queue,
            self.job_board,
        ]
        self.loop = FixedTimestepLoop(self.update, self.config.loop)
        self.ticks = 0
        self.time_elapsed = 0.0

        self.start_new_game()

    # ── Core loop ────────────────────────────────────────────────────

    def update(self, delta_ms: float) -> None:
        """Advance every mechanic by one step of *delta_ms* milliseconds."""
        for sub in self._subsystems:
            sub.update(delta_ms)
        self.ticks += 1
        self.time_elapsed += delta_ms

    def start_loop(self, now: float | None = None) -> None:
        self.loop.start(self.clock() if now is None else now)

    def frame(self, now: float | None = None) -> int:
        """Drive the fixed-timestep loop from a host frame callback."""
        return self.loop.frame(self.clock() if now is None else now)

    # ── Run lifecycle ────────────────────────────────────────────────

    def _reset_transients(self) -> None:
        for sub in self._subsystems:
            sub.reset()

    def start_new_game(self) -> None:
        """Wipe everything and begin a fresh run with a car and a full board."""
        self.state.reset()
        self.state.recalculate_stats()
        self._reset_transients()
        self.queue.force_spawn()
        self.job_board.refresh(replace_all=True)
        logger.info("New game started")

    def reset_game(self) -> None:
        """Full wipe, prestige progress included."""
        self.start_new_game()
        self.bus.emit(GameEvent.GAME_RESET)

    def restore(
        self, data: dict[str, Any], saved_at: float | None = None
    ) -> OfflineProgress | None:
        """Load a serialized ledger, reconcile it and grant offline progress.

        Returns None (after starting a fresh run) when the data is unusable.
        """
        try:
            self.state.deserialize(data)
        except _RESTORE_ERRORS as exc:
            logger.warning("Save data could not be restored: %s", exc)
            self.start_new_game()
            self.bus.emit(GameEvent.NOTIFICATION, {"message": "Save load failed"})
            return None

        self._reset_transients()
        # Contract cars claim an empty bay before a fresh customer is spawned
        self.job_board.reconcile_after_load()
        self.queue.ensure_car()
        if saved_at is None:
            saved_at = self.state.last_save_time
        return self.apply_offline_progress(self.clock() - saved_at)

    def apply_offline_progress(self, elapsed_ms: float) -> OfflineProgress:
        """Credit the closed-form offline estimate for *elapsed_ms*."""
        state = self.state
        estimate = estimate_offline_progress(
            elapsed_ms,
            state.auto_repair_rate,
            car_value_multiplier=state.car_value_multiplier(),
            # add_currency applies income and prestige multipliers itself
            income_multiplier=1.0,
            config=self.config.offline,
            xp_multiplier=state.xp_multiplier,
            progression=self.config.progression,
        )
        if estimate.is_empty:
            return estimate

        credited = state.add_currency(estimate.earnings)
        self.progression.add_xp(estimate.xp)
        estimate = replace(estimate, earnings=credited)
        logger.info(
            "Offline progress: %d cars, %d earned over %.0f s",
            estimate.cars_repaired,
            credited,
            estimate.time_away_ms / 1000.0,
        )
        self.bus.emit(
            GameEvent.OFFLINE_EARNINGS,
            {
                "time": estimate.time_away_ms,
                "earnings": credited,
                "cars_repaired": estimate.cars_repaired,
                "xp": estimate.xp,
            },
        )
        return estimate

    def serialize(self) -> dict[str, Any]:
        return self.state.serialize()

    # ── Commands ─────────────────────────────────────────────────────

    def click_at(self, x: float = 0.0, y: float = 0.0) -> ClickResult | None:
        return self.clicks.handle_click(x, y)

    def purchase_upgrade(self, upgrade_id: str) -> bool:
        return self.upgrade_shop.purchase(upgrade_id)

    def purchase_nip_upgrade(self, upgrade_id: str) -> bool:
        return self.nip_shop.purchase(upgrade_id)

    def hire_worker(self, worker_id: str) -> bool:
        return self.workers.hire(worker_id)

    def accept_contract(self, contract_id: str) -> ContractActionResult:
        return self.job_board.accept(contract_id)

    def abandon_active_contract(self) -> bool:
        return self.job_board.abandon()

    def perform_prestige(self) -> PrestigeResult:
        result = self.prestige_engine.prestige()
        if result.success:
            self._reset_transients()
            self.queue.force_spawn()
            self.job_board.refresh(replace_all=True)
        return result

    def prestige(self) -> bool:
        return self.perform_prestige().success

    # ── Queries ──────────────────────────────────────────────────────

    def calculate_claimable_nip(self) -> int:
        return self.prestige_engine.calculate_claimable_nip()

    def next_nip_cost(self) -> float:
        return self.prestige_engine.next_nip_cost()

    def upgrade_info(self, upgrade_id: str) -> UpgradeInfo | None:
        return self.upgrade_shop.upgrade_info(upgrade_id)

    def nip_upgrade_info(self, upgrade_id: str) -> UpgradeInfo | None:
        return self.nip_shop.upgrade_info(upgrade_id)

    def worker_info(self, worker_id: str) -> WorkerInfo | None:
        return self.workers.worker_info(worker_id)

    def queue_info(self) -> QueueInfo:
        return self.queue.queue_info()

    def current_car_info(self) -> CurrentCarInfo | None:
        return self.queue.current_car_info()

    def progress_info(self) -> ProgressInfo:
        return self.progression.progress_info()

    def board_info(self) -> BoardInfo:
        return self.job_board.board_info()

    @property
    def combo(self) -> float:
        return self.clicks.combo_multiplier
