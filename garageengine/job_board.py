from __future__ import annotations

import itertools
import logging
import math
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from garageengine.car import Car, ContractTag
from garageengine.contract import ContractActionResult, JobContract
from garageengine.events import GameEvent
from garageengine.subsystem import Subsystem

if TYPE_CHECKING:
    from garageengine.repair import RepairResult
    from garageengine.state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardInfo:
    offers: tuple[JobContract, ...]
    active: JobContract | None
    time_remaining_ms: float | None
    completed: int
    failed: int


class JobBoardEngine(Subsystem):
    """Timed bonus contracts: offers, acceptance, expiry and resolution."""

    def __init__(self, state: GameState, rng: random.Random | None = None) -> None:
        self.state = state
        self.bus = state.bus
        self.config = state.config.contracts
        self.rng = rng or random.Random()
        self.refresh_timer = 0.0
        self._serial = itertools.count(1)
        self.bus.on(GameEvent.CAR_REPAIRED, self.handle_car_repaired)

    def reset(self) -> None:
        self.refresh_timer = 0.0

    # ── Tick ─────────────────────────────────────────────────────────

    def update(self, delta_ms: float) -> None:
        self.refresh_timer += delta_ms
        active = self.state.active_job_contract
        if active is not None and active.is_expired(self.state.clock()):
            self.expire_active_contract()
        if self.refresh_timer >= self.config.refresh_interval_ms:
            self.refresh_timer = 0.0
            self.refresh(replace_all=True)

    # ── Offers ───────────────────────────────────────────────────────

    def rarity_bonus(self, rarity: str) -> float:
        table = self.config.rarity_bonus
        return table.get(rarity, table.get("common", 0.0))

    def generate(self) -> JobContract:
        """Roll a new offer from the unlocked car pool."""
        state = self.state
        definition = state.definition
        pool = [c for c in (definition.get_car(i) for i in state.unlocked_cars) if c]
        if not pool:
            pool = [definition.starter_car]
        rng = self.rng
        cdef = rng.choice(pool)

        rarity = self.rarity_bonus(cdef.rarity.value)
        tier_bonus = max(0, state.current_tier - 1) * self.config.tier_bonus_per_tier
        repair_mult = round(1.1 + rng.random() * 0.5 + rarity * 0.2 + tier_bonus, 2)
        payout_mult = round(1.25 + rng.random() * 0.75 + rarity * 0.25, 2)
        duration_s = max(20, math.floor(65 - rarity * 18 - tier_bonus * 50 + rng.random() * 14))
        bonus_xp = max(8, math.floor(cdef.repair_cost / 8 * (1 + rarity * 0.5)))
        flavor = rng.choice(self.config.labels)

        now = state.clock()
        contract = JobContract(
            id=f"job-{int(now)}-{next(self._serial)}{rng.randrange(16 ** 4):04x}",
            car_id=cdef.id,
            car_name=cdef.name,
            rarity=cdef.rarity.value,
            label=f"{flavor} ({cdef.name})",
            repair_multiplier=repair_mult,
            payout_multiplier=payout_mult,
            bonus_xp=bonus_xp,
            duration_ms=duration_s * 1000.0,
            created_at=now,
        )
        logger.debug("Generated contract %s", contract.label)
        return contract

    def refresh(self, replace_all: bool = False) -> None:
        """Top the board back up to the offer cap, optionally replacing every offer."""
        offers = [] if replace_all else self.state.job_contracts[: self.config.max_offers]
        while len(offers) < self.config.max_offers:
            offers.append(self.generate())
        self.state.job_contracts = offers
        self.bus.emit(GameEvent.JOB_BOARD_UPDATED, self.board_info())

    # ── Commands ─────────────────────────────────────────────────────

    def _reject(self, message: str) -> ContractActionResult:
        self.bus.emit(GameEvent.NOTIFICATION, {"message": message})
        return ContractActionResult(ok=False, message=message)

    def accept(self, contract_id: str) -> ContractActionResult:
        state = self.state
        if state.active_job_contract is not None:
            return self._reject("You already have an active contract.")
        offer = next((c for c in state.job_contracts if c.id == contract_id), None)
        if offer is None:
            return self._reject("Contract not found.")

        state.job_contracts.remove(offer)
        active = offer.accept(state.clock())
        state.active_job_contract = active
        self.spawn_contract_car(active)
        self.refresh()

        logger.debug("Accepted contract %s", active.label)
        self.bus.emit(GameEvent.JOB_ACCEPTED, {"contract": active})
        self.bus.emit(
            GameEvent.NOTIFICATION, {"message": f"Accepted: {active.label} ({active.car_name})"}
        )
        return ContractActionResult(ok=True)

    def abandon(self) -> bool:
        state = self.state
        active = state.active_job_contract
        if active is None:
            return False

        removed_current = False
        if state.current_car is not None and state.current_car.belongs_to(active.id):
            state.current_car = None
            state.current_car_started_at = None
            removed_current = True
        state.car_queue = [c for c in state.car_queue if not c.belongs_to(active.id)]
        state.active_job_contract = None
        state.contracts_failed += 1
        self.refresh()
        if removed_current:
            state.promote_next_car()

        self.bus.emit(GameEvent.JOB_FAILED, {"contract": active, "reason": "abandoned"})
        self.bus.emit(GameEvent.NOTIFICATION, {"message": f"Contract abandoned: {active.label}"})
        return True

    def expire_active_contract(self) -> None:
        state = self.state
        active = state.active_job_contract
        if active is None:
            return
        # A late finish must not pay out the contract bonus
        for car in state.cars_for_contract(active.id):
            if car.contract is not None:
                car.contract.expired = True
        state.active_job_contract = None
        state.contracts_failed += 1
        self.refresh()

        logger.debug("Contract expired: %s", active.label)
        self.bus.emit(GameEvent.JOB_FAILED, {"contract": active, "reason": "expired"})
        self.bus.emit(GameEvent.NOTIFICATION, {"message": f"Contract expired: {active.label}"})

    def spawn_contract_car(self, contract: JobContract) -> Car:
        state = self.state
        cdef = state.definition.get_car(contract.car_id) or state.definition.starter_car
        car = Car(cdef, created_at=state.clock())
        car.apply_tier_scaling(state.current_tier, state.config.progression.tier_scaling_step)
        car.repair_cost = max(1, math.floor(car.repair_cost * contract.repair_multiplier))
        car.contract = ContractTag(
            contract_id=contract.id,
            label=contract.label,
            payout_multiplier=contract.payout_multiplier,
            bonus_xp=contract.bonus_xp,
            expires_at=contract.expires_at or 0.0,
        )

        if state.current_car is None:
            state.current_car = car
            state.current_car_started_at = state.clock()
            self.bus.emit(GameEvent.CAR_STARTED, car)
            return car

        # Contract cars jump the line, bumping the last customer if full
        if len(state.car_queue) >= state.config.queue.max_size:
            state.car_queue.pop()
        state.car_queue.insert(0, car)
        self.bus.emit(GameEvent.CAR_QUEUED, {"car": car, "queue_length": len(state.car_queue)})
        return car

    # ── Resolution ───────────────────────────────────────────────────

    def handle_car_repaired(self, result: RepairResult) -> None:
        outcome = result.contract
        if outcome is None:
            return
        state = self.state
        active = state.active_job_contract
        if active is None or active.id != outcome.contract_id:
            return

        state.active_job_contract = None
        if outcome.completed_in_time:
            state.contracts_completed += 1
        else:
            state.contracts_failed += 1
        self.refresh()

        if outcome.completed_in_time:
            self.bus.emit(
                GameEvent.JOB_COMPLETED, {"contract": active, "payout": result.payment}
            )
            self.bus.emit(
                GameEvent.NOTIFICATION, {"message": f"Contract complete: {active.label}"}
            )
        else:
            self.bus.emit(GameEvent.JOB_FAILED, {"contract": active, "reason": "late"})
            self.bus.emit(
                GameEvent.NOTIFICATION, {"message": f"Contract failed (late): {active.label}"}
            )

    def reconcile_after_load(self) -> None:
        """Resolve or repair the active contract after a save was restored."""
        state = self.state
        active = state.active_job_contract
        if active is not None and active.is_expired(state.clock()):
            self.expire_active_contract()
            return
        if active is not None and not state.cars_for_contract(active.id):
            logger.info("Respawning missing car for contract %s", active.id)
            self.spawn_contract_car(active)
        self.refresh()

    # ── Queries ──────────────────────────────────────────────────────

    def board_info(self) -> BoardInfo:
        state = self.state
        active = state.active_job_contract
        return BoardInfo(
            offers=tuple(state.job_contracts),
            active=active,
            time_remaining_ms=active.time_remaining(state.clock()) if active else None,
            completed=state.contracts_completed,
            failed=state.contracts_failed,
        )
