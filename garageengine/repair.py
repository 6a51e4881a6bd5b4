from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from garageengine.car import Car, tier_multiplier
from garageengine.contract import ContractOutcome
from garageengine.events import GameEvent

if TYPE_CHECKING:
    from garageengine.progression import ProgressionEngine
    from garageengine.state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepairResult:
    """Everything that happened when a car left the bay."""

    car: Car
    payment: int
    credited: int
    xp: int
    is_auto_repair: bool
    payout_bonus_multiplier: float
    contract: ContractOutcome | None


class RepairCompletionService:
    """The one path that turns a fully repaired car into money and XP."""

    def __init__(self, state: GameState, progression: ProgressionEngine) -> None:
        self.state = state
        self.progression = progression

    def base_xp(self, car: Car) -> int:
        """XP for a car, from its repair cost with tier scaling divided back out."""
        prog = self.state.config.progression
        cost = car.repair_cost
        if car.tier > 1:
            cost = math.floor(cost / tier_multiplier(car.tier, prog.tier_scaling_step))
        return math.floor(cost / prog.xp_divisor * self.state.xp_multiplier)

    def complete_repair(
        self, is_auto_repair: bool = False, payout_bonus_multiplier: float = 1.0
    ) -> RepairResult | None:
        state = self.state
        car = state.current_car
        if car is None:
            return None

        now = state.clock()
        payment = math.floor(
            car.base_value * state.car_value_multiplier() * payout_bonus_multiplier
        )

        outcome = None
        bonus_xp = 0
        if car.contract is not None:
            tag = car.contract
            in_time = not tag.expired and now <= tag.expires_at
            payout = tag.payout_multiplier if in_time else 1.0
            bonus_xp = tag.bonus_xp if in_time else 0
            payment = math.floor(payment * payout)
            outcome = ContractOutcome(
                contract_id=tag.contract_id,
                label=tag.label,
                completed_in_time=in_time,
                payout_multiplier=payout,
                bonus_xp=bonus_xp,
            )

        # Free the bay first so observers never see a finished car in it
        state.current_car = None
        state.current_car_started_at = None
        state.last_car_repaired_at = now
        state.cars_repaired += 1

        credited = state.add_currency(payment)
        xp = self.base_xp(car)
        if bonus_xp > 0:
            xp += math.floor(bonus_xp * state.xp_multiplier)
        self.progression.add_xp(xp)

        result = RepairResult(
            car=car,
            payment=payment,
            credited=credited,
            xp=xp,
            is_auto_repair=is_auto_repair,
            payout_bonus_multiplier=payout_bonus_multiplier,
            contract=outcome,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Repaired %s: paid %d (credited %d), %d XP%s",
                car.id,
                payment,
                credited,
                xp,
                " [auto]" if is_auto_repair else "",
            )
        state.bus.emit(GameEvent.CAR_REPAIRED, result)
        return result
