from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from garageengine.events import GameEvent
from garageengine.subsystem import Subsystem

if TYPE_CHECKING:
    from garageengine.repair import RepairCompletionService, RepairResult
    from garageengine.state import GameState


@dataclass(frozen=True)
class ClickResult:
    x: float
    y: float
    amount: int
    combo: float
    is_crit: bool
    timestamp: float
    repair: RepairResult | None = None


class ClickEngine(Subsystem):
    """Click-to-repair with a combo multiplier that builds and decays."""

    def __init__(self, state: GameState, repairs: RepairCompletionService) -> None:
        self.state = state
        self.repairs = repairs
        self.config = state.config.combo
        self.combo_multiplier = 1.0
        self.last_click_time: float | None = None

    def reset(self) -> None:
        self.combo_multiplier = 1.0
        self.last_click_time = None

    @property
    def max_combo(self) -> float:
        return self.config.max_combo + self.state.stats.combo_max_bonus

    @property
    def gain_per_click(self) -> float:
        return self.config.gain_per_click + self.state.stats.combo_gain_bonus

    def _within_timeout(self, now: float) -> bool:
        return (
            self.last_click_time is not None
            and now - self.last_click_time < self.config.timeout_ms
        )

    def handle_click(self, x: float = 0.0, y: float = 0.0) -> ClickResult | None:
        """Repair the car in the bay. Returns None when the bay is empty."""
        state = self.state
        car = state.current_car
        if car is None:
            return None

        now = state.clock()
        if self._within_timeout(now):
            self.combo_multiplier = min(self.combo_multiplier + self.gain_per_click, self.max_combo)
        else:
            self.combo_multiplier = 1.0
        self.last_click_time = now

        amount = math.floor(state.click_power * self.combo_multiplier)
        finished = car.repair(amount)
        state.total_clicks += 1

        combo = self.combo_multiplier
        state.bus.emit(
            GameEvent.CLICK_PERFORMED,
            {"x": x, "y": y, "amount": amount, "combo": combo, "timestamp": now},
        )
        state.bus.emit(
            GameEvent.CAR_PROGRESS, {"car": car, "progress": car.progress_percent()}
        )

        repair = None
        if finished:
            bonus = 1.0 + max(0.0, combo - 1.0) * self.config.payout_factor
            repair = self.repairs.complete_repair(
                is_auto_repair=False, payout_bonus_multiplier=bonus
            )

        return ClickResult(
            x=x,
            y=y,
            amount=amount,
            combo=combo,
            is_crit=combo >= self.config.crit_threshold,
            timestamp=now,
            repair=repair,
        )

    def update(self, delta_ms: float) -> None:
        """Decay the combo toward 1 once clicking has stopped."""
        if self._within_timeout(self.state.clock()):
            return
        decayed = self.combo_multiplier - self.config.decay_per_second * (delta_ms / 1000.0)
        # The cap can shrink after a reset
        self.combo_multiplier = min(max(1.0, decayed), self.max_combo)

    def effective_click_power(self) -> int:
        return math.floor(self.state.click_power * self.combo_multiplier)
