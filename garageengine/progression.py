from __future__ import annotations

import bisect
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from garageengine.car import tier_multiplier
from garageengine.events import GameEvent

if TYPE_CHECKING:
    from garageengine.state import GameState


def build_xp_table(base: float = 100.0, growth: float = 1.15, levels: int = 100) -> list[int]:
    """Cumulative XP needed to reach each level; index 0 is level 1 (0 XP)."""
    table = [0]
    cumulative = 0
    for level in range(1, levels):
        cumulative += math.floor(base * growth ** (level - 1))
        table.append(cumulative)
    return table


def level_from_xp(table: list[int], xp: float) -> int:
    """Largest level whose cumulative threshold is <= *xp*."""
    return max(1, bisect.bisect_right(table, xp))


def tier_for_level(level: int, levels_per_tier: int = 10) -> int:
    return level // levels_per_tier + 1


@dataclass(frozen=True)
class NextUnlock:
    car_id: str
    car_name: str
    level: int


@dataclass(frozen=True)
class ProgressInfo:
    """Snapshot of garage progression for display."""

    level: int
    xp_into_level: int
    xp_for_next_level: int
    total_xp: int
    progress: float
    tier: int
    tier_multiplier: float
    next_unlock: NextUnlock | None
    unlocked_cars: int
    total_cars: int


class ProgressionEngine:
    """Awards XP and derives level, tier and car unlocks from it."""

    def __init__(self, state: GameState) -> None:
        self.state = state
        self.bus = state.bus
        self.config = state.config.progression

    @property
    def table(self) -> list[int]:
        return self.state.xp_table

    def add_xp(self, amount: int) -> None:
        if amount <= 0:
            return
        state = self.state
        old_level = state.garage_level
        old_tier = state.current_tier

        state.garage_xp += amount
        new_level = level_from_xp(self.table, state.garage_xp)

        tier_changed = False
        newly_unlocked: list[str] = []
        if new_level > old_level:
            state.garage_level = new_level
            new_tier = tier_for_level(new_level, self.config.levels_per_tier)
            tier_changed = new_tier > old_tier
            if tier_changed:
                state.current_tier = new_tier
            newly_unlocked = self._unlock_cars(new_level)

        # Emit after every mutation above has landed
        self.bus.emit(
            GameEvent.XP_EARNED,
            {"amount": amount, "total_xp": state.garage_xp, "level": state.garage_level},
        )
        if new_level > old_level:
            self.bus.emit(
                GameEvent.LEVEL_UP,
                {"old_level": old_level, "new_level": new_level, "tier": state.current_tier},
            )
        if tier_changed:
            self.bus.emit(
                GameEvent.TIER_UP,
                {"old_tier": old_tier, "new_tier": state.current_tier, "level": new_level},
            )
        for car_id in newly_unlocked:
            cdef = state.definition.get_car(car_id)
            self.bus.emit(
                GameEvent.CAR_UNLOCKED,
                {
                    "car_id": car_id,
                    "car_name": cdef.name if cdef else car_id,
                    "level": new_level,
                },
            )

    def _unlock_cars(self, level: int) -> list[str]:
        # Every milestone at or below the new level, so multi-level jumps skip nothing
        fresh = []
        for car_id in self.state.definition.cars_unlocked_at(level):
            if car_id not in self.state.unlocked_cars:
                self.state.unlocked_cars.append(car_id)
                fresh.append(car_id)
        return fresh

    def xp_for_level(self, level: int) -> int:
        """Cumulative XP required to reach *level*."""
        if level <= 1:
            return 0
        index = level - 1
        if index < len(self.table):
            return self.table[index]
        # Past the table: extend linearly at the last level's cost
        last = len(self.table) - 1
        step = math.floor(self.config.xp_base * self.config.xp_growth ** last)
        return self.table[last] + step * (index - last)

    def remaining_xp(self) -> int:
        return max(0, self.xp_for_level(self.state.garage_level + 1) - self.state.garage_xp)

    def is_car_unlocked(self, car_id: str) -> bool:
        return car_id in self.state.unlocked_cars

    def tier_multiplier(self, tier: int | None = None) -> float:
        return tier_multiplier(
            self.state.current_tier if tier is None else tier, self.config.tier_scaling_step
        )

    def next_unlock(self) -> NextUnlock | None:
        level = self.state.garage_level
        for milestone in sorted(self.state.definition.car_unlocks, key=lambda m: m.level):
            if milestone.level > level and milestone.car_ids:
                car_id = milestone.car_ids[0]
                cdef = self.state.definition.get_car(car_id)
                return NextUnlock(car_id, cdef.name if cdef else car_id, milestone.level)
        return None

    def progress_info(self) -> ProgressInfo:
        state = self.state
        current = self.xp_for_level(state.garage_level)
        nxt = self.xp_for_level(state.garage_level + 1)
        into = state.garage_xp - current
        span = nxt - current
        return ProgressInfo(
            level=state.garage_level,
            xp_into_level=into,
            xp_for_next_level=span,
            total_xp=state.garage_xp,
            progress=into / span if span > 0 else 0.0,
            tier=state.current_tier,
            tier_multiplier=self.tier_multiplier(),
            next_unlock=self.next_unlock(),
            unlocked_cars=len(state.unlocked_cars),
            total_cars=len(state.definition.cars),
        )
