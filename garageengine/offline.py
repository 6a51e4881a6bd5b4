"""Closed-form offline progress.

This is an explicit approximation, not a replay of the tick loop: the
elapsed time is capped and the crew works at a reduced efficiency,
converted straight into cars, cash and XP using fixed average car value and
repair cost constants rather than the player's real car mix.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from garageengine.definition import OfflineConfig, ProgressionConfig


@dataclass(frozen=True)
class OfflineProgress:
    earnings: int
    cars_repaired: int
    time_away_ms: float
    xp: int = 0

    @property
    def is_empty(self) -> bool:
        return self.earnings <= 0 and self.cars_repaired <= 0


_NOTHING = OfflineProgress(earnings=0, cars_repaired=0, time_away_ms=0.0)


def estimate_offline_progress(
    elapsed_ms: float,
    auto_repair_rate: float,
    car_value_multiplier: float = 1.0,
    income_multiplier: float = 1.0,
    config: OfflineConfig | None = None,
    xp_multiplier: float = 1.0,
    progression: ProgressionConfig | None = None,
) -> OfflineProgress:
    """Estimate what the crew earned while nobody was watching."""
    cfg = config or OfflineConfig()
    if elapsed_ms < cfg.min_ms or auto_repair_rate <= 0:
        return _NOTHING

    away_ms = min(elapsed_ms, cfg.max_ms)
    total_repair = auto_repair_rate * (away_ms / 1000.0) * cfg.efficiency
    cars = math.floor(total_repair / cfg.average_repair_cost)
    earnings = math.floor(
        cars * cfg.average_car_value * car_value_multiplier * income_multiplier
    )
    divisor = (progression or ProgressionConfig()).xp_divisor
    xp = math.floor(math.floor(cars * cfg.average_repair_cost / divisor) * xp_multiplier)
    return OfflineProgress(
        earnings=earnings, cars_repaired=cars, time_away_ms=away_ms, xp=xp
    )
