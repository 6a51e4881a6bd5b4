from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable


class EffectType(Enum):
    CLICK_POWER = auto()
    CAR_VALUE_BONUS = auto()
    INCOME_MULTIPLIER = auto()
    CLICK_POWER_MULTIPLIER = auto()
    AUTO_REPAIR_MULTIPLIER = auto()
    COMBO_MAX_BONUS = auto()
    COMBO_GAIN_BONUS = auto()
    QUEUE_SPAWN_REDUCTION = auto()
    XP_MULTIPLIER = auto()


@dataclass
class DerivedStats:
    """Bonus accumulators rebuilt from upgrade levels. Never persisted."""

    base_click_power: float = 1.0
    click_power_multiplier: float = 1.0
    car_value_bonus: float = 0.0
    income_multiplier: float = 1.0
    auto_repair_multiplier: float = 1.0
    queue_spawn_multiplier: float = 1.0
    xp_multiplier: float = 1.0
    combo_max_bonus: float = 0.0
    combo_gain_bonus: float = 0.0
    prestige_multiplier: float = 1.0

    @property
    def click_power(self) -> float:
        return self.base_click_power * self.click_power_multiplier

    @property
    def car_value_multiplier(self) -> float:
        return 1.0 + self.car_value_bonus


def _click_power(stats: DerivedStats, value: float, _floor: float) -> None:
    stats.base_click_power += value


def _car_value(stats: DerivedStats, value: float, _floor: float) -> None:
    stats.car_value_bonus += value


def _income(stats: DerivedStats, value: float, _floor: float) -> None:
    stats.income_multiplier += value


def _click_mult(stats: DerivedStats, value: float, _floor: float) -> None:
    stats.click_power_multiplier += value


def _auto_repair(stats: DerivedStats, value: float, _floor: float) -> None:
    stats.auto_repair_multiplier += value


def _combo_max(stats: DerivedStats, value: float, _floor: float) -> None:
    stats.combo_max_bonus += value


def _combo_gain(stats: DerivedStats, value: float, _floor: float) -> None:
    stats.combo_gain_bonus += value


def _spawn_reduction(stats: DerivedStats, value: float, floor: float) -> None:
    stats.queue_spawn_multiplier = max(floor, stats.queue_spawn_multiplier * (1.0 - value))


def _xp(stats: DerivedStats, value: float, _floor: float) -> None:
    stats.xp_multiplier += value


_APPLIERS: dict[EffectType, Callable[[DerivedStats, float, float], None]] = {
    EffectType.CLICK_POWER: _click_power,
    EffectType.CAR_VALUE_BONUS: _car_value,
    EffectType.INCOME_MULTIPLIER: _income,
    EffectType.CLICK_POWER_MULTIPLIER: _click_mult,
    EffectType.AUTO_REPAIR_MULTIPLIER: _auto_repair,
    EffectType.COMBO_MAX_BONUS: _combo_max,
    EffectType.COMBO_GAIN_BONUS: _combo_gain,
    EffectType.QUEUE_SPAWN_REDUCTION: _spawn_reduction,
    EffectType.XP_MULTIPLIER: _xp,
}

_missing = set(EffectType) - set(_APPLIERS)
if _missing:
    raise RuntimeError(f"No applier for effect types: {sorted(e.name for e in _missing)}")


@dataclass(frozen=True)
class EffectDef:
    """The single typed effect granted by one upgrade level."""

    type: EffectType
    value: float

    def apply(self, stats: DerivedStats, spawn_floor: float = 0.0) -> None:
        """Apply one level of this effect to *stats*."""
        _APPLIERS[self.type](stats, self.value, spawn_floor)


class Effect:
    """Convenience constructors for the effect kinds."""

    @staticmethod
    def click_power(value: float) -> EffectDef:
        return EffectDef(EffectType.CLICK_POWER, value)

    @staticmethod
    def car_value(value: float) -> EffectDef:
        return EffectDef(EffectType.CAR_VALUE_BONUS, value)

    @staticmethod
    def income(value: float) -> EffectDef:
        return EffectDef(EffectType.INCOME_MULTIPLIER, value)

    @staticmethod
    def click_multiplier(value: float) -> EffectDef:
        return EffectDef(EffectType.CLICK_POWER_MULTIPLIER, value)

    @staticmethod
    def auto_repair(value: float) -> EffectDef:
        return EffectDef(EffectType.AUTO_REPAIR_MULTIPLIER, value)

    @staticmethod
    def combo_max(value: float) -> EffectDef:
        return EffectDef(EffectType.COMBO_MAX_BONUS, value)

    @staticmethod
    def combo_gain(value: float) -> EffectDef:
        return EffectDef(EffectType.COMBO_GAIN_BONUS, value)

    @staticmethod
    def spawn_reduction(value: float) -> EffectDef:
        return EffectDef(EffectType.QUEUE_SPAWN_REDUCTION, value)

    @staticmethod
    def xp(value: float) -> EffectDef:
        return EffectDef(EffectType.XP_MULTIPLIER, value)
