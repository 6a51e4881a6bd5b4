from __future__ import annotations

from dataclasses import dataclass

from garageengine.cost_scaling import CostScaling
from garageengine.effect import EffectDef


@dataclass(frozen=True)
class UpgradeDef:
    """A levelled upgrade bought with cash (tools) or Nip (meta upgrades)."""

    id: str
    effect: EffectDef
    name: str = ""
    description: str = ""
    base_cost: float = 1.0
    max_level: int = 1
    cost_growth: float = 1.15

    @property
    def cost_scaling(self) -> CostScaling:
        return CostScaling.exponential(self.cost_growth)

    def cost(self, level: int) -> int:
        """Price of the next level when *level* levels are owned."""
        return self.cost_scaling.compute(self.base_cost, level)


@dataclass(frozen=True)
class UpgradeInfo:
    """Read-only snapshot of an upgrade for shop listings."""

    id: str
    name: str
    description: str
    level: int
    max_level: int
    cost: float
    can_afford: bool
    can_purchase: bool
    is_maxed: bool
    effect: EffectDef
