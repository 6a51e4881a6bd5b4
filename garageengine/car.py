from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from garageengine.definition import GameDefinition

logger = logging.getLogger(__name__)


class Rarity(Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"


@dataclass(frozen=True)
class CarDef:
    """Static definition of a car type that can roll into the garage."""

    id: str
    name: str = ""
    repair_cost: int = 50
    base_value: int = 25
    rarity: Rarity = Rarity.COMMON
    weight: float = 1.0
    color: str = ""


def tier_multiplier(tier: int, step: float = 0.5) -> float:
    """Difficulty/reward scaling for a tier: 1.0x, 1.5x, 2.0x, ..."""
    return 1.0 + (tier - 1) * step


@dataclass
class ContractTag:
    """Contract metadata carried by a car spawned for an accepted contract."""

    contract_id: str
    label: str = ""
    payout_multiplier: float = 1.0
    bonus_xp: int = 0
    expires_at: float = 0.0
    expired: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContractTag:
        return cls(
            contract_id=str(data.get("contract_id", "")),
            label=data.get("label", ""),
            payout_multiplier=float(data.get("payout_multiplier", 1.0)),
            bonus_xp=int(data.get("bonus_xp", 0)),
            expires_at=float(data.get("expires_at", 0.0)),
            expired=bool(data.get("expired", False)),
        )


class Car:
    """A vehicle in the garage with mutable repair progress."""

    def __init__(self, definition: CarDef, created_at: float = 0.0) -> None:
        self.id = definition.id
        self.name = definition.name or definition.id
        self.repair_cost: int = definition.repair_cost
        self.base_value: int = definition.base_value
        self.rarity = definition.rarity
        self.color = definition.color
        self.tier = 1
        self.repair_progress: float = 0.0
        self.created_at = created_at
        self.contract: ContractTag | None = None

    def __repr__(self) -> str:
        return (
            f"Car({self.id!r}, progress={self.repair_progress:.1f}/{self.repair_cost}, "
            f"tier={self.tier})"
        )

    def repair(self, amount: float) -> bool:
        """Apply repair points. Returns True once the car is fully repaired."""
        self.repair_progress = min(self.repair_progress + amount, self.repair_cost)
        return self.is_fully_repaired()

    def is_fully_repaired(self) -> bool:
        return self.repair_progress >= self.repair_cost

    def progress_percent(self) -> float:
        if self.repair_cost <= 0:
            return 1.0
        return self.repair_progress / self.repair_cost

    def value(self, multiplier: float = 1.0) -> int:
        return math.floor(self.base_value * multiplier)

    def apply_tier_scaling(self, tier: int, step: float = 0.5) -> None:
        """Inflate repair cost and value for the given tier."""
        self.tier = tier
        if tier <= 1:
            return
        mult = tier_multiplier(tier, step)
        self.repair_cost = math.floor(self.repair_cost * mult)
        self.base_value = math.floor(self.base_value * mult)

    def belongs_to(self, contract_id: str) -> bool:
        return self.contract is not None and self.contract.contract_id == contract_id

    # ── Persistence ──────────────────────────────────────────────────

    def serialize(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "repair_cost": self.repair_cost,
            "base_value": self.base_value,
            "tier": self.tier,
            "repair_progress": self.repair_progress,
            "created_at": self.created_at,
            "contract": self.contract.to_dict() if self.contract else None,
        }

    @classmethod
    def deserialize(
        cls, data: dict[str, Any], definition: GameDefinition, now: float = 0.0
    ) -> Car:
        """Rebuild a car from saved data. Unknown types become the starter car."""
        cdef = definition.get_car(str(data.get("id", "")))
        if cdef is None:
            logger.warning(
                "Unknown car type %r in save data, using %r",
                data.get("id"),
                definition.starter_car.id,
            )
            return cls(definition.starter_car, created_at=now)

        car = cls(cdef, created_at=data.get("created_at", now))
        car.tier = int(data.get("tier", 1))
        car.repair_cost = int(data.get("repair_cost", cdef.repair_cost))
        car.base_value = int(data.get("base_value", cdef.base_value))
        progress = float(data.get("repair_progress", 0.0))
        car.repair_progress = min(max(progress, 0.0), car.repair_cost)
        contract = data.get("contract")
        if contract:
            car.contract = ContractTag.from_dict(contract)
        return car
