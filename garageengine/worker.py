from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from garageengine.cost_scaling import CostScaling

if TYPE_CHECKING:
    from garageengine.definition import GameDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkerDef:
    """Static definition of a hireable worker type."""

    id: str
    name: str = ""
    description: str = ""
    base_cost: float = 50.0
    repair_rate: float = 1.0  # repair points per second
    cost_growth: float = 1.15
    flavor_text: str = ""

    @property
    def cost_scaling(self) -> CostScaling:
        return CostScaling.exponential(self.cost_growth)

    def cost(self, owned: int) -> int:
        return self.cost_scaling.compute(self.base_cost, owned)


class Worker:
    """A hired worker. Contributes repair points every tick."""

    def __init__(self, definition: WorkerDef, hired_at: float = 0.0) -> None:
        self.definition = definition
        self.id = definition.id
        self.name = definition.name or definition.id
        self.repair_rate = definition.repair_rate
        self.hired_at = hired_at
        self.total_repairs: float = 0.0

    def __repr__(self) -> str:
        return f"Worker({self.id!r}, total_repairs={self.total_repairs:.1f})"

    def contribution(self, delta_ms: float) -> float:
        """Repair points contributed over *delta_ms*; also tallied on the worker."""
        amount = self.repair_rate * (delta_ms / 1000.0)
        self.total_repairs += amount
        return amount

    def serialize(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "hired_at": self.hired_at,
            "total_repairs": self.total_repairs,
        }

    @classmethod
    def deserialize(
        cls, data: dict[str, Any], definition: GameDefinition, now: float = 0.0
    ) -> Worker:
        """Rebuild a worker. Unknown types become the first worker type."""
        wdef = definition.get_worker(str(data.get("id", "")))
        if wdef is None:
            fallback = definition.workers[0]
            logger.warning(
                "Unknown worker type %r in save data, using %r", data.get("id"), fallback.id
            )
            return cls(fallback, hired_at=now)

        worker = cls(wdef, hired_at=data.get("hired_at", now))
        worker.total_repairs = float(data.get("total_repairs", 0.0))
        return worker
