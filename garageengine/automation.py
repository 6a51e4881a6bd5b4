from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from garageengine.events import GameEvent
from garageengine.subsystem import Subsystem
from garageengine.worker import Worker

if TYPE_CHECKING:
    from garageengine.repair import RepairCompletionService
    from garageengine.state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkerInfo:
    """Read-only snapshot of a worker type for the hiring panel."""

    id: str
    name: str
    description: str
    flavor_text: str
    repair_rate: float
    owned: int
    cost: float
    can_afford: bool
    total_rate: float


class WorkerEngine(Subsystem):
    """Hiring plus continuous auto-repair from the crew."""

    def __init__(self, state: GameState, repairs: RepairCompletionService) -> None:
        self.state = state
        self.repairs = repairs

    def get_cost(self, worker_id: str) -> float:
        wdef = self.state.definition.get_worker(worker_id)
        if wdef is None:
            return math.inf
        return wdef.cost(self.state.worker_count(worker_id))

    def hire(self, worker_id: str) -> bool:
        state = self.state
        wdef = state.definition.get_worker(worker_id)
        if wdef is None:
            return False
        cost = self.get_cost(worker_id)
        if not state.spend_currency(cost):
            return False

        worker = Worker(wdef, hired_at=state.clock())
        state.workers.append(worker)
        owned = state.worker_count(worker_id) + 1
        state.worker_counts[worker_id] = owned
        state.calculate_auto_repair_rate()

        logger.debug("Hired %s for %d (now %d owned)", worker_id, cost, owned)
        state.bus.emit(
            GameEvent.WORKER_HIRED,
            {"worker_id": worker_id, "worker": worker, "cost": cost, "total_owned": owned},
        )
        return True

    def update(self, delta_ms: float) -> None:
        state = self.state
        car = state.current_car
        if car is None or not state.workers:
            return

        total = sum(w.contribution(delta_ms) for w in state.workers)
        total *= state.stats.auto_repair_multiplier
        if total <= 0:
            return

        finished = car.repair(total)
        state.bus.emit(GameEvent.CAR_PROGRESS, {"car": car, "progress": car.progress_percent()})
        state.bus.emit(
            GameEvent.WORKER_WORKING,
            {"repair_amount": total, "worker_count": len(state.workers)},
        )
        if finished:
            self.repairs.complete_repair(is_auto_repair=True)

    def worker_info(self, worker_id: str) -> WorkerInfo | None:
        wdef = self.state.definition.get_worker(worker_id)
        if wdef is None:
            return None
        owned = self.state.worker_count(worker_id)
        cost = self.get_cost(worker_id)
        return WorkerInfo(
            id=wdef.id,
            name=wdef.name,
            description=wdef.description,
            flavor_text=wdef.flavor_text,
            repair_rate=wdef.repair_rate,
            owned=owned,
            cost=cost,
            can_afford=self.state.can_afford(cost),
            total_rate=wdef.repair_rate * owned * self.state.stats.auto_repair_multiplier,
        )

    def all_worker_info(self) -> list[WorkerInfo]:
        infos = [self.worker_info(w.id) for w in self.state.definition.workers]
        return [i for i in infos if i is not None]
