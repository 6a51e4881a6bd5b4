from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from garageengine.car import Car, CarDef
from garageengine.events import GameEvent
from garageengine.subsystem import Subsystem

if TYPE_CHECKING:
    from garageengine.state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueInfo:
    current_car: Car | None
    queue: tuple[Car, ...]
    queue_length: int
    max_size: int
    spawn_interval: float
    time_to_next_spawn: float


@dataclass(frozen=True)
class CurrentCarInfo:
    name: str
    rarity: str
    color: str
    tier: int
    progress: float
    repair_progress: float
    repair_cost: int
    value: int
    contract_label: str | None


class CarQueueEngine(Subsystem):
    """Spawns customers on a timer and keeps the repair bay occupied."""

    def __init__(self, state: GameState, rng: random.Random | None = None) -> None:
        self.state = state
        self.config = state.config.queue
        self.rng = rng or random.Random()
        self.spawn_timer = 0.0

    def reset(self) -> None:
        self.spawn_timer = 0.0

    def spawn_interval(self) -> float:
        cfg = self.config
        worker_bonus = min(
            len(self.state.workers) * cfg.worker_bonus_per_worker, cfg.worker_bonus_cap
        )
        interval = (
            cfg.base_interval_ms * (1.0 - worker_bonus) * self.state.stats.queue_spawn_multiplier
        )
        return max(cfg.min_interval_ms, interval)

    def can_spawn(self) -> bool:
        return len(self.state.car_queue) < self.config.max_size

    def update(self, delta_ms: float) -> None:
        self.spawn_timer += delta_ms
        interval = self.spawn_interval()
        while self.spawn_timer >= interval and self.can_spawn():
            self.spawn_car()
            self.spawn_timer -= interval
        # Bound catch-up bursts after long ticks
        self.spawn_timer = min(self.spawn_timer, 2 * interval)
        self.assign_next_car()

    def pick_car_def(self) -> CarDef:
        """Weighted random pick from the unlocked pool."""
        definition = self.state.definition
        pool = [c for c in (definition.get_car(i) for i in self.state.unlocked_cars) if c]
        if not pool:
            logger.warning("No unlocked cars available, falling back to the starter car")
            return definition.starter_car
        return self.rng.choices(pool, weights=[c.weight for c in pool], k=1)[0]

    def build_car(self, cdef: CarDef) -> Car:
        car = Car(cdef, created_at=self.state.clock())
        car.apply_tier_scaling(
            self.state.current_tier, self.state.config.progression.tier_scaling_step
        )
        return car

    def spawn_car(self) -> Car:
        car = self.build_car(self.pick_car_def())
        self.state.car_queue.append(car)
        logger.debug("Spawned %r (queue %d)", car, len(self.state.car_queue))
        self.state.bus.emit(
            GameEvent.CAR_QUEUED, {"car": car, "queue_length": len(self.state.car_queue)}
        )
        return car

    def assign_next_car(self) -> Car | None:
        return self.state.promote_next_car()

    def force_spawn(self) -> None:
        """Spawn immediately, ignoring the timer (used when a run starts)."""
        if self.can_spawn():
            self.spawn_car()
        self.assign_next_car()

    def ensure_car(self) -> None:
        """Guarantee a car in the bay or queue, e.g. after loading a save."""
        if self.state.current_car is None and not self.state.car_queue:
            self.force_spawn()
        else:
            self.assign_next_car()

    def queue_info(self) -> QueueInfo:
        interval = self.spawn_interval()
        return QueueInfo(
            current_car=self.state.current_car,
            queue=tuple(self.state.car_queue),
            queue_length=len(self.state.car_queue),
            max_size=self.config.max_size,
            spawn_interval=interval,
            time_to_next_spawn=max(0.0, interval - self.spawn_timer),
        )

    def current_car_info(self) -> CurrentCarInfo | None:
        car = self.state.current_car
        if car is None:
            return None
        return CurrentCarInfo(
            name=car.name,
            rarity=car.rarity.value,
            color=car.color,
            tier=car.tier,
            progress=car.progress_percent(),
            repair_progress=car.repair_progress,
            repair_cost=car.repair_cost,
            value=car.value(self.state.car_value_multiplier()),
            contract_label=car.contract.label if car.contract else None,
        )
