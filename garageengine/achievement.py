from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from garageengine._types import Clock
from garageengine.events import EventBus, GameEvent
from garageengine.requirement import Requirement

if TYPE_CHECKING:
    from garageengine.state import GameState

logger = logging.getLogger(__name__)

_TRIGGERS = (
    GameEvent.CLICK_PERFORMED,
    GameEvent.CURRENCY_EARNED,
    GameEvent.CAR_REPAIRED,
    GameEvent.WORKER_HIRED,
    GameEvent.UPGRADE_PURCHASED,
)


@dataclass(frozen=True)
class AchievementDef:
    """A one-time badge unlocked when its condition first holds."""

    id: str
    condition: Requirement
    name: str = ""
    description: str = ""
    icon: str = ""


@dataclass(frozen=True)
class AchievementProgress:
    unlocked: int
    total: int
    percent: int


class AchievementTracker:
    """Re-checks achievement conditions whenever a relevant stat moves."""

    def __init__(self, state: GameState, bus: EventBus, clock: Clock) -> None:
        self.state = state
        self.bus = bus
        self.clock = clock
        for event in _TRIGGERS:
            bus.on(event, self._on_progress)

    def _on_progress(self, _data: object) -> None:
        self.check_achievements()

    def check_achievements(self) -> list[AchievementDef]:
        """Unlock every newly satisfied achievement. Returns the new unlocks."""
        unlocked: list[AchievementDef] = []
        for adef in self.state.definition.achievements:
            if self.state.has_achievement(adef.id):
                continue
            if adef.condition.evaluate(self.state):
                self._unlock(adef)
                unlocked.append(adef)
        return unlocked

    def _unlock(self, adef: AchievementDef) -> None:
        now = self.clock()
        self.state.achievements[adef.id] = now
        logger.info("Achievement unlocked: %s", adef.name or adef.id)
        self.bus.emit(
            GameEvent.ACHIEVEMENT_UNLOCKED, {"achievement": adef, "timestamp": now}
        )

    def is_unlocked(self, achievement_id: str) -> bool:
        return self.state.has_achievement(achievement_id)

    def progress(self) -> AchievementProgress:
        total = len(self.state.definition.achievements)
        unlocked = sum(
            1 for a in self.state.definition.achievements if self.state.has_achievement(a.id)
        )
        percent = (unlocked * 100) // total if total else 0
        return AchievementProgress(unlocked=unlocked, total=total, percent=percent)
