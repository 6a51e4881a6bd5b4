from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

from garageengine._types import compare

if TYPE_CHECKING:
    from garageengine.state import GameState


class Requirement(ABC):
    """Base class for all requirements: boolean conditions on the garage ledger."""

    @abstractmethod
    def evaluate(self, state: GameState) -> bool: ...

    def __and__(self, other: Requirement) -> Requirement:
        return _AllRequirement([self, other])

    def __or__(self, other: Requirement) -> Requirement:
        return _AnyRequirement([self, other])


# ── Private implementations ──────────────────────────────────────────


class _StatRequirement(Requirement):
    def __init__(self, stat: str, op: str, threshold: float) -> None:
        self.stat = stat
        self.op = op
        self.threshold = threshold

    def evaluate(self, state: GameState) -> bool:
        return compare(state.stat(self.stat), self.op, self.threshold)


class _LevelRequirement(Requirement):
    def __init__(self, op: str, level: int) -> None:
        self.op = op
        self.level = level

    def evaluate(self, state: GameState) -> bool:
        return compare(state.garage_level, self.op, self.level)


class _AchievementRequirement(Requirement):
    def __init__(self, achievement_id: str) -> None:
        self.achievement_id = achievement_id

    def evaluate(self, state: GameState) -> bool:
        return state.has_achievement(self.achievement_id)


class _AllRequirement(Requirement):
    def __init__(self, reqs: list[Requirement]) -> None:
        self.reqs = reqs

    def evaluate(self, state: GameState) -> bool:
        return all(r.evaluate(state) for r in self.reqs)


class _AnyRequirement(Requirement):
    def __init__(self, reqs: list[Requirement]) -> None:
        self.reqs = reqs

    def evaluate(self, state: GameState) -> bool:
        return any(r.evaluate(state) for r in self.reqs)


class _CustomRequirement(Requirement):
    def __init__(self, fn: Callable[[GameState], bool]) -> None:
        self.fn = fn

    def evaluate(self, state: GameState) -> bool:
        return self.fn(state)


# ── Public factory ───────────────────────────────────────────────────


class Req:
    """Factory for built-in requirement types."""

    @staticmethod
    def stat(name: str, op: str, threshold: float) -> Requirement:
        """Compare a named ledger statistic (see ``GameState.stat``)."""
        return _StatRequirement(name, op, threshold)

    @staticmethod
    def level(op: str, level: int) -> Requirement:
        return _LevelRequirement(op, level)

    @staticmethod
    def achievement(achievement_id: str) -> Requirement:
        return _AchievementRequirement(achievement_id)

    @staticmethod
    def all(*reqs: Requirement) -> Requirement:
        return _AllRequirement(list(reqs))

    @staticmethod
    def any(*reqs: Requirement) -> Requirement:
        return _AnyRequirement(list(reqs))

    @staticmethod
    def custom(fn: Callable[[GameState], bool]) -> Requirement:
        return _CustomRequirement(fn)
