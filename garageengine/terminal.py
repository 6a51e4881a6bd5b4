from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from garageengine._types import compare
from garageengine.requirement import Requirement

if TYPE_CHECKING:
    from garageengine.runtime import GameRuntime


@dataclass
class SimulationContext:
    """Extra context available to terminal conditions during simulation."""

    last_purchase_time: float = 0.0
    total_purchases: int = 0
    prestige_count: int = 0


def _seconds(runtime: GameRuntime) -> float:
    return runtime.time_elapsed / 1000.0


class TerminalCondition(ABC):
    """Base class for simulation stopping conditions."""

    @abstractmethod
    def is_met(self, runtime: GameRuntime, context: SimulationContext | None = None) -> bool: ...

    @abstractmethod
    def describe(self) -> str: ...


class _TimeTerminal(TerminalCondition):
    def __init__(self, seconds: float) -> None:
        self.seconds = seconds

    def is_met(self, runtime: GameRuntime, context: SimulationContext | None = None) -> bool:
        return _seconds(runtime) >= self.seconds

    def describe(self) -> str:
        return f"time({self.seconds:g})"


class _LevelTerminal(TerminalCondition):
    def __init__(self, level: int) -> None:
        self.level = level

    def is_met(self, runtime: GameRuntime, context: SimulationContext | None = None) -> bool:
        return runtime.state.garage_level >= self.level

    def describe(self) -> str:
        return f"level({self.level})"


class _StatTerminal(TerminalCondition):
    def __init__(self, stat: str, op: str, threshold: float) -> None:
        self.stat = stat
        self.op = op
        self.threshold = threshold

    def is_met(self, runtime: GameRuntime, context: SimulationContext | None = None) -> bool:
        return compare(runtime.state.stat(self.stat), self.op, self.threshold)

    def describe(self) -> str:
        return f'stat("{self.stat}", "{self.op}", {self.threshold:g})'


class _RequirementTerminal(TerminalCondition):
    def __init__(self, requirement: Requirement, label: str) -> None:
        self.requirement = requirement
        self.label = label

    def is_met(self, runtime: GameRuntime, context: SimulationContext | None = None) -> bool:
        return self.requirement.evaluate(runtime.state)

    def describe(self) -> str:
        return self.label


class _PrestigeTerminal(TerminalCondition):
    def __init__(self, count: int) -> None:
        self.count = count

    def is_met(self, runtime: GameRuntime, context: SimulationContext | None = None) -> bool:
        return context is not None and context.prestige_count >= self.count

    def describe(self) -> str:
        return f"prestiges({self.count})"


class _StallTerminal(TerminalCondition):
    def __init__(self, max_idle_seconds: float) -> None:
        self.max_idle_seconds = max_idle_seconds

    def is_met(self, runtime: GameRuntime, context: SimulationContext | None = None) -> bool:
        if context is None:
            return False
        return _seconds(runtime) - context.last_purchase_time >= self.max_idle_seconds

    def describe(self) -> str:
        return f"stall({self.max_idle_seconds:g})"


class _AnyTerminal(TerminalCondition):
    def __init__(self, conditions: list[TerminalCondition]) -> None:
        self.conditions = conditions

    def is_met(self, runtime: GameRuntime, context: SimulationContext | None = None) -> bool:
        return any(c.is_met(runtime, context) for c in self.conditions)

    def describe(self) -> str:
        return " OR ".join(c.describe() for c in self.conditions)


class _AllTerminal(TerminalCondition):
    def __init__(self, conditions: list[TerminalCondition]) -> None:
        self.conditions = conditions

    def is_met(self, runtime: GameRuntime, context: SimulationContext | None = None) -> bool:
        return all(c.is_met(runtime, context) for c in self.conditions)

    def describe(self) -> str:
        return " AND ".join(c.describe() for c in self.conditions)


class Terminal:
    """Factory for built-in terminal conditions."""

    @staticmethod
    def time(seconds: float) -> TerminalCondition:
        return _TimeTerminal(seconds)

    @staticmethod
    def level(level: int) -> TerminalCondition:
        return _LevelTerminal(level)

    @staticmethod
    def currency(op: str, threshold: float) -> TerminalCondition:
        return _StatTerminal("currency", op, threshold)

    @staticmethod
    def stat(name: str, op: str, threshold: float) -> TerminalCondition:
        return _StatTerminal(name, op, threshold)

    @staticmethod
    def requirement(req: Requirement, label: str = "requirement") -> TerminalCondition:
        return _RequirementTerminal(req, label)

    @staticmethod
    def prestiges(count: int = 1) -> TerminalCondition:
        return _PrestigeTerminal(count)

    @staticmethod
    def stall(max_idle_seconds: float = 600) -> TerminalCondition:
        return _StallTerminal(max_idle_seconds)

    @staticmethod
    def any(*conditions: TerminalCondition) -> TerminalCondition:
        return _AnyTerminal(list(conditions))

    @staticmethod
    def all(*conditions: TerminalCondition) -> TerminalCondition:
        return _AllTerminal(list(conditions))
