from __future__ import annotations

import operator
import time
from typing import Callable

# Milliseconds since an arbitrary epoch.
Clock = Callable[[], float]

_OPS: dict[str, Callable[[float, float], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
    "==": operator.eq,
    "!=": operator.ne,
}


def system_clock() -> float:
    """Wall-clock time in milliseconds."""
    return time.time() * 1000.0


class ManualClock:
    """Clock that only moves when told to. Used for tests and headless runs."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self.now = start_ms

    def __call__(self) -> float:
        return self.now

    def advance(self, delta_ms: float) -> float:
        self.now += delta_ms
        return self.now

    def set(self, now_ms: float) -> None:
        self.now = now_ms


def compare(left: float, op: str, right: float) -> bool:
    """Compare two values using a string operator."""
    fn = _OPS.get(op)
    if fn is None:
        raise ValueError(f"Unknown operator: {op!r}. Expected one of {list(_OPS)}")
    return fn(left, right)
