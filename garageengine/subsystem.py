from __future__ import annotations

from abc import ABC, abstractmethod


class Subsystem(ABC):
    """A mechanic advanced once per fixed simulation step."""

    @abstractmethod
    def update(self, delta_ms: float) -> None: ...

    def reset(self) -> None:
        """Drop transient (unsaved) state at the start of a new run."""
