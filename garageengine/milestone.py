from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class UnlockMilestone:
    """Car types that join the spawn pool once the garage reaches *level*."""

    level: int
    car_ids: tuple[str, ...] = field(default_factory=tuple)
    description: str = ""
