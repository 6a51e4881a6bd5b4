from __future__ import annotations

import logging
from typing import Callable

from garageengine.definition import LoopConfig

logger = logging.getLogger(__name__)


class FixedTimestepLoop:
    """Accumulates host frame time and steps the game in constant slices.

    The host calls ``frame(now)`` from its own frame or timer callback.
    Each frame's contribution is capped at ``max_frame_ms``; the leftover
    fraction of a step stays in the accumulator and is exposed as
    ``interpolation`` for smooth rendering.
    """

    def __init__(
        self,
        update: Callable[[float], None],
        config: LoopConfig | None = None,
        render: Callable[[float], None] | None = None,
    ) -> None:
        self.update = update
        self.render = render
        cfg = config or LoopConfig()
        self.timestep = cfg.timestep_ms
        self.max_frame_ms = cfg.max_frame_ms
        self.running = False
        self.paused = False
        self.last_time = 0.0
        self.accumulator = 0.0
        self.steps = 0

    def start(self, now: float) -> None:
        if self.running:
            return
        self.running = True
        self.paused = False
        self.last_time = now
        self.accumulator = 0.0
        logger.debug("Loop started at %.0f", now)

    def stop(self) -> None:
        self.running = False

    def pause(self) -> None:
        self.paused = True

    def resume(self, now: float) -> None:
        if self.paused:
            self.paused = False
            self.last_time = now
            self.accumulator = 0.0

    def toggle_pause(self, now: float) -> bool:
        if self.paused:
            self.resume(now)
        else:
            self.pause()
        return self.paused

    @property
    def interpolation(self) -> float:
        """How far the accumulator is into the next step, in [0, 1)."""
        return self.accumulator / self.timestep

    def frame(self, now: float) -> int:
        """Process one host frame ending at *now*. Returns steps executed."""
        if not self.running:
            return 0
        frame_ms = now - self.last_time
        self.last_time = now
        if self.paused:
            if self.render is not None:
                self.render(0.0)
            return 0
        return self.advance(frame_ms)

    def advance(self, frame_ms: float) -> int:
        """Feed *frame_ms* of elapsed time and run every whole step it covers."""
        self.accumulator += min(max(frame_ms, 0.0), self.max_frame_ms)
        steps = 0
        while self.accumulator >= self.timestep:
            self.update(self.timestep)
            self.accumulator -= self.timestep
            steps += 1
        self.steps += steps
        if self.render is not None:
            self.render(self.interpolation)
        return steps
