"""Explicit publish/subscribe channel shared by every engine component."""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class GameEvent(Enum):
    # Click
    CLICK_PERFORMED = "click:performed"
    CLICK_POWER_CHANGED = "click:power:changed"

    # Currency
    CURRENCY_CHANGED = "currency:changed"
    CURRENCY_EARNED = "currency:earned"
    CURRENCY_SPENT = "currency:spent"
    PRESTIGE_CURRENCY_CHANGED = "prestige:currency:changed"
    PRESTIGE_PERFORMED = "prestige:performed"

    # Cars
    CAR_QUEUED = "car:queued"
    CAR_STARTED = "car:started"
    CAR_PROGRESS = "car:progress"
    CAR_REPAIRED = "car:repaired"

    # Shops and workers
    UPGRADE_PURCHASED = "upgrade:purchased"
    NIP_UPGRADE_PURCHASED = "nip:upgrade:purchased"
    WORKER_HIRED = "worker:hired"
    WORKER_WORKING = "worker:working"

    # Lifecycle
    GAME_SAVED = "game:saved"
    GAME_LOADED = "game:loaded"
    GAME_RESET = "game:reset"
    OFFLINE_EARNINGS = "offline:earnings"

    # Achievements
    ACHIEVEMENT_UNLOCKED = "achievement:unlocked"

    # Progression
    XP_EARNED = "progression:xp:earned"
    LEVEL_UP = "progression:level:up"
    TIER_UP = "progression:tier:up"
    CAR_UNLOCKED = "progression:car:unlocked"

    # Job board
    JOB_BOARD_UPDATED = "job:board:updated"
    JOB_ACCEPTED = "job:accepted"
    JOB_COMPLETED = "job:completed"
    JOB_FAILED = "job:failed"

    # UI
    NOTIFICATION = "ui:notification"


class EventBus:
    """Synchronous pub/sub with deferred re-entrant delivery.

    An emit issued while another event is being dispatched is queued and
    delivered once the in-flight dispatch finishes, so handlers never
    observe a half-applied mutation from the event that triggered them.
    A top-level emit returns only after the queue has drained.
    """

    def __init__(self) -> None:
        self._handlers: dict[GameEvent, list[Handler]] = {}
        self._pending: deque[tuple[GameEvent, Any]] = deque()
        self._dispatching = False

    def on(self, event: GameEvent, handler: Handler) -> Callable[[], None]:
        """Subscribe *handler*. Returns a function that unsubscribes it."""
        self._handlers.setdefault(event, []).append(handler)
        return lambda: self.off(event, handler)

    def once(self, event: GameEvent, handler: Handler) -> None:
        def _wrapper(data: Any) -> None:
            self.off(event, _wrapper)
            handler(data)

        self.on(event, _wrapper)

    def off(self, event: GameEvent, handler: Handler) -> None:
        handlers = self._handlers.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def clear(self, event: GameEvent | None = None) -> None:
        if event is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event, None)

    def listener_count(self, event: GameEvent) -> int:
        return len(self._handlers.get(event, ()))

    def emit(self, event: GameEvent, data: Any = None) -> None:
        self._pending.append((event, data))
        if self._dispatching:
            return

        self._dispatching = True
        try:
            while self._pending:
                current, payload = self._pending.popleft()
                self._dispatch(current, payload)
        finally:
            self._dispatching = False

    def _dispatch(self, event: GameEvent, data: Any) -> None:
        # Copy so handlers may unsubscribe themselves mid-dispatch
        for handler in list(self._handlers.get(event, ())):
            try:
                handler(data)
            except Exception:
                logger.exception("Error in event handler for %r", event.value)
