from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from garageengine.events import GameEvent

if TYPE_CHECKING:
    from garageengine.state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrestigeResult:
    """Outcome of a prestige attempt."""

    success: bool
    reward_amount: int = 0
    prestige_currency: int = 0
    total_prestige_earned: int = 0
    preserved_nip_upgrades: dict[str, int] = field(default_factory=dict)
    reason: str = ""


class PrestigeEngine:
    """Converts lifetime earnings into Nip and performs the ascension reset."""

    def __init__(self, state: GameState) -> None:
        self.state = state
        self.config = state.config.prestige

    def calculate_claimable_nip(self) -> int:
        lifetime = self.state.lifetime_earnings
        base = self.config.base_threshold
        if lifetime < base:
            return 0
        potential = math.floor(math.sqrt(lifetime / base))
        return max(0, potential - self.state.total_prestige_earned)

    def can_prestige(self) -> bool:
        return self.calculate_claimable_nip() > 0

    def prestige(self) -> PrestigeResult:
        state = self.state
        claimable = self.calculate_claimable_nip()
        if claimable <= 0:
            return PrestigeResult(success=False, reason="Nothing to claim yet")

        # Everything that survives the reset
        prestige_currency = state.prestige_currency + claimable
        total_earned = state.total_prestige_earned + claimable
        lifetime = state.lifetime_earnings
        nip_upgrades = dict(state.nip_upgrades)

        state.reset()
        state.prestige_currency = prestige_currency
        state.total_prestige_earned = total_earned
        state.nip_upgrades = nip_upgrades
        state.lifetime_earnings = lifetime
        state.recalculate_stats()

        logger.info(
            "Prestige: +%d Nip (%d held, %d lifetime)", claimable, prestige_currency, total_earned
        )
        state.bus.emit(GameEvent.PRESTIGE_CURRENCY_CHANGED, prestige_currency)
        state.bus.emit(
            GameEvent.PRESTIGE_PERFORMED,
            {"claimed": claimable, "prestige_currency": prestige_currency},
        )
        state.bus.emit(
            GameEvent.NOTIFICATION,
            {"message": f"ASCENDED! +{claimable} Gato Nip", "type": "prestige"},
        )
        return PrestigeResult(
            success=True,
            reward_amount=claimable,
            prestige_currency=prestige_currency,
            total_prestige_earned=total_earned,
            preserved_nip_upgrades=dict(nip_upgrades),
        )

    def next_nip_cost(self) -> float:
        """Additional lifetime earnings needed for one more claimable Nip."""
        state = self.state
        next_total = state.total_prestige_earned + self.calculate_claimable_nip() + 1
        return next_total * next_total * self.config.base_threshold - state.lifetime_earnings
