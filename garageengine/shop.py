from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from garageengine.effect import EffectType
from garageengine.events import GameEvent
from garageengine.upgrade import UpgradeDef, UpgradeInfo

if TYPE_CHECKING:
    from garageengine.state import GameState

logger = logging.getLogger(__name__)

_CLICK_EFFECTS = (EffectType.CLICK_POWER, EffectType.CLICK_POWER_MULTIPLIER)


class ShopEngine(ABC):
    """Levelled upgrades priced at floor(base * growth^level)."""

    purchase_event: GameEvent

    def __init__(self, state: GameState) -> None:
        self.state = state

    # ── Hooks ────────────────────────────────────────────────────────

    @abstractmethod
    def catalog(self) -> list[UpgradeDef]: ...

    @abstractmethod
    def levels(self) -> dict[str, int]: ...

    @abstractmethod
    def balance(self) -> float: ...

    @abstractmethod
    def _spend(self, amount: float) -> bool: ...

    @abstractmethod
    def _apply(self, udef: UpgradeDef) -> None: ...

    # ── Shared logic ─────────────────────────────────────────────────

    def get(self, upgrade_id: str) -> UpgradeDef | None:
        return next((u for u in self.catalog() if u.id == upgrade_id), None)

    def level(self, upgrade_id: str) -> int:
        return self.levels().get(upgrade_id, 0)

    def get_cost(self, upgrade_id: str) -> float:
        udef = self.get(upgrade_id)
        if udef is None:
            return math.inf
        return udef.cost(self.level(upgrade_id))

    def is_maxed(self, upgrade_id: str) -> bool:
        udef = self.get(upgrade_id)
        return udef is not None and self.level(upgrade_id) >= udef.max_level

    def can_purchase(self, upgrade_id: str) -> bool:
        if self.get(upgrade_id) is None or self.is_maxed(upgrade_id):
            return False
        return self.balance() >= self.get_cost(upgrade_id)

    def purchase(self, upgrade_id: str) -> bool:
        udef = self.get(upgrade_id)
        if udef is None or self.is_maxed(upgrade_id):
            return False
        cost = self.get_cost(upgrade_id)
        if not self._spend(cost):
            return False

        new_level = self.level(upgrade_id) + 1
        self.levels()[upgrade_id] = new_level
        self._apply(udef)

        logger.debug("Purchased %s level %d for %d", upgrade_id, new_level, cost)
        self.state.bus.emit(
            self.purchase_event,
            {"upgrade_id": upgrade_id, "level": new_level, "cost": cost},
        )
        if udef.effect.type in _CLICK_EFFECTS:
            self.state.bus.emit(GameEvent.CLICK_POWER_CHANGED, self.state.click_power)
        return True

    def upgrade_info(self, upgrade_id: str) -> UpgradeInfo | None:
        udef = self.get(upgrade_id)
        if udef is None:
            return None
        level = self.level(upgrade_id)
        cost = self.get_cost(upgrade_id)
        maxed = level >= udef.max_level
        return UpgradeInfo(
            id=udef.id,
            name=udef.name or udef.id,
            description=udef.description,
            level=level,
            max_level=udef.max_level,
            cost=cost,
            can_afford=self.balance() >= cost,
            can_purchase=not maxed and self.balance() >= cost,
            is_maxed=maxed,
            effect=udef.effect,
        )

    def all_upgrade_info(self) -> list[UpgradeInfo]:
        infos = [self.upgrade_info(u.id) for u in self.catalog()]
        return [i for i in infos if i is not None]


class UpgradeShop(ShopEngine):
    """Tool upgrades bought with cash. Effects apply incrementally."""

    purchase_event = GameEvent.UPGRADE_PURCHASED

    def catalog(self) -> list[UpgradeDef]:
        return self.state.definition.upgrades

    def levels(self) -> dict[str, int]:
        return self.state.upgrades

    def balance(self) -> float:
        return self.state.currency

    def _spend(self, amount: float) -> bool:
        return self.state.spend_currency(amount)

    def _apply(self, udef: UpgradeDef) -> None:
        self.state.apply_upgrade_effect(udef.effect)


class NipShop(ShopEngine):
    """Permanent upgrades bought with Nip. Purchases rebuild every stat."""

    purchase_event = GameEvent.NIP_UPGRADE_PURCHASED

    def catalog(self) -> list[UpgradeDef]:
        return self.state.definition.nip_upgrades

    def levels(self) -> dict[str, int]:
        return self.state.nip_upgrades

    def balance(self) -> float:
        return self.state.prestige_currency

    def _spend(self, amount: float) -> bool:
        return self.state.spend_prestige_currency(amount)

    def _apply(self, udef: UpgradeDef) -> None:
        self.state.recalculate_stats()
