from __future__ import annotations

import logging
import math
from collections import Counter
from typing import TYPE_CHECKING, Any, Callable

from garageengine._types import Clock, system_clock
from garageengine.car import Car
from garageengine.contract import JobContract
from garageengine.effect import DerivedStats, EffectDef, EffectType
from garageengine.events import EventBus, GameEvent
from garageengine.progression import build_xp_table, level_from_xp, tier_for_level
from garageengine.worker import Worker

if TYPE_CHECKING:
    from garageengine.definition import GameDefinition

logger = logging.getLogger(__name__)

# Named statistics usable in requirements (achievements, terminal conditions)
_STATS: dict[str, Callable[[GameState], float]] = {
    "currency": lambda s: s.currency,
    "total_earned": lambda s: s.total_earned,
    "total_spent": lambda s: s.total_spent,
    "lifetime_earnings": lambda s: s.lifetime_earnings,
    "total_clicks": lambda s: s.total_clicks,
    "cars_repaired": lambda s: s.cars_repaired,
    "total_workers": lambda s: len(s.workers),
    "total_upgrades": lambda s: sum(s.upgrades.values()),
    "garage_level": lambda s: s.garage_level,
    "garage_xp": lambda s: s.garage_xp,
    "contracts_completed": lambda s: s.contracts_completed,
    "prestige_currency": lambda s: s.prestige_currency,
    "total_prestige_earned": lambda s: s.total_prestige_earned,
}


class GameState:
    """The economy ledger: every piece of mutable progress for one save.

    Derived bonuses live in ``stats`` and are always rebuilt from upgrade
    levels by ``recalculate_stats``; they are never persisted.
    """

    def __init__(
        self,
        definition: GameDefinition,
        bus: EventBus | None = None,
        clock: Clock = system_clock,
    ) -> None:
        self.definition = definition
        self.config = definition.config
        self.bus = bus or EventBus()
        self.clock = clock
        prog = self.config.progression
        self.xp_table = build_xp_table(prog.xp_base, prog.xp_growth, prog.max_level)
        self.reset()

    # ── Lifecycle ────────────────────────────────────────────────────

    def reset(self) -> None:
        """Reinitialize every field to new-run defaults. Emits nothing."""
        now = self.clock()

        # Currency
        self.currency: int = 0
        self.total_earned: int = 0
        self.total_spent: int = 0
        self.lifetime_earnings: int = 0

        # Clicks and repairs
        self.total_clicks: int = 0
        self.cars_repaired: int = 0

        # Upgrade levels: tools (cash) and Nip upgrades are separate namespaces
        self.upgrades: dict[str, int] = {}
        self.nip_upgrades: dict[str, int] = {}

        # achievement id -> unlock timestamp
        self.achievements: dict[str, float] = {}

        # Workers
        self.workers: list[Worker] = []
        self.worker_counts: dict[str, int] = {}
        self.auto_repair_rate: float = 0.0

        # Cars
        self.current_car: Car | None = None
        self.car_queue: list[Car] = []
        self.current_car_started_at: float | None = None
        self.last_car_repaired_at: float = 0.0

        # Contracts
        self.job_contracts: list[JobContract] = []
        self.active_job_contract: JobContract | None = None
        self.contracts_completed: int = 0
        self.contracts_failed: int = 0

        # Progression
        self.garage_xp: int = 0
        self.garage_level: int = 1
        self.current_tier: int = 1
        self.unlocked_cars: list[str] = self.definition.cars_unlocked_at(1)

        # Prestige
        self.prestige_currency: int = 0
        self.total_prestige_earned: int = 0

        # Timing
        self.session_start: float = now
        self.total_play_time_ms: float = 0.0
        self.last_save_time: float = now

        self.stats = DerivedStats(base_click_power=self.config.combo.base_click_power)

    # ── Derived values ───────────────────────────────────────────────

    @property
    def click_power(self) -> float:
        return self.stats.click_power

    @property
    def prestige_multiplier(self) -> float:
        return self.stats.prestige_multiplier

    @property
    def xp_multiplier(self) -> float:
        return self.stats.xp_multiplier

    def car_value_multiplier(self) -> float:
        return self.stats.car_value_multiplier

    def calculate_auto_repair_rate(self) -> float:
        """Total worker repair points per second, with the auto-repair multiplier."""
        base = sum(w.repair_rate for w in self.workers)
        self.auto_repair_rate = base * self.stats.auto_repair_multiplier
        return self.auto_repair_rate

    def recalculate_stats(self) -> DerivedStats:
        """Rebuild every derived bonus from scratch. Idempotent."""
        stats = DerivedStats(base_click_power=self.config.combo.base_click_power)
        stats.prestige_multiplier = (
            1.0 + self.config.prestige.multiplier_per_nip * self.total_prestige_earned
        )
        floor = self.config.queue.spawn_multiplier_floor

        for levels, lookup in (
            (self.upgrades, self.definition.get_upgrade),
            (self.nip_upgrades, self.definition.get_nip_upgrade),
        ):
            for upgrade_id, level in levels.items():
                udef = lookup(upgrade_id)
                if udef is None:
                    logger.warning("Ignoring unknown upgrade %r during stat replay", upgrade_id)
                    continue
                for _ in range(level):
                    udef.effect.apply(stats, floor)

        self.stats = stats
        self.calculate_auto_repair_rate()
        return stats

    def apply_upgrade_effect(self, effect: EffectDef) -> None:
        """Apply one level of *effect* incrementally."""
        effect.apply(self.stats, self.config.queue.spawn_multiplier_floor)
        if effect.type is EffectType.AUTO_REPAIR_MULTIPLIER:
            self.calculate_auto_repair_rate()

    # ── Currency ─────────────────────────────────────────────────────

    def add_currency(self, amount: float) -> int:
        """Credit *amount* after income and prestige multipliers. Returns the credit."""
        adjusted = math.floor(
            amount * self.stats.income_multiplier * self.stats.prestige_multiplier
        )
        self.currency += adjusted
        self.total_earned += adjusted
        self.lifetime_earnings += adjusted
        self.bus.emit(GameEvent.CURRENCY_CHANGED, self.currency)
        self.bus.emit(GameEvent.CURRENCY_EARNED, adjusted)
        return adjusted

    def spend_currency(self, amount: float) -> bool:
        if amount < 0 or self.currency < amount:
            return False
        self.currency -= int(amount)
        self.total_spent += int(amount)
        self.bus.emit(GameEvent.CURRENCY_CHANGED, self.currency)
        self.bus.emit(GameEvent.CURRENCY_SPENT, int(amount))
        return True

    def can_afford(self, amount: float) -> bool:
        return self.currency >= amount

    def spend_prestige_currency(self, amount: float) -> bool:
        if amount < 0 or self.prestige_currency < amount:
            return False
        self.prestige_currency -= int(amount)
        self.bus.emit(GameEvent.PRESTIGE_CURRENCY_CHANGED, self.prestige_currency)
        return True

    def can_afford_prestige(self, amount: float) -> bool:
        return self.prestige_currency >= amount

    # ── Queries ──────────────────────────────────────────────────────

    def upgrade_level(self, upgrade_id: str) -> int:
        return self.upgrades.get(upgrade_id, 0)

    def nip_upgrade_level(self, upgrade_id: str) -> int:
        return self.nip_upgrades.get(upgrade_id, 0)

    def worker_count(self, worker_id: str) -> int:
        return self.worker_counts.get(worker_id, 0)

    def has_achievement(self, achievement_id: str) -> bool:
        return achievement_id in self.achievements

    def session_time(self) -> float:
        return self.clock() - self.session_start

    def stat(self, name: str) -> float:
        """Look up a named statistic for requirement checks."""
        getter = _STATS.get(name)
        if getter is None:
            raise ValueError(f"Unknown stat: {name!r}. Expected one of {sorted(_STATS)}")
        return getter(self)

    # ── Car slots ────────────────────────────────────────────────────

    def promote_next_car(self) -> Car | None:
        """Move the front of the queue into the repair bay if the bay is empty."""
        if self.current_car is not None or not self.car_queue:
            return None
        car = self.car_queue.pop(0)
        self.current_car = car
        self.current_car_started_at = self.clock()
        self.bus.emit(GameEvent.CAR_STARTED, car)
        return car

    def cars_for_contract(self, contract_id: str) -> list[Car]:
        cars = [c for c in self.car_queue if c.belongs_to(contract_id)]
        if self.current_car is not None and self.current_car.belongs_to(contract_id):
            cars.insert(0, self.current_car)
        return cars

    # ── Persistence ──────────────────────────────────────────────────

    def serialize(self) -> dict[str, Any]:
        """Plain-data snapshot. Derived bonuses are not included."""
        now = self.clock()
        return {
            # Currency
            "currency": self.currency,
            "total_earned": self.total_earned,
            "total_spent": self.total_spent,
            "lifetime_earnings": self.lifetime_earnings,
            # Clicks and repairs
            "total_clicks": self.total_clicks,
            "cars_repaired": self.cars_repaired,
            # Upgrades and achievements
            "upgrades": dict(self.upgrades),
            "nip_upgrades": dict(self.nip_upgrades),
            "achievements": dict(self.achievements),
            # Workers
            "workers": [w.serialize() for w in self.workers],
            "worker_counts": dict(self.worker_counts),
            # Cars
            "current_car": self.current_car.serialize() if self.current_car else None,
            "car_queue": [c.serialize() for c in self.car_queue],
            # Contracts
            "job_contracts": [c.to_dict() for c in self.job_contracts],
            "active_job_contract": (
                self.active_job_contract.to_dict() if self.active_job_contract else None
            ),
            "contracts_completed": self.contracts_completed,
            "contracts_failed": self.contracts_failed,
            # Progression
            "garage_xp": self.garage_xp,
            "garage_level": self.garage_level,
            "current_tier": self.current_tier,
            "unlocked_cars": list(self.unlocked_cars),
            # Prestige
            "prestige_currency": self.prestige_currency,
            "total_prestige_earned": self.total_prestige_earned,
            # Timing
            "last_save_time": now,
            "total_play_time_ms": self.total_play_time_ms + (now - self.session_start),
        }

    def deserialize(self, data: dict[str, Any]) -> None:
        """Load a snapshot produced by ``serialize`` (after any migrations).

        Level and tier are re-derived from XP, unknown entity ids are
        substituted or dropped, and derived bonuses are recomputed.
        """
        self.reset()
        now = self.clock()
        definition = self.definition

        # Currency
        self.currency = max(0, int(data.get("currency", 0)))
        self.total_earned = max(0, int(data.get("total_earned", 0)))
        self.total_spent = max(0, int(data.get("total_spent", 0)))
        self.lifetime_earnings = max(
            self.total_earned, int(data.get("lifetime_earnings", self.total_earned))
        )

        # Clicks and repairs
        self.total_clicks = int(data.get("total_clicks", 0))
        self.cars_repaired = int(data.get("cars_repaired", 0))

        # Upgrades
        self.upgrades = self._known_levels(data.get("upgrades") or {}, definition.get_upgrade)
        self.nip_upgrades = self._known_levels(
            data.get("nip_upgrades") or {}, definition.get_nip_upgrade
        )
        self.achievements = {
            str(k): float(v) for k, v in (data.get("achievements") or {}).items()
        }

        # Workers; the count cache is rebuilt rather than trusted
        self.workers = [
            Worker.deserialize(w, definition, now) for w in data.get("workers") or []
        ]
        self.worker_counts = dict(Counter(w.id for w in self.workers))

        # Cars
        current = data.get("current_car")
        self.current_car = Car.deserialize(current, definition, now) if current else None
        self.car_queue = [Car.deserialize(c, definition, now) for c in data.get("car_queue") or []]
        del self.car_queue[self.config.queue.max_size:]
        self.current_car_started_at = now if self.current_car else None

        # Contracts; malformed entries are dropped and the board refills
        offers = (self._load_contract(c) for c in data.get("job_contracts") or [])
        self.job_contracts = [c for c in offers if c is not None][
            : self.config.contracts.max_offers
        ]
        self.contracts_completed = int(data.get("contracts_completed", 0))
        self.contracts_failed = int(data.get("contracts_failed", 0))
        active = data.get("active_job_contract")
        self.active_job_contract = self._load_contract(active) if active else None
        if active and self.active_job_contract is None:
            # A dropped active contract counts as failed and its cars lose the bonus
            self.contracts_failed += 1
            for car in [self.current_car, *self.car_queue]:
                if car is not None and car.contract is not None:
                    car.contract.expired = True

        # Progression
        self.garage_xp = max(0, int(data.get("garage_xp", 0)))
        self.garage_level = level_from_xp(self.xp_table, self.garage_xp)
        self.current_tier = tier_for_level(
            self.garage_level, self.config.progression.levels_per_tier
        )
        unlocked = [
            cid for cid in data.get("unlocked_cars") or [] if definition.get_car(cid)
        ]
        for cid in definition.cars_unlocked_at(self.garage_level):
            if cid not in unlocked:
                unlocked.append(cid)
        self.unlocked_cars = unlocked

        # Prestige
        self.prestige_currency = max(0, int(data.get("prestige_currency", 0)))
        self.total_prestige_earned = max(
            self.prestige_currency, int(data.get("total_prestige_earned", 0))
        )

        # Timing
        self.last_save_time = float(data.get("last_save_time", now))
        self.total_play_time_ms = float(data.get("total_play_time_ms", 0.0))
        self.session_start = now

        self.recalculate_stats()

    @staticmethod
    def _load_contract(raw: Any) -> JobContract | None:
        if not isinstance(raw, dict) or not raw.get("id"):
            logger.warning("Dropping job contract without an id from save data: %r", raw)
            return None
        try:
            return JobContract.from_dict(raw)
        except (TypeError, ValueError) as exc:
            logger.warning("Dropping malformed job contract %r: %s", raw.get("id"), exc)
            return None

    @staticmethod
    def _known_levels(
        raw: dict[str, Any], lookup: Callable[[str], object | None]
    ) -> dict[str, int]:
        levels: dict[str, int] = {}
        for upgrade_id, level in raw.items():
            if lookup(upgrade_id) is None:
                logger.warning("Dropping unknown upgrade %r from save data", upgrade_id)
                continue
            levels[upgrade_id] = max(0, int(level))
        return levels
