from __future__ import annotations

from dataclasses import dataclass, field

from garageengine.achievement import AchievementDef
from garageengine.car import CarDef
from garageengine.milestone import UnlockMilestone
from garageengine.upgrade import UpgradeDef
from garageengine.worker import WorkerDef


# ── Tuning ───────────────────────────────────────────────────────────


@dataclass
class ComboConfig:
    base_click_power: float = 1.0
    max_combo: float = 2.0
    gain_per_click: float = 0.1
    decay_per_second: float = 0.5
    timeout_ms: float = 1000.0
    payout_factor: float = 0.5
    crit_threshold: float = 1.5


@dataclass
class QueueConfig:
    max_size: int = 5
    base_interval_ms: float = 8000.0
    min_interval_ms: float = 2000.0
    worker_bonus_per_worker: float = 0.05
    worker_bonus_cap: float = 0.75
    spawn_multiplier_floor: float = 0.4


@dataclass
class ContractConfig:
    max_offers: int = 3
    refresh_interval_ms: float = 25000.0
    tier_bonus_per_tier: float = 0.05
    rarity_bonus: dict[str, float] = field(
        default_factory=lambda: {
            "common": 0.2,
            "uncommon": 0.45,
            "rare": 0.8,
            "legendary": 1.2,
        }
    )
    labels: tuple[str, ...] = (
        "Fleet Rush",
        "Express Detail",
        "VIP Priority",
        "Tow Truck Special",
        "Night Shift Rescue",
        "Rush Bay Order",
    )


@dataclass
class ProgressionConfig:
    xp_base: float = 100.0
    xp_growth: float = 1.15
    max_level: int = 100
    levels_per_tier: int = 10
    tier_scaling_step: float = 0.5
    xp_divisor: float = 10.0


@dataclass
class PrestigeConfig:
    base_threshold: float = 1_000_000.0
    multiplier_per_nip: float = 0.05


@dataclass
class OfflineConfig:
    max_ms: float = 8 * 60 * 60 * 1000.0
    efficiency: float = 0.5
    min_ms: float = 60 * 1000.0
    average_car_value: float = 100.0
    average_repair_cost: float = 150.0


@dataclass
class LoopConfig:
    timestep_ms: float = 1000.0 / 60.0
    max_frame_ms: float = 250.0


@dataclass
class SaveConfig:
    version: int = 2
    autosave_interval_ms: float = 30000.0
    filename: str = "garage_save.json"


@dataclass
class GameConfig:
    """Top-level tuning for a garage game."""

    name: str = "Garage"
    combo: ComboConfig = field(default_factory=ComboConfig)
    queue: QueueConfig = field(default_factory=QueueConfig)
    contracts: ContractConfig = field(default_factory=ContractConfig)
    progression: ProgressionConfig = field(default_factory=ProgressionConfig)
    prestige: PrestigeConfig = field(default_factory=PrestigeConfig)
    offline: OfflineConfig = field(default_factory=OfflineConfig)
    loop: LoopConfig = field(default_factory=LoopConfig)
    save: SaveConfig = field(default_factory=SaveConfig)


# ── Content ──────────────────────────────────────────────────────────


@dataclass
class GameDefinition:
    """Complete static definition of a garage game: tuning plus catalogs."""

    config: GameConfig = field(default_factory=GameConfig)
    cars: list[CarDef] = field(default_factory=list)
    upgrades: list[UpgradeDef] = field(default_factory=list)
    nip_upgrades: list[UpgradeDef] = field(default_factory=list)
    workers: list[WorkerDef] = field(default_factory=list)
    achievements: list[AchievementDef] = field(default_factory=list)
    car_unlocks: list[UnlockMilestone] = field(default_factory=list)
    starter_car_id: str = ""

    # Lookup dicts built in __post_init__
    _cars_by_id: dict[str, CarDef] = field(default_factory=dict, init=False, repr=False)
    _upgrades_by_id: dict[str, UpgradeDef] = field(
        default_factory=dict, init=False, repr=False
    )
    _nip_by_id: dict[str, UpgradeDef] = field(default_factory=dict, init=False, repr=False)
    _workers_by_id: dict[str, WorkerDef] = field(
        default_factory=dict, init=False, repr=False
    )
    _achievements_by_id: dict[str, AchievementDef] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self._cars_by_id = {c.id: c for c in self.cars}
        self._upgrades_by_id = {u.id: u for u in self.upgrades}
        self._nip_by_id = {u.id: u for u in self.nip_upgrades}
        self._workers_by_id = {w.id: w for w in self.workers}
        self._achievements_by_id = {a.id: a for a in self.achievements}
        if not self.starter_car_id and self.cars:
            self.starter_car_id = self.cars[0].id

    def get_car(self, id: str) -> CarDef | None:
        return self._cars_by_id.get(id)

    def get_upgrade(self, id: str) -> UpgradeDef | None:
        return self._upgrades_by_id.get(id)

    def get_nip_upgrade(self, id: str) -> UpgradeDef | None:
        return self._nip_by_id.get(id)

    def get_worker(self, id: str) -> WorkerDef | None:
        return self._workers_by_id.get(id)

    def get_achievement(self, id: str) -> AchievementDef | None:
        return self._achievements_by_id.get(id)

    @property
    def starter_car(self) -> CarDef:
        car = self._cars_by_id.get(self.starter_car_id)
        if car is None:
            raise LookupError(f"Starter car {self.starter_car_id!r} is not defined")
        return car

    def cars_unlocked_at(self, level: int) -> list[str]:
        """Every car id whose milestone level is <= *level*, starter first."""
        ids = [self.starter_car_id] if self.starter_car_id else []
        for milestone in sorted(self.car_unlocks, key=lambda m: m.level):
            if milestone.level > level:
                break
            for car_id in milestone.car_ids:
                if car_id not in ids:
                    ids.append(car_id)
        return ids

    def validate(self) -> list[str]:
        """Check for common definition errors. Returns list of error messages."""
        errors: list[str] = []

        for kind, items in (
            ("car", self.cars),
            ("upgrade", self.upgrades),
            ("Nip upgrade", self.nip_upgrades),
            ("worker", self.workers),
            ("achievement", self.achievements),
        ):
            seen: set[str] = set()
            for item in items:
                if item.id in seen:
                    errors.append(f"Duplicate {kind} ID: {item.id!r}")
                seen.add(item.id)

        if self.starter_car_id not in self._cars_by_id:
            errors.append(f"Starter car {self.starter_car_id!r} is not a defined car")
        if not self.workers:
            errors.append("At least one worker type is required")

        for car in self.cars:
            if car.weight <= 0:
                errors.append(f"Car {car.id!r} has non-positive spawn weight {car.weight}")

        for milestone in self.car_unlocks:
            for car_id in milestone.car_ids:
                if car_id not in self._cars_by_id:
                    errors.append(
                        f"Unlock milestone at level {milestone.level} references "
                        f"unknown car {car_id!r}"
                    )

        for kind, upgrades in (("Upgrade", self.upgrades), ("Nip upgrade", self.nip_upgrades)):
            for u in upgrades:
                if u.cost_growth < 1:
                    errors.append(f"{kind} {u.id!r} has cost growth < 1")
                if u.max_level < 1:
                    errors.append(f"{kind} {u.id!r} has max level < 1")

        for w in self.workers:
            if w.cost_growth < 1:
                errors.append(f"Worker {w.id!r} has cost growth < 1")

        return errors
