"""Stock content for the garage: cars, tools, Nip upgrades, crew and badges."""

from __future__ import annotations

from garageengine.achievement import AchievementDef
from garageengine.car import CarDef, Rarity
from garageengine.definition import GameConfig, GameDefinition
from garageengine.effect import Effect
from garageengine.milestone import UnlockMilestone
from garageengine.requirement import Req
from garageengine.upgrade import UpgradeDef
from garageengine.worker import WorkerDef


def _cars() -> list[CarDef]:
    return [
        CarDef("hatchback", "Hatchback", 50, 25, Rarity.COMMON, 30, "#94a3b8"),
        CarDef("sedan", "Sedan", 100, 50, Rarity.COMMON, 25, "#60a5fa"),
        CarDef("suv", "SUV", 200, 120, Rarity.COMMON, 20, "#34d399"),
        CarDef("pickup", "Pickup Truck", 300, 180, Rarity.UNCOMMON, 12, "#fb923c"),
        CarDef("sports_car", "Sports Car", 500, 350, Rarity.UNCOMMON, 8, "#f87171"),
        CarDef("vintage", "Vintage Classic", 800, 600, Rarity.RARE, 4, "#fbbf24"),
        CarDef("cyber_car", "Cyber Vehicle", 1500, 1200, Rarity.RARE, 2, "#22d3d3"),
        CarDef("hypercar", "Hypercar", 3000, 2500, Rarity.LEGENDARY, 1, "#a855f7"),
    ]


def _tools() -> list[UpgradeDef]:
    return [
        UpgradeDef(
            "wrench", Effect.click_power(1), name="Better Wrench",
            description="+1 repair/click", base_cost=15, max_level=100, cost_growth=1.12,
        ),
        UpgradeDef(
            "toolbox", Effect.click_power(5), name="Pro Toolbox",
            description="+5 repair/click", base_cost=150, max_level=50, cost_growth=1.14,
        ),
        UpgradeDef(
            "impact_driver", Effect.click_power(15), name="Impact Driver",
            description="+15 repair/click", base_cost=1000, max_level=30, cost_growth=1.15,
        ),
        UpgradeDef(
            "hydraulic_lift", Effect.click_power(50), name="Hydraulic Lift",
            description="+50 repair/click", base_cost=8000, max_level=20, cost_growth=1.16,
        ),
        UpgradeDef(
            "diagnostic_computer", Effect.car_value(0.10), name="Diagnostic PC",
            description="+10% car value", base_cost=5000, max_level=10, cost_growth=1.5,
        ),
        UpgradeDef(
            "neon_sign", Effect.income(0.05), name="Neon Sign",
            description="+5% all income", base_cost=25000, max_level=10, cost_growth=2.0,
        ),
        UpgradeDef(
            "turbo_charger", Effect.click_power(200), name="Turbo Charger",
            description="+200 repair/click", base_cost=100_000, max_level=15,
            cost_growth=1.18,
        ),
        UpgradeDef(
            "cyber_tools", Effect.click_power(1000), name="Cyber Tools",
            description="+1000 repair/click", base_cost=1_000_000, max_level=10,
            cost_growth=1.20,
        ),
    ]


def _nip_upgrades() -> list[UpgradeDef]:
    return [
        UpgradeDef(
            "sharpened_paws", Effect.click_multiplier(0.20), name="Sharpened Paws",
            description="+20% click repair power", base_cost=1, max_level=10,
            cost_growth=1.85,
        ),
        UpgradeDef(
            "tuned_crew", Effect.auto_repair(0.18), name="Tuned Crew",
            description="+18% auto-repair output", base_cost=2, max_level=10,
            cost_growth=1.9,
        ),
        UpgradeDef(
            "loyal_clients", Effect.car_value(0.12), name="Loyal Clients",
            description="+12% car value", base_cost=2, max_level=10, cost_growth=1.95,
        ),
        UpgradeDef(
            "combo_instinct", Effect.combo_max(0.20), name="Combo Instinct",
            description="+0.20 max combo", base_cost=3, max_level=8, cost_growth=2.0,
        ),
        UpgradeDef(
            "rhythm_training", Effect.combo_gain(0.02), name="Rhythm Training",
            description="+0.02 combo per click", base_cost=3, max_level=5,
            cost_growth=2.1,
        ),
        UpgradeDef(
            "quick_dispatch", Effect.spawn_reduction(0.08), name="Quick Dispatch",
            description="8% faster car arrivals", base_cost=3, max_level=8,
            cost_growth=2.05,
        ),
        UpgradeDef(
            "wisdom_manuals", Effect.xp(0.10), name="Wisdom Manuals",
            description="+10% XP gain", base_cost=4, max_level=8, cost_growth=2.2,
        ),
    ]


def _workers() -> list[WorkerDef]:
    return [
        WorkerDef("junior_maid", "Junior Cat-Maid", "A trainee mechanic", 50, 1, 1.15,
                  "Nyaa~ I'll do my best!"),
        WorkerDef("senior_maid", "Senior Cat-Maid", "Experienced mechanic", 500, 5, 1.14,
                  "Leave it to me, Master~"),
        WorkerDef("master_maid", "Master Cat-Maid", "Expert mechanic", 5000, 25, 1.13,
                  "Precision is my specialty."),
        WorkerDef("gearhead", "Gearhead Neko", "Speed specialist", 50_000, 100, 1.12,
                  "Fast and purr-fect!"),
        WorkerDef("robo_maid", "Robo-Maid", "Cybernetic helper", 500_000, 500, 1.11,
                  "BEEP BOOP. REPAIR INITIATED."),
        WorkerDef("legendary_maid", "Legendary Maid", "The ultimate mechanic", 10_000_000,
                  5000, 1.10, "Time to show you true skill."),
    ]


def _achievement(id: str, name: str, description: str, stat: str, value: float) -> AchievementDef:
    return AchievementDef(
        id=id, name=name, description=description, condition=Req.stat(stat, ">=", value)
    )


def _achievements() -> list[AchievementDef]:
    return [
        # Clicks
        _achievement("first_click", "First Click", "Perform your first repair click",
                     "total_clicks", 1),
        _achievement("click_apprentice", "Click Apprentice", "Click 100 times",
                     "total_clicks", 100),
        _achievement("click_master", "Click Master", "Click 1,000 times",
                     "total_clicks", 1000),
        _achievement("click_legend", "Click Legend", "Click 10,000 times",
                     "total_clicks", 10_000),
        # Currency
        _achievement("getting_started", "Getting Started", "Earn $100 total",
                     "total_earned", 100),
        _achievement("money_maker", "Money Maker", "Earn $10,000 total",
                     "total_earned", 10_000),
        _achievement("wealthy_mechanic", "Wealthy Mechanic", "Earn $100,000 total",
                     "total_earned", 100_000),
        _achievement("garage_empire", "Garage Empire", "Earn $1,000,000 total",
                     "total_earned", 1_000_000),
        # Cars
        _achievement("first_repair", "First Repair", "Complete your first car repair",
                     "cars_repaired", 1),
        _achievement("getting_busy", "Getting Busy", "Repair 10 cars", "cars_repaired", 10),
        _achievement("car_collector", "Car Collector", "Repair 100 cars",
                     "cars_repaired", 100),
        _achievement("master_mechanic", "Master Mechanic", "Repair 1,000 cars",
                     "cars_repaired", 1000),
        # Workers
        _achievement("first_hire", "First Hire", "Hire your first cat-maid",
                     "total_workers", 1),
        _achievement("small_team", "Small Team", "Have 5 workers", "total_workers", 5),
        _achievement("full_staff", "Full Staff", "Have 10 workers", "total_workers", 10),
        _achievement("cat_army", "Cat Army", "Have 25 workers", "total_workers", 25),
        # Upgrades
        _achievement("first_upgrade", "First Upgrade", "Purchase your first tool upgrade",
                     "total_upgrades", 1),
        _achievement("tool_enthusiast", "Tool Enthusiast", "Purchase 10 upgrades",
                     "total_upgrades", 10),
        _achievement("fully_equipped", "Fully Equipped", "Purchase 50 upgrades",
                     "total_upgrades", 50),
    ]


def _car_unlocks() -> list[UnlockMilestone]:
    return [
        UnlockMilestone(1, ("hatchback",), "Your first customers"),
        UnlockMilestone(3, ("sedan",), "Family sedans start rolling in"),
        UnlockMilestone(6, ("suv",), "SUVs need bigger bays"),
        UnlockMilestone(10, ("pickup",), "Work trucks trust your shop"),
        UnlockMilestone(15, ("sports_car",), "Speed freaks found you"),
        UnlockMilestone(22, ("vintage",), "Collectors bring their classics"),
        UnlockMilestone(30, ("cyber_car",), "The future pulls in"),
        UnlockMilestone(40, ("hypercar",), "Only the best garage will do"),
    ]


def define_garage(config: GameConfig | None = None) -> GameDefinition:
    """Build the stock garage game definition."""
    return GameDefinition(
        config=config or GameConfig(name="Gato Garage"),
        cars=_cars(),
        upgrades=_tools(),
        nip_upgrades=_nip_upgrades(),
        workers=_workers(),
        achievements=_achievements(),
        car_unlocks=_car_unlocks(),
        starter_car_id="hatchback",
    )
