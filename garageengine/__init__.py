# garageengine: idle car-repair garage engine & balance simulation

from garageengine._types import Clock, ManualClock, system_clock, compare
from garageengine.events import EventBus, GameEvent
from garageengine.requirement import Requirement, Req
from garageengine.cost_scaling import CostScaling
from garageengine.effect import DerivedStats, Effect, EffectDef, EffectType
from garageengine.car import Car, CarDef, Rarity
from garageengine.worker import Worker, WorkerDef
from garageengine.upgrade import UpgradeDef, UpgradeInfo
from garageengine.contract import ContractActionResult, JobContract
from garageengine.milestone import UnlockMilestone
from garageengine.achievement import AchievementDef, AchievementTracker
from garageengine.definition import GameConfig, GameDefinition
from garageengine.data import define_garage
from garageengine.state import GameState
from garageengine.offline import OfflineProgress, estimate_offline_progress
from garageengine.prestige import PrestigeResult
from garageengine.runtime import GameRuntime
from garageengine.save import SaveError, SaveManager
from garageengine.subsystem import Subsystem
from garageengine.terminal import TerminalCondition, Terminal, SimulationContext
from garageengine.strategy import (
    Strategy,
    ClickProfile,
    GreedyCheapest,
    PriorityList,
    CustomStrategy,
)
from garageengine.metrics import MetricsCollector
from garageengine.simulation import Simulation
from garageengine.report import SimulationReport, build_report
from garageengine.formatting import format_number, format_text_report

__all__ = [
    # Types
    "Clock",
    "ManualClock",
    "system_clock",
    "compare",
    # Events
    "EventBus",
    "GameEvent",
    # Requirements
    "Requirement",
    "Req",
    # Cost
    "CostScaling",
    # Effects
    "DerivedStats",
    "Effect",
    "EffectDef",
    "EffectType",
    # Data model
    "Car",
    "CarDef",
    "Rarity",
    "Worker",
    "WorkerDef",
    "UpgradeDef",
    "UpgradeInfo",
    "ContractActionResult",
    "JobContract",
    "UnlockMilestone",
    "AchievementDef",
    "AchievementTracker",
    # Definition
    "GameConfig",
    "GameDefinition",
    "define_garage",
    # State
    "GameState",
    # Offline
    "OfflineProgress",
    "estimate_offline_progress",
    # Runtime
    "PrestigeResult",
    "GameRuntime",
    "Subsystem",
    # Persistence
    "SaveError",
    "SaveManager",
    # Terminal
    "TerminalCondition",
    "Terminal",
    "SimulationContext",
    # Strategy
    "Strategy",
    "ClickProfile",
    "GreedyCheapest",
    "PriorityList",
    "CustomStrategy",
    # Simulation
    "MetricsCollector",
    "Simulation",
    "SimulationReport",
    "build_report",
    # Formatting
    "format_number",
    "format_text_report",
]
