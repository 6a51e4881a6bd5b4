from __future__ import annotations

from dataclasses import dataclass, field

from garageengine.metrics import (
    ContractEvent,
    LevelEvent,
    MetricsCollector,
    PrestigeEvent,
    PurchaseEvent,
    StallEvent,
    StateSnapshot,
)


@dataclass
class SimulationReport:
    """Container for simulation results and derived metrics."""

    strategy_description: str = ""
    terminal_description: str = ""
    outcome: str = ""
    total_time: float = 0.0

    # Raw metrics
    snapshots: list[StateSnapshot] = field(default_factory=list)
    purchases: list[PurchaseEvent] = field(default_factory=list)
    level_ups: list[LevelEvent] = field(default_factory=list)
    contracts: list[ContractEvent] = field(default_factory=list)
    prestiges: list[PrestigeEvent] = field(default_factory=list)
    stalls: list[StallEvent] = field(default_factory=list)

    # Derived metrics
    level_times: dict[int, float] = field(default_factory=dict)
    purchase_gaps: list[float] = field(default_factory=list)
    max_purchase_gap: float = 0.0
    mean_purchase_gap: float = 0.0
    purchases_per_minute: float = 0.0
    contracts_completed: int = 0
    contracts_failed: int = 0

    # Final ledger values
    final_currency: int = 0
    final_level: int = 1
    lifetime_earnings: int = 0
    cars_repaired: int = 0

    def level_time(self, level: int) -> float | None:
        """First time the garage reached *level*."""
        return self.level_times.get(level)

    def currency_series(self) -> list[tuple[float, float]]:
        return [(s.time, s.currency) for s in self.snapshots]

    def earnings_series(self) -> list[tuple[float, float]]:
        return [(s.time, s.lifetime_earnings) for s in self.snapshots]

    def rate_series(self) -> list[tuple[float, float]]:
        """(time, auto-repair points per second) series."""
        return [(s.time, s.auto_repair_rate) for s in self.snapshots]

    def level_series(self) -> list[tuple[float, int]]:
        return [(s.time, s.level) for s in self.snapshots]


def build_report(
    collector: MetricsCollector,
    strategy_description: str,
    terminal_description: str,
    outcome: str,
    total_time: float,
    final: StateSnapshot | None = None,
) -> SimulationReport:
    """Build a SimulationReport from collected metrics."""
    # First time each level was reached (prestige resets can repeat levels)
    level_times: dict[int, float] = {}
    for ev in collector.level_ups:
        level_times.setdefault(ev.level, ev.time)

    # Purchase gaps
    purchase_gaps: list[float] = []
    purchase_times = sorted(p.time for p in collector.purchases)
    if purchase_times:
        purchase_gaps.append(purchase_times[0])  # gap from t=0 to first purchase
        for i in range(1, len(purchase_times)):
            purchase_gaps.append(purchase_times[i] - purchase_times[i - 1])

    max_gap = max(purchase_gaps) if purchase_gaps else 0.0
    mean_gap = (sum(purchase_gaps) / len(purchase_gaps)) if purchase_gaps else 0.0
    ppm = (len(collector.purchases) / total_time * 60.0) if total_time > 0 else 0.0

    completed = sum(1 for c in collector.contracts if c.outcome == "completed")

    report = SimulationReport(
        strategy_description=strategy_description,
        terminal_description=terminal_description,
        outcome=outcome,
        total_time=total_time,
        snapshots=collector.snapshots,
        purchases=collector.purchases,
        level_ups=collector.level_ups,
        contracts=collector.contracts,
        prestiges=collector.prestiges,
        stalls=collector.stalls,
        level_times=level_times,
        purchase_gaps=purchase_gaps,
        max_purchase_gap=max_gap,
        mean_purchase_gap=mean_gap,
        purchases_per_minute=ppm,
        contracts_completed=completed,
        contracts_failed=len(collector.contracts) - completed,
    )
    if final is not None:
        report.final_currency = final.currency
        report.final_level = final.level
        report.lifetime_earnings = final.lifetime_earnings
        report.cars_repaired = final.cars_repaired
    return report
