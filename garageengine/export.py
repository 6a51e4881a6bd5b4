from __future__ import annotations

import csv
import json
from pathlib import Path

from garageengine.report import SimulationReport


def export_csv(report: SimulationReport, path: str | Path) -> None:
    """Export simulation data as CSV files.

    Creates three files:
      - {path}_snapshots.csv
      - {path}_purchases.csv
      - {path}_levels.csv
    """
    base = str(path)

    with open(f"{base}_snapshots.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "time", "currency", "total_earned", "lifetime_earnings", "level",
            "xp", "click_power", "auto_repair_rate", "cars_repaired", "combo",
        ])
        for s in report.snapshots:
            writer.writerow([
                s.time, s.currency, s.total_earned, s.lifetime_earnings, s.level,
                s.xp, s.click_power, s.auto_repair_rate, s.cars_repaired, s.combo,
            ])

    with open(f"{base}_purchases.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["time", "kind", "item_id", "cost", "currency_after"])
        for p in report.purchases:
            writer.writerow([p.time, p.kind, p.item_id, p.cost, p.currency_after])

    with open(f"{base}_levels.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["time", "level", "tier"])
        for ev in report.level_ups:
            writer.writerow([ev.time, ev.level, ev.tier])


def export_json(report: SimulationReport, path: str | Path) -> None:
    """Export the full simulation report as JSON."""
    data = {
        "strategy": report.strategy_description,
        "terminal": report.terminal_description,
        "outcome": report.outcome,
        "total_time": report.total_time,
        "final": {
            "currency": report.final_currency,
            "level": report.final_level,
            "lifetime_earnings": report.lifetime_earnings,
            "cars_repaired": report.cars_repaired,
        },
        "level_times": {str(k): v for k, v in report.level_times.items()},
        "purchase_count": len(report.purchases),
        "purchases_per_minute": report.purchases_per_minute,
        "max_purchase_gap": report.max_purchase_gap,
        "mean_purchase_gap": report.mean_purchase_gap,
        "contracts_completed": report.contracts_completed,
        "contracts_failed": report.contracts_failed,
        "purchases": [
            {"time": p.time, "kind": p.kind, "item_id": p.item_id, "cost": p.cost}
            for p in report.purchases
        ],
        "prestiges": [
            {"time": p.time, "reward": p.reward_amount, "run_duration": p.run_duration}
            for p in report.prestiges
        ],
    }
    with open(str(path), "w") as f:
        json.dump(data, f, indent=2)
