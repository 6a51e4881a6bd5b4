"""Tests for simulation, report, formatting and export modules."""
import json

import pytest

from garageengine.data import define_garage
from garageengine.definition import GameConfig, PrestigeConfig
from garageengine.export import export_csv, export_json
from garageengine.formatting import (
    format_currency,
    format_duration,
    format_number,
    format_offline,
    format_percent,
    format_rate,
    format_text_report,
    parse_number,
)
from garageengine.metrics import MetricsCollector
from garageengine.offline import estimate_offline_progress
from garageengine.report import build_report
from garageengine.simulation import Simulation
from garageengine.strategy import ClickProfile, GreedyCheapest
from garageengine.terminal import Terminal


def _run(seconds: float = 120, seed: int = 42, **strategy_kwargs):
    strategy = GreedyCheapest(click_profile=ClickProfile(cps=5), **strategy_kwargs)
    sim = Simulation(None, strategy, Terminal.time(seconds), tick_ms=100, seed=seed)
    return sim, sim.run()


def test_tick_mode():
    _, report = _run()
    assert report.outcome == "Terminal condition met"
    assert report.total_time == pytest.approx(120.0)
    assert report.cars_repaired > 0
    assert len(report.purchases) > 0
    assert report.snapshots


def test_same_seed_is_deterministic():
    _, first = _run(seed=7, accept_contracts=True)
    _, second = _run(seed=7, accept_contracts=True)
    assert first.final_currency == second.final_currency
    assert first.lifetime_earnings == second.lifetime_earnings
    assert [(p.time, p.item_id) for p in first.purchases] == [
        (p.time, p.item_id) for p in second.purchases
    ]


def test_simulation_reaches_prestige():
    config = GameConfig(prestige=PrestigeConfig(base_threshold=100))
    strategy = GreedyCheapest(
        click_profile=ClickProfile(cps=5), prestige_mode="first_opportunity"
    )
    sim = Simulation(
        define_garage(config),
        strategy,
        Terminal.any(Terminal.prestiges(1), Terminal.time(600)),
        seed=1,
    )
    report = sim.run()
    assert len(report.prestiges) == 1
    assert report.prestiges[0].reward_amount >= 1
    assert sim.context.prestige_count == 1
    assert sim.runtime.state.total_prestige_earned >= 1


def test_rejects_bad_tick():
    with pytest.raises(ValueError):
        Simulation(None, GreedyCheapest(), Terminal.time(1), tick_ms=0)


def test_build_report_gaps():
    collector = MetricsCollector()
    sim, _ = _run(seconds=1)
    for t, item in ((10.0, "wrench"), (30.0, "wrench"), (35.0, "junior_maid")):
        sim.runtime.time_elapsed = t * 1000
        collector.record_purchase(sim.runtime, "upgrade", item, 10)
    report = build_report(collector, "s", "t", "done", 60.0)
    assert report.purchase_gaps == [10.0, 20.0, 5.0]
    assert report.max_purchase_gap == 20.0
    assert report.purchases_per_minute == pytest.approx(3.0)


def test_text_report():
    _, report = _run(seconds=30)
    text = format_text_report(report)
    assert "Garage Simulation Report" in text
    assert "PURCHASES:" in text
    assert "Strategy: GreedyCheapest (5 CPS)" in text


def test_export_json(tmp_path):
    _, report = _run(seconds=30)
    path = tmp_path / "report.json"
    export_json(report, path)
    data = json.loads(path.read_text())
    assert data["outcome"] == "Terminal condition met"
    assert data["purchase_count"] == len(report.purchases)


def test_export_csv(tmp_path):
    _, report = _run(seconds=30)
    base = tmp_path / "run"
    export_csv(report, base)
    for suffix in ("snapshots", "purchases", "levels"):
        assert (tmp_path / f"run_{suffix}.csv").exists()
    header = (tmp_path / "run_snapshots.csv").read_text().splitlines()[0]
    assert header.startswith("time,currency")


def test_format_number():
    assert format_number(999) == "999"
    assert format_number(1234) == "1.23K"
    assert format_number(1500) == "1.5K"
    assert format_number(1_000_000) == "1M"
    assert format_number(-2500) == "-2.5K"
    assert format_number(float("nan")) == "0"
    assert "e+" in format_number(1e80)


def test_format_helpers():
    assert format_currency(1500) == "$1.5K"
    assert format_rate(2500) == "2.5K/s"
    assert format_duration(5_000) == "5s"
    assert format_duration(65_000) == "1m 5s"
    assert format_duration(3_725_000) == "1h 2m"
    assert format_percent(0.5) == "50%"
    assert parse_number("1.5K") == 1500.0
    assert parse_number("$2M") == 2_000_000.0
    assert parse_number("junk") == 0.0


def test_format_offline():
    assert format_offline(estimate_offline_progress(0, 1)) == "No offline progress."
    text = format_offline(estimate_offline_progress(3_600_000, 10))
    assert "120 cars repaired" in text
    assert "$12K" in text
    assert text.startswith("While you were away (1h 0m)")


def test_plot_simulation(tmp_path):
    matplotlib = pytest.importorskip("matplotlib")
    matplotlib.use("Agg")
    from garageengine.visualization import plot_simulation

    _, report = _run(seconds=30)
    out = tmp_path / "run.png"
    plot_simulation(report, str(out))
    assert out.exists()
