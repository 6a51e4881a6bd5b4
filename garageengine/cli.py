from __future__ import annotations

import argparse
import importlib
import logging
import sys

from garageengine.definition import GameDefinition
from garageengine.formatting import format_offline, format_text_report
from garageengine.offline import estimate_offline_progress
from garageengine.simulation import Simulation
from garageengine.strategy import ClickProfile, GreedyCheapest, Strategy
from garageengine.terminal import Terminal, TerminalCondition


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="garageengine",
        description="Garage idle game engine: balance simulation CLI",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    sim = sub.add_parser("simulate", help="Run a headless simulation")
    sim.add_argument(
        "--game",
        default=None,
        help="Python module with define_garage() (default: the stock garage)",
    )
    sim.add_argument("--cps", type=float, default=5.0, help="Clicks per second")
    sim.add_argument("--seconds", type=float, default=3600, help="Simulated time (s)")
    sim.add_argument("--tick-ms", type=float, default=100.0, help="Milliseconds per tick")
    sim.add_argument("--seed", type=int, default=None, help="Random seed")
    sim.add_argument("--contracts", action="store_true", help="Accept job contracts")
    sim.add_argument("--prestige", action="store_true", help="Prestige when Nip is claimable")
    sim.add_argument("--export-csv", default=None, help="CSV export path prefix")
    sim.add_argument("--export-json", default=None, help="JSON export path")
    sim.add_argument("--plot", default=None, help="Plot output path (PNG)")
    sim.add_argument(
        "--monte-carlo",
        type=int,
        default=None,
        help="Number of Monte Carlo runs",
    )

    off = sub.add_parser("offline", help="Estimate offline progress")
    off.add_argument("elapsed", type=float, help="Time away (s)")
    off.add_argument("--rate", type=float, required=True, help="Auto-repair points per second")
    off.add_argument("--car-value-multiplier", type=float, default=1.0)
    off.add_argument("--income-multiplier", type=float, default=1.0)

    return parser


def load_game(module_path: str | None) -> GameDefinition:
    """Import module and call define_garage(). None means the stock game."""
    if module_path is None:
        from garageengine.data import define_garage

        return define_garage()
    mod = importlib.import_module(module_path)
    if not hasattr(mod, "define_garage"):
        print(f"Error: module {module_path!r} has no define_garage() function")
        sys.exit(1)
    return mod.define_garage()


def build_strategy(args: argparse.Namespace) -> Strategy:
    click_profile = ClickProfile(cps=args.cps) if args.cps > 0 else None
    return GreedyCheapest(
        click_profile=click_profile,
        accept_contracts=args.contracts,
        prestige_mode="first_opportunity" if args.prestige else "never",
    )


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "offline":
        progress = estimate_offline_progress(
            args.elapsed * 1000.0,
            args.rate,
            car_value_multiplier=args.car_value_multiplier,
            income_multiplier=args.income_multiplier,
        )
        print(format_offline(progress))
        return

    if args.command == "simulate":
        definition = load_game(args.game)
        terminal: TerminalCondition = Terminal.time(args.seconds)

        if args.monte_carlo and args.monte_carlo > 1:
            _run_monte_carlo(definition, terminal, args)
            return

        sim = Simulation(
            definition=definition,
            strategy=build_strategy(args),
            terminal=terminal,
            tick_ms=args.tick_ms,
            seed=args.seed,
        )
        report = sim.run()
        print(format_text_report(report))

        if args.export_csv:
            from garageengine.export import export_csv
            export_csv(report, args.export_csv)
            print(f"\nCSV exported to {args.export_csv}_*.csv")

        if args.export_json:
            from garageengine.export import export_json
            export_json(report, args.export_json)
            print(f"\nJSON exported to {args.export_json}")

        if args.plot:
            from garageengine.visualization import plot_simulation
            plot_simulation(report, args.plot)
            print(f"\nPlot saved to {args.plot}")


def _run_monte_carlo(
    definition: GameDefinition,
    terminal: TerminalCondition,
    args: argparse.Namespace,
) -> None:
    """Run several seeded simulations and report aggregate results."""
    n = args.monte_carlo
    level_times: dict[int, list[float]] = {}
    final_levels: list[int] = []
    earnings: list[int] = []

    for i in range(n):
        sim = Simulation(
            definition=definition,
            strategy=build_strategy(args),
            terminal=terminal,
            tick_ms=args.tick_ms,
            seed=(args.seed + i) if args.seed is not None else None,
        )
        report = sim.run()
        final_levels.append(report.final_level)
        earnings.append(report.lifetime_earnings)
        for level, t in report.level_times.items():
            level_times.setdefault(level, []).append(t)

    print(f"Monte Carlo: {n} runs")
    print(f"Final level: mean={sum(final_levels)/n:.1f}, "
          f"min={min(final_levels)}, max={max(final_levels)}")
    print(f"Lifetime earnings: mean={sum(earnings)/n:.0f}, "
          f"min={min(earnings)}, max={max(earnings)}")
    if level_times:
        print("Level times (mean / min / max, runs reaching it):")
        for level, times in sorted(level_times.items()):
            mean = sum(times) / len(times)
            print(f"  {level}: {mean:.1f}s / {min(times):.1f}s / {max(times):.1f}s ({len(times)}/{n})")
