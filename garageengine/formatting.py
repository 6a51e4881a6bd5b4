from __future__ import annotations

import math

from garageengine.offline import OfflineProgress
from garageengine.report import SimulationReport

SUFFIXES = (
    "", "K", "M", "B", "T", "Qa", "Qi", "Sx", "Sp", "Oc", "No", "Dc",
    "UDc", "DDc", "TDc", "QaDc", "QiDc", "SxDc", "SpDc", "OcDc", "NoDc", "Vg",
)


# ── Numbers ──────────────────────────────────────────────────────────


def format_number(value: float, decimals: int = 2) -> str:
    """Idle-game notation: 1234 -> '1.23K'. Past the suffix list, scientific."""
    if value is None or math.isnan(value):
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    if value < 1000:
        return sign + str(math.floor(value))
    if math.isinf(value):
        return sign + "inf"

    tier = math.floor(math.log10(value) / 3)
    if tier >= len(SUFFIXES):
        return sign + f"{value:.{decimals}e}"

    scaled = f"{value / 1000 ** tier:.{decimals}f}"
    if "." in scaled:
        scaled = scaled.rstrip("0").rstrip(".")
    return sign + scaled + SUFFIXES[tier]


def parse_number(text: str) -> float:
    """Inverse of format_number for suffixed strings. Unparseable text is 0."""
    if not text:
        return 0.0
    cleaned = text.replace("$", "").replace(",", "").replace(" ", "").upper()
    for tier in range(len(SUFFIXES) - 1, 0, -1):
        suffix = SUFFIXES[tier].upper()
        if cleaned.endswith(suffix):
            try:
                return float(cleaned[: -len(suffix)]) * 1000 ** tier
            except ValueError:
                return 0.0
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def format_currency(value: float, decimals: int = 2) -> str:
    return "$" + format_number(value, decimals)


def format_rate(value: float) -> str:
    return format_number(value, 1) + "/s"


def format_duration(ms: float) -> str:
    seconds = int(ms // 1000)
    minutes = seconds // 60
    hours = minutes // 60
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"


def format_percent(value: float, decimals: int = 0) -> str:
    return f"{value * 100:.{decimals}f}%"


# ── Reports ──────────────────────────────────────────────────────────


def format_offline(progress: OfflineProgress) -> str:
    if progress.is_empty:
        return "No offline progress."
    return (
        f"While you were away ({format_duration(progress.time_away_ms)}): "
        f"{progress.cars_repaired} cars repaired, "
        f"{format_currency(progress.earnings)} earned, {progress.xp} XP"
    )


def format_text_report(report: SimulationReport) -> str:
    """Format a simulation report for console output."""
    lines: list[str] = []

    lines.append("=" * 30 + " Garage Simulation Report " + "=" * 30)
    lines.append(f"Strategy: {report.strategy_description}")
    lines.append(f"Terminal: {report.terminal_description}")
    lines.append(f"Result: {report.outcome} at {report.total_time:.1f}s")
    lines.append("")

    lines.append("FINAL STATE:")
    lines.append(f"  Currency: {format_currency(report.final_currency)}")
    lines.append(f"  Lifetime earnings: {format_currency(report.lifetime_earnings)}")
    lines.append(f"  Garage level: {report.final_level}")
    lines.append(f"  Cars repaired: {report.cars_repaired}")
    lines.append("")

    if report.level_times:
        lines.append("LEVELS:")
        for level, t in sorted(report.level_times.items()):
            lines.append(f"  * {'Level ' + str(level):.<30s} {t:.1f}s")
        lines.append("")

    lines.append("PURCHASES:")
    lines.append(f"  Total: {len(report.purchases)}")
    lines.append(f"  Rate: {report.purchases_per_minute:.1f}/min")
    lines.append(f"  Max gap: {report.max_purchase_gap:.1f}s")
    lines.append(f"  Mean gap: {report.mean_purchase_gap:.1f}s")

    if report.contracts:
        lines.append("")
        lines.append("CONTRACTS:")
        lines.append(f"  Completed: {report.contracts_completed}")
        lines.append(f"  Failed: {report.contracts_failed}")

    if report.prestiges:
        lines.append("")
        lines.append("PRESTIGE:")
        for p in report.prestiges:
            lines.append(f"  * {p.time:.1f}s: +{p.reward_amount} Nip after {p.run_duration:.1f}s")

    return "\n".join(lines)
