from __future__ import annotations

from garageengine.report import SimulationReport


def plot_simulation(
    report: SimulationReport,
    output_path: str | None = None,
) -> None:
    """Generate a 4-panel matplotlib view of a simulation run.

    Requires matplotlib (optional dependency).
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError(
            "matplotlib is required for visualization. "
            "Install with: pip install garage-engine[viz]"
        )

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle(f"Garage Simulation: {report.strategy_description}", fontsize=14)

    # 1. Currency and lifetime earnings (log scale)
    ax1 = axes[0][0]
    for label, series in (
        ("currency", report.currency_series()),
        ("lifetime", report.earnings_series()),
    ):
        if series:
            times, values = zip(*series)
            ax1.plot(times, [max(v, 1e-10) for v in values], label=label)
    ax1.set_yscale("log")
    ax1.set_xlabel("Time (s)")
    ax1.set_ylabel("Money")
    ax1.set_title("Currency")
    ax1.legend(fontsize=8)
    ax1.grid(True, alpha=0.3)

    # 2. Worker repair rate
    ax2 = axes[0][1]
    series = report.rate_series()
    if series:
        times, rates = zip(*series)
        ax2.plot(times, rates)
    ax2.set_xlabel("Time (s)")
    ax2.set_ylabel("Repair points (/s)")
    ax2.set_title("Auto-repair Rate")
    ax2.grid(True, alpha=0.3)

    # 3. Garage level
    ax3 = axes[1][0]
    series = report.level_series()
    if series:
        times, levels = zip(*series)
        ax3.step(times, levels, where="post")
    for p in report.prestiges:
        ax3.axvline(p.time, color="purple", linestyle=":", alpha=0.6)
    ax3.set_xlabel("Time (s)")
    ax3.set_ylabel("Level")
    ax3.set_title("Garage Level")
    ax3.grid(True, alpha=0.3)

    # 4. Purchase gap histogram
    ax4 = axes[1][1]
    if report.purchase_gaps:
        ax4.hist(report.purchase_gaps, bins=min(30, len(report.purchase_gaps)), alpha=0.7)
        ax4.axvline(
            report.mean_purchase_gap,
            color="red",
            linestyle="--",
            label=f"Mean: {report.mean_purchase_gap:.1f}s",
        )
        ax4.set_xlabel("Gap (s)")
        ax4.set_ylabel("Count")
        ax4.set_title("Purchase Gap Distribution")
        ax4.legend()
        ax4.grid(True, alpha=0.3)

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150)
    else:
        plt.show()
