from __future__ import annotations

import logging
import math
import random

from garageengine._types import ManualClock
from garageengine.definition import GameDefinition
from garageengine.metrics import MetricsCollector, StateSnapshot
from garageengine.report import SimulationReport, build_report
from garageengine.runtime import GameRuntime
from garageengine.strategy import Strategy, execute_purchase, purchase_options
from garageengine.terminal import SimulationContext, TerminalCondition

logger = logging.getLogger(__name__)

MAX_TICKS = 10_000_000


class Simulation:
    """Headless run of a garage definition driven by a strategy.

    The runtime gets a ManualClock and a seeded RNG, so two simulations
    with the same seed produce identical reports.
    """

    def __init__(
        self,
        definition: GameDefinition | None,
        strategy: Strategy,
        terminal: TerminalCondition,
        tick_ms: float = 100.0,
        seed: int | None = None,
        snapshot_interval: float = 1.0,
    ) -> None:
        if tick_ms <= 0:
            raise ValueError(f"tick_ms must be positive, got {tick_ms}")
        self.strategy = strategy
        self.terminal = terminal
        self.tick_ms = tick_ms

        self.clock = ManualClock()
        self.rng = random.Random(seed)
        self.runtime = GameRuntime(definition, clock=self.clock, rng=self.rng)
        self.definition = self.runtime.definition
        self.collector = MetricsCollector(snapshot_interval=snapshot_interval)
        self.collector.attach(self.runtime)
        self.context = SimulationContext()
        self._run_started = 0.0

    def run(self) -> SimulationReport:
        runtime = self.runtime
        tick_s = self.tick_ms / 1000.0
        tick_count = 0

        while not self.terminal.is_met(runtime, self.context):
            tick_count += 1
            if tick_count > MAX_TICKS:
                break

            # 1. Advance time
            self.clock.advance(self.tick_ms)
            runtime.update(self.tick_ms)

            # 2. Clicks
            for _ in range(self.strategy.get_clicks(runtime.state, tick_s)):
                if runtime.click_at() is None:
                    break

            # 3. Contracts
            contract_id = self.strategy.choose_contract(runtime)
            if contract_id is not None:
                runtime.accept_contract(contract_id)

            # 4. Purchases
            self._make_purchases()

            # 5. Prestige
            if self.strategy.should_prestige(runtime):
                self._prestige()

            # 6. Record metrics
            self.collector.record_tick(runtime, runtime.combo)

            if math.isnan(runtime.state.currency) or math.isinf(runtime.state.currency):
                return self._build_report("Aborted: NaN/Inf detected")

        outcome = (
            "Terminal condition met"
            if self.terminal.is_met(runtime, self.context)
            else "Max ticks reached"
        )
        return self._build_report(outcome)

    def _make_purchases(self) -> None:
        runtime = self.runtime
        options = purchase_options(runtime)
        if not options:
            return
        for option in self.strategy.decide_purchases(runtime, options):
            if execute_purchase(runtime, option):
                self.collector.record_purchase(runtime, option.kind, option.id, option.cost)
                self.context.last_purchase_time = runtime.time_elapsed / 1000.0
                self.context.total_purchases += 1

    def _prestige(self) -> None:
        runtime = self.runtime
        result = runtime.perform_prestige()
        if not result.success:
            return
        now = runtime.time_elapsed / 1000.0
        self.collector.record_prestige(runtime, result.reward_amount, now - self._run_started)
        self.context.prestige_count += 1
        self._run_started = now
        logger.debug("Simulated prestige at %.1fs for %d Nip", now, result.reward_amount)

    def _final_snapshot(self) -> StateSnapshot:
        state = self.runtime.state
        return StateSnapshot(
            time=self.runtime.time_elapsed / 1000.0,
            currency=state.currency,
            total_earned=state.total_earned,
            lifetime_earnings=state.lifetime_earnings,
            level=state.garage_level,
            xp=state.garage_xp,
            click_power=state.click_power,
            auto_repair_rate=state.auto_repair_rate,
            cars_repaired=state.cars_repaired,
            combo=self.runtime.combo,
        )

    def _build_report(self, outcome: str) -> SimulationReport:
        return build_report(
            collector=self.collector,
            strategy_description=self.strategy.describe(),
            terminal_description=self.terminal.describe(),
            outcome=outcome,
            total_time=self.runtime.time_elapsed / 1000.0,
            final=self._final_snapshot(),
        )
