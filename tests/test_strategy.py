"""Tests for strategy and terminal modules."""
from garageengine._types import ManualClock
from garageengine.requirement import Req
from garageengine.runtime import GameRuntime
from garageengine.strategy import (
    NIP,
    UPGRADE,
    WORKER,
    ClickProfile,
    CustomStrategy,
    GreedyCheapest,
    PriorityList,
    PurchaseOption,
    execute_purchase,
    purchase_options,
)
from garageengine.terminal import SimulationContext, Terminal


def _make_runtime() -> GameRuntime:
    return GameRuntime(clock=ManualClock())


def test_purchase_options_affordable_only():
    rt = _make_runtime()
    assert purchase_options(rt) == []
    rt.state.currency = 60
    options = purchase_options(rt)
    assert {(o.kind, o.id) for o in options} == {(UPGRADE, "wrench"), (WORKER, "junior_maid")}


def test_purchase_options_all():
    rt = _make_runtime()
    options = purchase_options(rt, affordable_only=False)
    assert len(options) == 8 + 7 + 6


def test_purchase_options_skip_maxed():
    rt = _make_runtime()
    rt.state.upgrades["wrench"] = 100
    ids = {o.id for o in purchase_options(rt, affordable_only=False)}
    assert "wrench" not in ids


def test_execute_purchase():
    rt = _make_runtime()
    rt.state.currency = 100
    assert execute_purchase(rt, PurchaseOption(UPGRADE, "wrench", 15))
    assert execute_purchase(rt, PurchaseOption(WORKER, "junior_maid", 50))
    assert not execute_purchase(rt, PurchaseOption(NIP, "tuned_crew", 2))
    assert not execute_purchase(rt, PurchaseOption("snack", "tuna", 1))


def test_greedy_cheapest_orders_nip_then_cash_by_cost():
    rt = _make_runtime()
    options = [
        PurchaseOption(WORKER, "junior_maid", 50),
        PurchaseOption(UPGRADE, "wrench", 15),
        PurchaseOption(NIP, "tuned_crew", 2),
    ]
    ordered = GreedyCheapest().decide_purchases(rt, options)
    assert [o.id for o in ordered] == ["tuned_crew", "wrench", "junior_maid"]


def test_priority_list_saves_for_first_unmet():
    rt = _make_runtime()
    strategy = PriorityList([(WORKER, "junior_maid", 1), (UPGRADE, "wrench", 5)])
    rt.state.currency = 20
    assert strategy.decide_purchases(rt, purchase_options(rt)) == []
    rt.state.currency = 60
    chosen = strategy.decide_purchases(rt, purchase_options(rt))
    assert [o.id for o in chosen] == ["junior_maid"]


def test_priority_list_fallback():
    rt = _make_runtime()
    rt.state.worker_counts["junior_maid"] = 1
    rt.state.currency = 20
    strategy = PriorityList([(WORKER, "junior_maid", 1)], fallback=GreedyCheapest())
    chosen = strategy.decide_purchases(rt, purchase_options(rt))
    assert [o.id for o in chosen] == ["wrench"]


def test_click_profile_carries_fractions():
    rt = _make_runtime()
    profile = ClickProfile(cps=5)
    clicks = [profile.get_clicks(rt.state, 0.1) for _ in range(10)]
    assert sum(clicks) == 5


def test_click_profile_stops_when_requirement_met():
    rt = _make_runtime()
    profile = ClickProfile(cps=10, active_until=Req.stat("total_clicks", ">=", 0))
    assert profile.get_clicks(rt.state, 1.0) == 0


def test_contract_choice_prefers_value():
    rt = _make_runtime()
    strategy = GreedyCheapest(accept_contracts=True)
    best = max(rt.state.job_contracts, key=lambda c: c.payout_multiplier / c.repair_multiplier)
    assert strategy.choose_contract(rt) == best.id
    rt.accept_contract(best.id)
    assert strategy.choose_contract(rt) is None
    assert GreedyCheapest().choose_contract(rt) is None


def test_prestige_policy():
    rt = _make_runtime()
    strategy = GreedyCheapest(prestige_mode="first_opportunity")
    assert not strategy.should_prestige(rt)
    rt.state.lifetime_earnings = 1_000_000
    assert strategy.should_prestige(rt)
    assert not GreedyCheapest().should_prestige(rt)


def test_describe():
    strategy = GreedyCheapest(
        click_profile=ClickProfile(cps=5), accept_contracts=True, prestige_mode="first_opportunity"
    )
    assert strategy.describe() == "GreedyCheapest (5 CPS) +contracts +prestige(>=1)"
    assert "junior_maidx2" in PriorityList([(WORKER, "junior_maid", 2)]).describe()


def test_custom_strategy():
    rt = _make_runtime()
    strategy = CustomStrategy(
        decide_fn=lambda runtime, options: options[:1],
        clicks_fn=lambda state, duration: 3,
        prestige_fn=lambda runtime: True,
        name="Mine",
    )
    options = [PurchaseOption(UPGRADE, "wrench", 15), PurchaseOption(UPGRADE, "toolbox", 150)]
    assert strategy.decide_purchases(rt, options) == options[:1]
    assert strategy.get_clicks(rt.state, 1.0) == 3
    assert strategy.choose_contract(rt) is None
    assert strategy.should_prestige(rt)
    assert strategy.describe() == "Mine"


def test_terminals():
    rt = _make_runtime()
    ctx = SimulationContext()
    assert not Terminal.time(10).is_met(rt, ctx)
    rt.time_elapsed = 10_000
    assert Terminal.time(10).is_met(rt, ctx)
    assert Terminal.level(1).is_met(rt, ctx)
    assert not Terminal.currency(">=", 100).is_met(rt, ctx)
    assert Terminal.stat("total_clicks", "==", 0).is_met(rt, ctx)
    assert Terminal.requirement(Req.level(">=", 1), "lvl").is_met(rt, ctx)
    assert not Terminal.prestiges(1).is_met(rt, ctx)
    ctx.prestige_count = 1
    assert Terminal.prestiges(1).is_met(rt, ctx)
    assert Terminal.stall(5).is_met(rt, ctx)
    assert Terminal.any(Terminal.level(50), Terminal.time(1)).is_met(rt, ctx)
    assert not Terminal.all(Terminal.level(50), Terminal.time(1)).is_met(rt, ctx)


def test_terminal_descriptions():
    assert Terminal.time(60).describe() == "time(60)"
    assert Terminal.level(5).describe() == "level(5)"
    assert (
        Terminal.any(Terminal.time(60), Terminal.prestiges(2)).describe()
        == "time(60) OR prestiges(2)"
    )
