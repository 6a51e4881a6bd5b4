from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from garageengine.requirement import Requirement

if TYPE_CHECKING:
    from garageengine.runtime import GameRuntime
    from garageengine.state import GameState

UPGRADE = "upgrade"
NIP = "nip"
WORKER = "worker"


@dataclass(frozen=True)
class PurchaseOption:
    """Something the player could buy right now."""

    kind: str  # UPGRADE, NIP or WORKER
    id: str
    cost: float


def purchase_options(runtime: GameRuntime, affordable_only: bool = True) -> list[PurchaseOption]:
    """Every tool upgrade, Nip upgrade and worker hire currently on offer."""
    options: list[PurchaseOption] = []
    for shop, kind in ((runtime.upgrade_shop, UPGRADE), (runtime.nip_shop, NIP)):
        for info in shop.all_upgrade_info():
            if info.is_maxed or (affordable_only and not info.can_afford):
                continue
            options.append(PurchaseOption(kind, info.id, info.cost))
    for winfo in runtime.workers.all_worker_info():
        if affordable_only and not winfo.can_afford:
            continue
        options.append(PurchaseOption(WORKER, winfo.id, winfo.cost))
    return options


def execute_purchase(runtime: GameRuntime, option: PurchaseOption) -> bool:
    if option.kind == UPGRADE:
        return runtime.purchase_upgrade(option.id)
    if option.kind == NIP:
        return runtime.purchase_nip_upgrade(option.id)
    if option.kind == WORKER:
        return runtime.hire_worker(option.id)
    return False


class ClickProfile:
    """Configures click behavior for strategies.

    Fractional clicks carry over between calls so low click rates still
    land with small tick sizes.
    """

    def __init__(self, cps: float = 0.0, active_until: Requirement | None = None) -> None:
        self.cps = cps
        self.active_until = active_until
        self._carry = 0.0

    def get_clicks(self, state: GameState, duration_s: float) -> int:
        if self.cps <= 0:
            return 0
        if self.active_until is not None and self.active_until.evaluate(state):
            return 0
        self._carry += self.cps * duration_s
        clicks = math.floor(self._carry)
        self._carry -= clicks
        return clicks


class Strategy(ABC):
    """Base class for simulation strategies."""

    @abstractmethod
    def decide_purchases(
        self, runtime: GameRuntime, options: list[PurchaseOption]
    ) -> list[PurchaseOption]:
        """Return purchases to attempt, in order."""
        ...

    def get_clicks(self, state: GameState, duration_s: float) -> int:
        return 0

    def choose_contract(self, runtime: GameRuntime) -> str | None:
        """Id of a contract offer to accept now, if any."""
        return None

    def should_prestige(self, runtime: GameRuntime) -> bool:
        return False

    @abstractmethod
    def describe(self) -> str: ...


class _ClickingStrategy(Strategy):
    def __init__(
        self,
        click_profile: ClickProfile | None = None,
        accept_contracts: bool = False,
        prestige_mode: str = "never",
        prestige_min_nip: int = 1,
    ) -> None:
        self.click_profile = click_profile
        self.accept_contracts = accept_contracts
        self.prestige_mode = prestige_mode  # "never" or "first_opportunity"
        self.prestige_min_nip = prestige_min_nip

    def get_clicks(self, state: GameState, duration_s: float) -> int:
        if self.click_profile:
            return self.click_profile.get_clicks(state, duration_s)
        return 0

    def choose_contract(self, runtime: GameRuntime) -> str | None:
        if not self.accept_contracts or runtime.state.active_job_contract is not None:
            return None
        offers = runtime.state.job_contracts
        if not offers:
            return None
        # Best payout per unit of extra work
        best = max(offers, key=lambda c: c.payout_multiplier / c.repair_multiplier)
        return best.id

    def should_prestige(self, runtime: GameRuntime) -> bool:
        if self.prestige_mode != "first_opportunity":
            return False
        return runtime.calculate_claimable_nip() >= self.prestige_min_nip

    def _describe_extras(self) -> list[str]:
        parts = []
        if self.click_profile and self.click_profile.cps > 0:
            parts.append(f"({self.click_profile.cps:g} CPS)")
        if self.accept_contracts:
            parts.append("+contracts")
        if self.prestige_mode != "never":
            parts.append(f"+prestige(>={self.prestige_min_nip})")
        return parts


class GreedyCheapest(_ClickingStrategy):
    """Buy the cheapest affordable option first. Nip is spent separately."""

    def decide_purchases(
        self, runtime: GameRuntime, options: list[PurchaseOption]
    ) -> list[PurchaseOption]:
        nip = sorted((o for o in options if o.kind == NIP), key=lambda o: o.cost)
        cash = sorted((o for o in options if o.kind != NIP), key=lambda o: o.cost)
        return nip + cash

    def describe(self) -> str:
        return " ".join(["GreedyCheapest", *self._describe_extras()])


class PriorityList(_ClickingStrategy):
    """Follow a designer-specified purchase order of (kind, id, target level)."""

    def __init__(
        self,
        priorities: list[tuple[str, str, int]],
        fallback: Strategy | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.priorities = priorities
        self.fallback = fallback

    def _owned(self, runtime: GameRuntime, kind: str, id: str) -> int:
        state = runtime.state
        if kind == UPGRADE:
            return state.upgrade_level(id)
        if kind == NIP:
            return state.nip_upgrade_level(id)
        return state.worker_count(id)

    def decide_purchases(
        self, runtime: GameRuntime, options: list[PurchaseOption]
    ) -> list[PurchaseOption]:
        by_key = {(o.kind, o.id): o for o in options}
        for kind, id, target in self.priorities:
            if self._owned(runtime, kind, id) >= target:
                continue
            option = by_key.get((kind, id))
            # Save up for the first unmet priority
            return [option] if option else []
        if self.fallback:
            return self.fallback.decide_purchases(runtime, options)
        return []

    def describe(self) -> str:
        items = ", ".join(f"{id}x{target}" for _, id, target in self.priorities)
        return " ".join([f"PriorityList([{items}])", *self._describe_extras()])


class CustomStrategy(Strategy):
    """Strategy defined by callables."""

    def __init__(
        self,
        decide_fn: Callable[
            [GameRuntime, list[PurchaseOption]], list[PurchaseOption]
        ] | None = None,
        clicks_fn: Callable[[GameState, float], int] | None = None,
        contract_fn: Callable[[GameRuntime], str | None] | None = None,
        prestige_fn: Callable[[GameRuntime], bool] | None = None,
        name: str = "Custom",
    ) -> None:
        self._decide_fn = decide_fn
        self._clicks_fn = clicks_fn
        self._contract_fn = contract_fn
        self._prestige_fn = prestige_fn
        self._name = name

    def decide_purchases(
        self, runtime: GameRuntime, options: list[PurchaseOption]
    ) -> list[PurchaseOption]:
        if self._decide_fn:
            return self._decide_fn(runtime, options)
        return []

    def get_clicks(self, state: GameState, duration_s: float) -> int:
        if self._clicks_fn:
            return self._clicks_fn(state, duration_s)
        return 0

    def choose_contract(self, runtime: GameRuntime) -> str | None:
        if self._contract_fn:
            return self._contract_fn(runtime)
        return None

    def should_prestige(self, runtime: GameRuntime) -> bool:
        if self._prestige_fn:
            return self._prestige_fn(runtime)
        return False

    def describe(self) -> str:
        return self._name


STRATEGY_REGISTRY: dict[str, type[Strategy]] = {
    "greedy_cheapest": GreedyCheapest,
    "priority_list": PriorityList,
    "custom": CustomStrategy,
}
