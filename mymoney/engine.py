"""
engine.py - Stateful portfolio ledger

PortfolioLedger is the central state manager. It is the only module that
mutates holdings, and the only one with business rules.

Key responsibilities:
    - Initial allocation and the desired weights derived from it
    - Write-once registration of the contribution schedule and monthly rates
    - Incremental, memoized month-end balances
    - June and December rebalancing toward the desired weights
    - Implements the PortfolioView protocol for read-only consumers
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Tuple
import sys

from .core import (
    # Types
    AmountMap, AssetClass, Month, RateMap,
    # Constants
    ASSET_CLASSES, CANNOT_REBALANCE, FIRST_MONTH,
    MONTHS_IN_YEAR, PERCENT, REBALANCE_MIN_MONTHS,
    # Exceptions
    AlreadyAllocated, AlreadyRegisteredContribution, DuplicateMonthRate,
    IncompleteAllocation, IncompleteContribution, InvalidRateInput,
    MissingRateForMonth, NotAllocated, ZeroAllocation,
    # Helpers
    coerce_asset_mapping, exact_add, exact_multiply, exact_sum, floor_divide,
    format_amounts, months_through, to_amount, to_rate,
)
from .balance_cache import BalanceCache
from .holdings import BalanceSnapshot, Holding, Portfolio
from .schedules import ContributionSchedule, RateLedger


# ============================================================================
# REBALANCE STATE
# ============================================================================

class RebalanceState(Enum):
    """
    Where a rebalance request lands, given the registered rate history.

    NOT_ELIGIBLE: Fewer than six months of rates; nothing is rebalanced.
    JUNE: Six to eleven months; rebalance at June from the May baseline.
    DECEMBER: A full year; rebalance at December.
    """
    NOT_ELIGIBLE = "not_eligible"
    JUNE = "june"
    DECEMBER = "december"

    @property
    def anchor(self) -> Optional[Month]:
        return _ANCHORS[self]


_ANCHORS = {
    RebalanceState.NOT_ELIGIBLE: None,
    RebalanceState.JUNE: Month.JUNE,
    RebalanceState.DECEMBER: Month.DECEMBER,
}


def rebalance_state(registered_months: int) -> RebalanceState:
    """Derive the rebalance state from the number of months with rates."""
    if registered_months < REBALANCE_MIN_MONTHS:
        return RebalanceState.NOT_ELIGIBLE
    if registered_months < MONTHS_IN_YEAR:
        return RebalanceState.JUNE
    return RebalanceState.DECEMBER


@dataclass(frozen=True, slots=True)
class RebalanceResult:
    """
    Outcome of a rebalance request.

    Attributes:
        state: Which rebalance applied (NOT_ELIGIBLE when none did)
        amounts: Post-rebalance amounts floored to ints, registry order
                 (empty when NOT_ELIGIBLE)
    """
    state: RebalanceState
    amounts: Tuple[int, ...] = ()

    @property
    def rebalanced(self) -> bool:
        return self.state is not RebalanceState.NOT_ELIGIBLE

    @property
    def anchor(self) -> Optional[Month]:
        return self.state.anchor

    def format(self) -> str:
        """Output line: the amounts, or CANNOT_REBALANCE."""
        if not self.rebalanced:
            return CANNOT_REBALANCE
        return format_amounts(self.amounts)

    def __str__(self) -> str:
        return self.format()


# ============================================================================
# LEDGER
# ============================================================================

class PortfolioLedger:
    """
    One simulated portfolio over one calendar year.

    Month-end balances are computed lazily and memoized: balance(month) only
    computes the months after the latest cached one, and every computed month
    is archived as an immutable snapshot. A rebalance may evict snapshots to
    recompute them from a new baseline.

    Thread Safety:
        Not thread-safe. Every operation reads and mutates shared state, so
        each thread should own its own PortfolioLedger.

    Example:
        ledger = PortfolioLedger("main")
        ledger.allocate({AssetClass.EQUITY: 6000, AssetClass.DEBT: 3000, AssetClass.GOLD: 1000})
        ledger.init_sip({AssetClass.EQUITY: 2000, AssetClass.DEBT: 1000, AssetClass.GOLD: 500})
        ledger.change({AssetClass.EQUITY: 4, AssetClass.DEBT: 10, AssetClass.GOLD: 2}, Month.JANUARY)
        ledger.balance(Month.JANUARY)    # (6240, 3300, 1020)
    """

    def __init__(self, name: str = "main", verbose: bool = False):
        """
        Create an empty ledger.

        Args:
            name: Ledger identifier, used in diagnostics
            verbose: Print a diagnostic line to stderr for every state change
        """
        self.name = name
        self.verbose = verbose
        self.portfolio = Portfolio()
        self.desired_weights: AmountMap = {}
        self.contributions = ContributionSchedule()
        self.rates = RateLedger()
        self.balance_cache = BalanceCache()

    def _log(self, message: str) -> None:
        if self.verbose:
            print(f"[{self.name}] {message}", file=sys.stderr)

    # ========================================================================
    # PortfolioView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    @property
    def asset_classes(self) -> Tuple[AssetClass, ...]:
        return ASSET_CLASSES

    @property
    def is_allocated(self) -> bool:
        return not self.portfolio.is_empty()

    @property
    def total_investment(self) -> Decimal:
        return self.portfolio.total_investment

    def get_holding(self, asset_class: AssetClass) -> Decimal:
        """
        Current amount invested in asset_class.

        Raises:
            NotAllocated: If nothing has been allocated yet
        """
        self._require_allocated()
        return self.portfolio.get(asset_class).amount_invested

    def get_holdings(self) -> AmountMap:
        return self.portfolio.amounts()

    def get_desired_weights(self) -> AmountMap:
        return dict(self.desired_weights)

    def get_contributions(self) -> AmountMap:
        return self.contributions.amounts()

    def get_rates(self, month: Any) -> RateMap:
        """Raw rates registered for month (KeyError if none)."""
        return self.rates.rates_for(Month.parse(month))

    def registered_months(self) -> Tuple[Month, ...]:
        return self.rates.months()

    def cached_months(self) -> Tuple[Month, ...]:
        return self.balance_cache.months()

    def get_snapshot(self, month: Any) -> Optional[BalanceSnapshot]:
        """Cached month-end snapshot for month, or None if not computed."""
        return self.balance_cache.get(Month.parse(month))

    def get_snapshot_amounts(self, month: Month) -> AmountMap:
        snapshot = self.balance_cache.get(Month.parse(month))
        if snapshot is None:
            raise KeyError(month)
        return snapshot.amounts()

    # ========================================================================
    # REGISTRATION (Mutating)
    # ========================================================================

    def allocate(self, amounts: Mapping[Any, Any]) -> None:
        """
        Create the initial holdings and derive desired weights from them.

        Each desired weight is floor(amount * 100 / total). Floor rounding
        means the weights may sum to slightly less than 100; that is kept.

        Args:
            amounts: Initial amount per asset class (every class exactly once)

        Raises:
            AlreadyAllocated: If the portfolio was already allocated
            IncompleteAllocation: If amounts does not cover exactly the registry
            ZeroAllocation: If the amounts total zero
        """
        if self.is_allocated:
            raise AlreadyAllocated("The funds are already allocated")
        allocation = coerce_asset_mapping(amounts, to_amount, IncompleteAllocation, "allocation")

        total = exact_sum(allocation.values())
        if not total:
            raise ZeroAllocation("Cannot derive desired weights from a zero allocation")
        weights = {
            asset_class: floor_divide(exact_multiply(amount, PERCENT), total)
            for asset_class, amount in allocation.items()
        }

        for asset_class, amount in allocation.items():
            self.portfolio.add_holding(Holding(asset_class, amount))
        self.desired_weights = weights
        self._log(f"✓ ALLOCATED {self.portfolio!r} desired weights {_describe(weights)}")

    def init_sip(self, amounts: Mapping[Any, Any]) -> None:
        """
        Register the monthly contribution per asset class.

        Contributions are applied from February on, before that month's
        market change.

        Raises:
            AlreadyRegisteredContribution: If a schedule is already registered
            IncompleteContribution: If amounts does not cover exactly the registry
        """
        if self.contributions.is_registered():
            raise AlreadyRegisteredContribution("The SIP is already registered")
        schedule = coerce_asset_mapping(amounts, to_amount, IncompleteContribution, "SIP")
        self.contributions.register(schedule)
        self._log(f"✓ SIP registered {self.contributions!r}")

    def change(self, rates: Optional[Mapping[Any, Any]], month: Any) -> None:
        """
        Register the percentage rate of change per asset class for month.

        Args:
            rates: Rate per asset class; strings may carry a trailing "%"
            month: Month, month number or month name

        Raises:
            InvalidRateInput: If an argument is missing, the month is unknown,
                              or rates does not cover exactly the registry
            DuplicateMonthRate: If month already has rates
        """
        if rates is None or month is None:
            raise InvalidRateInput("One of the supplied parameters is missing")
        try:
            month = Month.parse(month)
        except ValueError as e:
            raise InvalidRateInput(str(e)) from None
        if month in self.rates:
            raise DuplicateMonthRate(f"The rate of change for {month.name} is already registered")
        rates = coerce_asset_mapping(rates, to_rate, InvalidRateInput, "rates")
        self.rates.record(month, rates)
        self._log(f"✓ RATES {month.name} {_describe(rates)}")

    # ========================================================================
    # BALANCE (Mutating: advances holdings)
    # ========================================================================

    def balance(self, month: Any) -> Tuple[int, ...]:
        """
        Advance the holdings through month and return the current amounts,
        floored to ints, registry order.

        Every month after the latest cached one, up to month, is computed in
        ascending order: the contribution lands first (not in January), then
        the month's rate is applied as floor(amount * rate / 100). Each
        computed month is archived in the balance cache. When month is
        already cached nothing is recomputed and the holdings do not move,
        so asking for an earlier month returns the holdings as they stand.
        Use get_snapshot_amounts() for a past month's close.

        Raises:
            NotAllocated: If nothing has been allocated yet
            MissingRateForMonth: If a month to compute has no rates; nothing
                                 is computed in that case
        """
        month = Month.parse(month)
        self._advance_to(month)
        return self.portfolio.floored()

    def _require_allocated(self) -> None:
        if not self.is_allocated:
            raise NotAllocated("Please allocate funds before querying the portfolio")

    def _require_rates_through(self, month: Month) -> None:
        for m in months_through(month):
            if m not in self.balance_cache and m not in self.rates:
                raise MissingRateForMonth(m)

    def _advance_to(self, month: Month) -> None:
        """Compute and cache every uncached month up to month."""
        self._require_allocated()
        self._require_rates_through(month)
        for m in months_through(month):
            if m not in self.balance_cache:
                self._apply_month(m)

    def _apply_month(self, month: Month) -> None:
        # Every class is computed before any holding is written.
        closing: AmountMap = {}
        for holding in self.portfolio:
            amount = holding.amount_invested
            if month != FIRST_MONTH:
                amount = exact_add(amount, self.contributions.amount_for(holding.asset_class))
            rate = self.rates.rate_for(month, holding.asset_class)
            delta = floor_divide(exact_multiply(amount, rate), PERCENT)
            closing[holding.asset_class] = exact_add(amount, delta)
        self.portfolio.assign(closing)
        self.balance_cache.store(self.portfolio.snapshot(month))
        self._log(f"✓ BALANCE {month.name} {self.portfolio!r}")

    # ========================================================================
    # REBALANCE (Mutating)
    # ========================================================================

    def rebalance(self) -> RebalanceResult:
        """
        Redistribute the portfolio toward the desired weights.

        The rebalance month follows from the registered rate history:
        - fewer than 6 months: nothing happens, result is NOT_ELIGIBLE
        - 6 to 11 months: June. Snapshots from June on are evicted, holdings
          are reset to the May snapshot and June is recomputed from there.
        - 12 months: December, computed on from the existing holdings.

        At the rebalance month each holding becomes
        floor(total * desired_weight / 100). The month's cached snapshot is
        replaced with the rebalanced holdings, so later months advance from
        them.

        Raises:
            NotAllocated: If eligible but nothing has been allocated
            MissingRateForMonth: If a month up to the rebalance month has no
                                 rates; nothing changes in that case
        """
        state = rebalance_state(len(self.rates))
        if state is RebalanceState.NOT_ELIGIBLE:
            self._log(f"✗ {CANNOT_REBALANCE}: {len(self.rates)} months of rates registered")
            return RebalanceResult(state)

        anchor = state.anchor
        self._require_allocated()
        self._require_rates_through(anchor)

        if state is RebalanceState.JUNE:
            baseline = Month(anchor - 1)
            self._advance_to(baseline)
            self.balance_cache.evict_from(anchor)
            self.portfolio.restore(self.balance_cache.get(baseline))
        self._advance_to(anchor)

        total = self.portfolio.total_investment
        self.portfolio.assign({
            asset_class: floor_divide(exact_multiply(total, weight), PERCENT)
            for asset_class, weight in self.desired_weights.items()
        })
        self.balance_cache.store(self.portfolio.snapshot(anchor))

        self._log(f"✓ REBALANCED {anchor.name} {self.portfolio!r}")
        return RebalanceResult(state, self.portfolio.floored())

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def clone(self) -> PortfolioLedger:
        """
        Create an independent deep copy of this ledger.

        Modifications to the clone never affect the original, and vice versa.
        """
        cloned = PortfolioLedger.__new__(PortfolioLedger)
        cloned.name = self.name
        cloned.verbose = self.verbose
        cloned.portfolio = self.portfolio.clone()
        cloned.desired_weights = dict(self.desired_weights)
        cloned.contributions = self.contributions.clone()
        cloned.rates = self.rates.clone()
        cloned.balance_cache = self.balance_cache.clone()
        return cloned

    def __repr__(self) -> str:
        return (
            f"PortfolioLedger({self.name!r}, {self.portfolio!r}, "
            f"rates={len(self.rates)}, cached={len(self.balance_cache)})"
        )


def _describe(values: Mapping[AssetClass, Any]) -> str:
    return " ".join(f"{asset_class.name}={value}" for asset_class, value in values.items())
