"""
schedules.py - Write-once inputs to the monthly simulation

Classes:
- ContributionSchedule: fixed monthly contribution (SIP) per asset class
- RateLedger: percentage rate of change per asset class, per month

Both stores hold data only. Completeness of each registration is validated by
PortfolioLedger before anything is stored; the stores enforce that nothing is
written twice.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Dict, Mapping, Tuple

from .core import (
    AmountMap, AssetClass, Month, RateMap,
    AlreadyRegisteredContribution, DuplicateMonthRate,
    rate_to_decimal,
)


class ContributionSchedule:
    """
    Monthly contribution per asset class, registered at most once.

    An unregistered schedule contributes nothing.
    """

    def __init__(self):
        self._amounts: AmountMap = {}

    def is_registered(self) -> bool:
        return bool(self._amounts)

    def register(self, amounts: Mapping[AssetClass, Decimal]) -> None:
        """
        Store the schedule.

        Raises:
            AlreadyRegisteredContribution: If a schedule is already registered
        """
        if self._amounts:
            raise AlreadyRegisteredContribution("The SIP is already registered")
        self._amounts = dict(amounts)

    def amount_for(self, asset_class: AssetClass) -> Decimal:
        """Contribution for asset_class each month (zero when unregistered)."""
        return self._amounts.get(asset_class, Decimal("0"))

    def amounts(self) -> AmountMap:
        return dict(self._amounts)

    def clone(self) -> ContributionSchedule:
        cloned = ContributionSchedule()
        cloned._amounts = dict(self._amounts)
        return cloned

    def __repr__(self) -> str:
        inner = ", ".join(f"{a.name}={amt}" for a, amt in self._amounts.items())
        return f"ContributionSchedule({inner})"


class RateLedger:
    """
    Rates of market change, one registration per month.

    Rates are stored as floats, the way a parsed percentage arrives, and are
    converted to Decimal through rate_to_decimal() when applied so their text
    scale is preserved.

    Example:
        rates = RateLedger()
        rates.record(Month.JANUARY, {AssetClass.EQUITY: 4.0, ...})
        rates.rate_for(Month.JANUARY, AssetClass.EQUITY)   # Decimal("4.0")
    """

    def __init__(self):
        self._rates: Dict[Month, RateMap] = {}

    def __contains__(self, month: Month) -> bool:
        return month in self._rates

    def __len__(self) -> int:
        return len(self._rates)

    def record(self, month: Month, rates: Mapping[AssetClass, float]) -> None:
        """
        Store the rates for month.

        Raises:
            DuplicateMonthRate: If month already has rates
        """
        if month in self._rates:
            raise DuplicateMonthRate(
                f"The rate of change for {month.name} is already registered"
            )
        self._rates[month] = dict(rates)

    def rates_for(self, month: Month) -> RateMap:
        """Return a copy of the raw rates for month (KeyError if absent)."""
        return dict(self._rates[month])

    def rate_for(self, month: Month, asset_class: AssetClass) -> Decimal:
        """Return the rate for one asset class in month as a Decimal percentage."""
        return rate_to_decimal(self._rates[month][asset_class])

    def months(self) -> Tuple[Month, ...]:
        """Registered months in calendar order."""
        return tuple(sorted(self._rates))

    def clone(self) -> RateLedger:
        cloned = RateLedger()
        cloned._rates = {month: dict(rates) for month, rates in self._rates.items()}
        return cloned

    def __repr__(self) -> str:
        return f"RateLedger({len(self._rates)} months)"
