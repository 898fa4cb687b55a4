"""
holdings.py - Holding store and month-end snapshots

Holding is the one mutable record in the system: the amount currently
invested in a single asset class. Portfolio keeps one Holding per asset class
in registry order. BalanceSnapshot freezes clones of every Holding at the end
of a month so later mutation never leaks into history.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterator, Mapping, Optional, Tuple

from .core import (
    AmountMap, AssetClass, Month,
    ASSET_CLASSES,
    exact_sum, floor_amounts,
)


@dataclass(eq=False, slots=True)
class Holding:
    """
    Amount invested in one asset class.

    Identity is the asset class: two holdings are equal when they track the
    same class, whatever their amounts. A portfolio holds at most one Holding
    per class.

    Attributes:
        asset_class: The tracked asset class
        amount_invested: Current amount, exact Decimal
    """
    asset_class: AssetClass
    amount_invested: Decimal

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Holding):
            return NotImplemented
        return self.asset_class is other.asset_class

    def __hash__(self) -> int:
        return hash(self.asset_class)

    def clone(self) -> Holding:
        """Return an independent copy of this holding."""
        return Holding(self.asset_class, self.amount_invested)

    def __repr__(self) -> str:
        return f"Holding({self.asset_class.name}={self.amount_invested})"


@dataclass(frozen=True, slots=True, eq=False)
class BalanceSnapshot:
    """
    Immutable month-end copy of every holding.

    Compare snapshots through amounts(); Holding equality ignores amounts.

    Attributes:
        month: Month the snapshot closes
        holdings: Cloned holdings in registry order
    """
    month: Month
    holdings: Tuple[Holding, ...]

    def amount(self, asset_class: AssetClass) -> Decimal:
        """Return the amount held in asset_class at month end."""
        for holding in self.holdings:
            if holding.asset_class is asset_class:
                return holding.amount_invested
        raise KeyError(asset_class)

    def amounts(self) -> AmountMap:
        return {h.asset_class: h.amount_invested for h in self.holdings}

    @property
    def total(self) -> Decimal:
        return exact_sum(h.amount_invested for h in self.holdings)

    def floored(self) -> Tuple[int, ...]:
        """Amounts floored to ints, in registry order."""
        return floor_amounts([h.amount_invested for h in self.holdings])


class Portfolio:
    """
    Current holdings, one per asset class.

    Holdings are created once by the initial allocation and then mutated in
    place as months advance and rebalances redistribute value. Iteration
    always follows the AssetClass registry order.
    """

    def __init__(self):
        self._holdings: Dict[AssetClass, Holding] = {}

    def __iter__(self) -> Iterator[Holding]:
        for asset_class in ASSET_CLASSES:
            holding = self._holdings.get(asset_class)
            if holding is not None:
                yield holding

    def __len__(self) -> int:
        return len(self._holdings)

    def is_empty(self) -> bool:
        return not self._holdings

    def add_holding(self, holding: Holding) -> None:
        """
        Add a holding for an asset class not yet held.

        Raises:
            ValueError: If a holding for the asset class already exists
        """
        if holding.asset_class in self._holdings:
            raise ValueError(f"Holding for {holding.asset_class.name} already exists")
        self._holdings[holding.asset_class] = holding

    def get(self, asset_class: AssetClass) -> Optional[Holding]:
        return self._holdings.get(asset_class)

    @property
    def total_investment(self) -> Decimal:
        """Exact sum of every holding's amount."""
        return exact_sum(h.amount_invested for h in self)

    def amounts(self) -> AmountMap:
        return {h.asset_class: h.amount_invested for h in self}

    def floored(self) -> Tuple[int, ...]:
        """Amounts floored to ints, in registry order."""
        return floor_amounts([h.amount_invested for h in self])

    def snapshot(self, month: Month) -> BalanceSnapshot:
        """Freeze clones of the current holdings as the close of month."""
        return BalanceSnapshot(month, tuple(h.clone() for h in self))

    def assign(self, amounts: Mapping[AssetClass, Decimal]) -> None:
        """
        Set every holding's amount from amounts in one step.

        Raises:
            KeyError: If amounts lacks a held asset class; no holding changes
        """
        staged = [(holding, amounts[holding.asset_class]) for holding in self]
        for holding, amount in staged:
            holding.amount_invested = amount

    def restore(self, snapshot: BalanceSnapshot) -> None:
        """Reset every holding's amount to the value recorded in snapshot."""
        self.assign(snapshot.amounts())

    def clone(self) -> Portfolio:
        cloned = Portfolio()
        for holding in self:
            cloned.add_holding(holding.clone())
        return cloned

    def __repr__(self) -> str:
        inner = ", ".join(f"{h.asset_class.name}={h.amount_invested}" for h in self)
        return f"Portfolio({inner})"
