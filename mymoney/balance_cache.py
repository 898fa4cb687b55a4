"""
balance_cache.py - Memoized month-end snapshots

Snapshots are stored as months are computed, always in ascending order, so
the cached months form one contiguous run starting in January. Rebalancing
evicts a trailing run of months to force their recomputation from a new
baseline.
"""

from __future__ import annotations
from typing import Dict, Optional, Tuple

from .core import Month
from .holdings import BalanceSnapshot


class BalanceCache:
    """Month -> BalanceSnapshot, with suffix eviction."""

    def __init__(self):
        self._snapshots: Dict[Month, BalanceSnapshot] = {}

    def __contains__(self, month: Month) -> bool:
        return month in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)

    def get(self, month: Month) -> Optional[BalanceSnapshot]:
        return self._snapshots.get(month)

    def store(self, snapshot: BalanceSnapshot) -> None:
        """Store snapshot under its month, replacing any earlier entry."""
        self._snapshots[snapshot.month] = snapshot

    def latest_month(self) -> Optional[Month]:
        """Most recent cached month, or None when the cache is empty."""
        return max(self._snapshots) if self._snapshots else None

    def months(self) -> Tuple[Month, ...]:
        return tuple(sorted(self._snapshots))

    def evict_from(self, month: Month) -> Tuple[Month, ...]:
        """
        Remove every snapshot for month and later months.

        Returns:
            The evicted months, ascending
        """
        evicted = tuple(m for m in sorted(self._snapshots) if m >= month)
        for m in evicted:
            del self._snapshots[m]
        return evicted

    def clone(self) -> BalanceCache:
        # Snapshots are immutable and their holdings are private clones, so
        # they can be shared.
        cloned = BalanceCache()
        cloned._snapshots = dict(self._snapshots)
        return cloned

    def __repr__(self) -> str:
        months = ", ".join(m.name for m in self.months())
        return f"BalanceCache({months})"
