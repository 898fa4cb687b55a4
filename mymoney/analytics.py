"""
analytics.py - Read-only reporting over a PortfolioView

Turns cached month-end snapshots and current holdings into numpy arrays for
reporting: the amount matrix, month-end totals, current weights and their
drift from the desired weights.

Values are floats. They are for display and analysis only and never feed
back into the ledger, which keeps exact Decimal amounts.
"""

from __future__ import annotations
from typing import List, Tuple

import numpy as np

from .core import Month, PortfolioView


def snapshot_matrix(view: PortfolioView) -> Tuple[List[Month], np.ndarray]:
    """
    Month-end amounts for every cached month.

    Returns:
        (months, matrix) where matrix has shape (len(months), n_asset_classes)
        and columns follow view.asset_classes
    """
    months = list(view.cached_months())
    matrix = np.zeros((len(months), len(view.asset_classes)), dtype=float)
    for row, month in enumerate(months):
        amounts = view.get_snapshot_amounts(month)
        matrix[row] = [float(amounts[a]) for a in view.asset_classes]
    return months, matrix


def monthly_totals(view: PortfolioView) -> np.ndarray:
    """Total portfolio value at each cached month end."""
    _, matrix = snapshot_matrix(view)
    return matrix.sum(axis=1)


def current_weights(view: PortfolioView) -> np.ndarray:
    """
    Current percentage share of each asset class, in view.asset_classes order.

    All zeros when the portfolio holds nothing.
    """
    holdings = view.get_holdings()
    amounts = np.array([float(holdings.get(a, 0)) for a in view.asset_classes])
    total = amounts.sum()
    if total == 0:
        return np.zeros_like(amounts)
    return amounts / total * 100.0


def weight_drift(view: PortfolioView) -> np.ndarray:
    """Current weights minus desired weights, in percentage points."""
    desired = view.get_desired_weights()
    target = np.array([float(desired.get(a, 0)) for a in view.asset_classes])
    return current_weights(view) - target
