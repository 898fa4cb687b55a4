"""
mymoney - Portfolio Ledger Engine

Simulates a multi-asset-class portfolio over one calendar year: an initial
allocation, a fixed monthly contribution (SIP), monthly market rate changes,
and rebalancing toward the initial weights in June and December.

Usage:
    from mymoney import PortfolioLedger, AssetClass, Month

    ledger = PortfolioLedger("main")
    ledger.allocate({AssetClass.EQUITY: 6000, AssetClass.DEBT: 3000, AssetClass.GOLD: 1000})
    ledger.init_sip({AssetClass.EQUITY: 2000, AssetClass.DEBT: 1000, AssetClass.GOLD: 500})
    ledger.change({AssetClass.EQUITY: 4, AssetClass.DEBT: 10, AssetClass.GOLD: 2}, Month.JANUARY)

    ledger.balance(Month.JANUARY)     # (6240, 3300, 1020)
    ledger.rebalance().format()       # "CANNOT_REBALANCE" until six months of rates exist

    # Or drive it with text commands
    from mymoney import CommandProcessor
    processor = CommandProcessor(ledger)
    processor.process("BALANCE JANUARY")   # "6240 3300 1020"
"""

# Core types
from .core import (
    AssetClass,
    Month,
    PortfolioView,
    AmountMap,
    RateMap,
    PortfolioError,
    AlreadyAllocated,
    IncompleteAllocation,
    ZeroAllocation,
    NotAllocated,
    AlreadyRegisteredContribution,
    IncompleteContribution,
    DuplicateMonthRate,
    InvalidRateInput,
    MissingRateForMonth,
    ASSET_CLASSES,
    CANNOT_REBALANCE,
    MONTHS_IN_YEAR,
    PERCENT,
    REBALANCE_MIN_MONTHS,
    exact_add,
    exact_multiply,
    exact_sum,
    floor_divide,
    format_amounts,
    months_through,
    rate_to_decimal,
    to_amount,
    to_rate,
)

# Stores
from .holdings import Holding, BalanceSnapshot, Portfolio
from .schedules import ContributionSchedule, RateLedger
from .balance_cache import BalanceCache

# Ledger
from .engine import PortfolioLedger, RebalanceResult, RebalanceState, rebalance_state

# Commands
from .commands import Command, CommandError, CommandProcessor, parse_line, run_commands

# Analytics
from .analytics import snapshot_matrix, monthly_totals, current_weights, weight_drift

__all__ = [
    # Core
    'AssetClass', 'Month', 'PortfolioView', 'AmountMap', 'RateMap',
    'PortfolioError', 'AlreadyAllocated', 'IncompleteAllocation', 'ZeroAllocation',
    'NotAllocated', 'AlreadyRegisteredContribution', 'IncompleteContribution',
    'DuplicateMonthRate', 'InvalidRateInput', 'MissingRateForMonth',
    'ASSET_CLASSES', 'CANNOT_REBALANCE', 'MONTHS_IN_YEAR',
    'PERCENT', 'REBALANCE_MIN_MONTHS',
    'exact_add', 'exact_multiply', 'exact_sum',
    'floor_divide', 'format_amounts', 'months_through', 'rate_to_decimal',
    'to_amount', 'to_rate',
    # Stores
    'Holding', 'BalanceSnapshot', 'Portfolio',
    'ContributionSchedule', 'RateLedger', 'BalanceCache',
    # Ledger
    'PortfolioLedger', 'RebalanceResult', 'RebalanceState', 'rebalance_state',
    # Commands
    'Command', 'CommandError', 'CommandProcessor', 'parse_line', 'run_commands',
    # Analytics
    'snapshot_matrix', 'monthly_totals', 'current_weights', 'weight_drift',
]

__version__ = '1.0.0'
