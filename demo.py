#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: A Year of the Portfolio Ledger

A step-by-step walk through one simulated year. Each step builds on the
previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:  Setup        - Allocation, desired weights, the monthly SIP
  4-6:  Months       - Registering rates, lazy balances, the balance cache
  7-8:  Rebalancing  - Why early rebalances are refused, the June rebalance
  9-10: Guardrails   - Rejected operations, commands and drift analytics

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple
import sys

from mymoney import (
    AssetClass, Month, PortfolioLedger, PortfolioError,
    CommandProcessor,
    current_weights, monthly_totals, weight_drift,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    allocation: Tuple[str, str, str] = ("6000", "3000", "1000")
    sip: Tuple[str, str, str] = ("2000", "1000", "500")

    # Rates per month, EQUITY DEBT GOLD
    rates: Dict[Month, Tuple[str, str, str]] = field(default_factory=lambda: {
        Month.JANUARY: ("4.00%", "10.00%", "2.00%"),
        Month.FEBRUARY: ("-10.00%", "40.00%", "0.00%"),
        Month.MARCH: ("12.50%", "12.50%", "12.50%"),
        Month.APRIL: ("8.00%", "-3.00%", "7.00%"),
        Month.MAY: ("13.00%", "21.00%", "10.50%"),
        Month.JUNE: ("10.00%", "8.00%", "-5.00%"),
    })


CONFIG = DemoConfig()

# Global state for interactive mode
QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    """Print a section header within a step."""
    print(f"\n--- {text} ---\n")


def by_class(values) -> Dict[AssetClass, str]:
    return dict(zip(AssetClass, values))


def show(amounts) -> str:
    return " ".join(f"{a.name}={v}" for a, v in zip(AssetClass, amounts))


# ============================================================================
# PHASE 1: SETUP (Steps 1-3)
# ============================================================================

def step_01_empty_ledger():
    """Create an empty ledger."""
    step_header(1, "The Empty Ledger",
        "See that a ledger starts with no holdings and tracks three asset classes.")

    print(">>> ledger = PortfolioLedger('tutorial', verbose=True)")
    ledger = PortfolioLedger("tutorial", verbose=True)

    section_header("Initial State")
    print(f"Asset classes:  {[a.name for a in ledger.asset_classes]}")
    print(f"Allocated:      {ledger.is_allocated}")
    print(f"Rate months:    {ledger.registered_months()}")
    print(f"Cached months:  {ledger.cached_months()}")

    print("""
    Asset-class order matters: every output line lists EQUITY, DEBT, GOLD
    in that order, and positional command arguments map onto it.
    """)
    return ledger


def step_02_allocate(ledger: PortfolioLedger):
    """Allocate the initial funds."""
    step_header(2, "Initial Allocation",
        "Allocate funds once and see the desired weights derived from them.")

    print(f">>> ledger.allocate({show(CONFIG.allocation)})")
    ledger.allocate(by_class(CONFIG.allocation))

    section_header("Desired Weights")
    for asset_class, weight in ledger.get_desired_weights().items():
        print(f"  {asset_class.name:6} {weight}%")

    print("""
    Each weight is floor(amount * 100 / total). These percentages are the
    target every rebalance returns to.
    """)
    return ledger


def step_03_sip(ledger: PortfolioLedger):
    """Register the monthly contribution."""
    step_header(3, "Systematic Investment Plan",
        "Register a fixed monthly contribution per asset class.")

    print(f">>> ledger.init_sip({show(CONFIG.sip)})")
    ledger.init_sip(by_class(CONFIG.sip))

    print("""
    The SIP lands at the start of every month from February on, before that
    month's market change. January gets no contribution.
    """)
    return ledger


# ============================================================================
# PHASE 2: MONTHS (Steps 4-6)
# ============================================================================

def step_04_rates(ledger: PortfolioLedger):
    """Register rates for the first three months."""
    step_header(4, "Market Changes",
        "Register one rate per asset class per month.")

    for month in (Month.JANUARY, Month.FEBRUARY, Month.MARCH):
        rates = CONFIG.rates[month]
        print(f">>> ledger.change({show(rates)}, Month.{month.name})")
        ledger.change(by_class(rates), month)

    print(f"\nRegistered months: {[m.name for m in ledger.registered_months()]}")
    print("Nothing has been computed yet: balances are lazy.")
    print(f"Cached months:     {ledger.cached_months()}")
    return ledger


def step_05_balance(ledger: PortfolioLedger):
    """Compute a month-end balance."""
    step_header(5, "Lazy Balances",
        "Ask for March and watch January to March get computed in order.")

    print(">>> ledger.balance(Month.MARCH)")
    result = ledger.balance(Month.MARCH)
    print(f"\nMarch balance: {show(result)}")

    section_header("Exact Holdings")
    for asset_class, amount in ledger.get_holdings().items():
        print(f"  {asset_class.name:6} {amount}")

    print("""
    Holdings keep every fractional digit. Only the printed balance is
    floored to whole units.
    """)
    return ledger


def step_06_cache(ledger: PortfolioLedger):
    """Read a month from the cache."""
    step_header(6, "The Balance Cache",
        "See that earlier months stay cached and balance() never moves backwards.")

    print(f"Cached months: {[m.name for m in ledger.cached_months()]}")
    print(">>> ledger.get_snapshot(Month.JANUARY)")
    print(f"January close:   {show(ledger.get_snapshot(Month.JANUARY).floored())}")
    print(">>> ledger.balance(Month.JANUARY)")
    print(f"Current holdings: {show(ledger.balance(Month.JANUARY))}")

    print("""
    January is already computed, so balance() recomputes nothing and reports
    the holdings as they stand at March. Past closes live in the cache.
    """)

    section_header("Month-End Totals")
    for month, total in zip(ledger.cached_months(), monthly_totals(ledger)):
        print(f"  {month.name:9} {total:12.2f}")
    return ledger


# ============================================================================
# PHASE 3: REBALANCING (Steps 7-8)
# ============================================================================

def step_07_too_early(ledger: PortfolioLedger):
    """Try to rebalance with only three months of history."""
    step_header(7, "Too Early to Rebalance",
        "A rebalance needs at least six months of rates.")

    print(">>> ledger.rebalance()")
    result = ledger.rebalance()
    print(f"\nResult: {result}")
    print(f"State:  {result.state.name}")
    return ledger


def step_08_june(ledger: PortfolioLedger):
    """Register April to June and rebalance."""
    step_header(8, "The June Rebalance",
        "With six months of rates, rebalance June back to the desired weights.")

    for month in (Month.APRIL, Month.MAY, Month.JUNE):
        ledger.change(by_class(CONFIG.rates[month]), month)

    section_header("Drift Before Rebalancing")
    ledger.balance(Month.JUNE)
    for asset_class, drift in zip(AssetClass, weight_drift(ledger)):
        print(f"  {asset_class.name:6} {drift:+.2f} points")

    print("\n>>> ledger.rebalance()")
    result = ledger.rebalance()
    print(f"\nRebalanced at {result.anchor.name}: {result}")

    section_header("Weights After Rebalancing")
    for asset_class, weight in zip(AssetClass, current_weights(ledger)):
        print(f"  {asset_class.name:6} {weight:.2f}%")
    return ledger


# ============================================================================
# PHASE 4: GUARDRAILS (Steps 9-10)
# ============================================================================

def step_09_rejections(ledger: PortfolioLedger):
    """Show operations that are refused."""
    step_header(9, "Rejected Operations",
        "Write-once inputs and missing history are refused without side effects.")

    attempts = [
        ("ledger.allocate(...) again", lambda: ledger.allocate(by_class(CONFIG.allocation))),
        ("ledger.change(...) for JANUARY again", lambda: ledger.change(by_class(("1", "1", "1")), Month.JANUARY)),
        ("ledger.balance(Month.AUGUST)", lambda: ledger.balance(Month.AUGUST)),
    ]
    for label, attempt in attempts:
        try:
            attempt()
        except PortfolioError as e:
            print(f"  {label:40} -> {type(e).__name__}: {e}")
    return ledger


def step_10_commands():
    """Drive the same year with text commands."""
    step_header(10, "Command Input",
        "Replay the year from text commands, the way the CLI does.")

    lines = [f"ALLOCATE {' '.join(CONFIG.allocation)}", f"SIP {' '.join(CONFIG.sip)}"]
    for month, rates in CONFIG.rates.items():
        lines.append(f"CHANGE {' '.join(rates)} {month.name}")
    lines += ["BALANCE MARCH", "REBALANCE"]

    processor = CommandProcessor(verbose=True)
    for line in lines:
        output = processor.process(line)
        print(f"  {line:45} {output or ''}")


def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       MYMONEY PORTFOLIO LEDGER - INTERACTIVE TUTORIAL")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")

    wait_for_enter()

    ledger = step_01_empty_ledger()
    wait_for_enter()
    ledger = step_02_allocate(ledger)
    wait_for_enter()
    ledger = step_03_sip(ledger)
    wait_for_enter()
    ledger = step_04_rates(ledger)
    wait_for_enter()
    ledger = step_05_balance(ledger)
    wait_for_enter()
    ledger = step_06_cache(ledger)
    wait_for_enter()
    ledger = step_07_too_early(ledger)
    wait_for_enter()
    ledger = step_08_june(ledger)
    wait_for_enter()
    step_09_rejections(ledger)
    wait_for_enter()
    step_10_commands()

    print(f"\n{'='*70}")
    print("TUTORIAL COMPLETE")
    print(f"{'='*70}")
    print("""
    Next steps:
      - Run a command file: python -m mymoney tests/fixtures/input_reference.txt
      - Try the prompt:     python -m mymoney --shell
      - Run tests:          pytest tests/
    """)


if __name__ == "__main__":
    main()
