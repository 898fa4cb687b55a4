"""
commands.py - Line-oriented command interpreter

Translates one line of text into one call against a PortfolioLedger and
formats its result:

    ALLOCATE 6000 3000 1000           -> allocate()    no output
    SIP 2000 1000 500                 -> init_sip()    no output
    CHANGE 4.00% 10.00% 2.00% JANUARY -> change()      no output
    BALANCE MARCH                     -> balance()     "10593 7897 2272"
    REBALANCE                         -> rebalance()   amounts or CANNOT_REBALANCE

Positional amounts and rates are zipped to the AssetClass registry order.
A line that fails is reported and skipped; later lines still run.
"""

from __future__ import annotations
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import sys

from .core import (
    ASSET_CLASSES, AssetClass, Month, PortfolioError,
    format_amounts, to_amount, to_rate,
)
from .engine import PortfolioLedger


class CommandError(PortfolioError):
    """Raised when a command line is malformed."""
    pass


class Command(Enum):
    ALLOCATE = "ALLOCATE"
    SIP = "SIP"
    CHANGE = "CHANGE"
    BALANCE = "BALANCE"
    REBALANCE = "REBALANCE"


def parse_line(line: str) -> Tuple[Command, List[str]]:
    """
    Split a command line into its verb and argument tokens.

    Raises:
        CommandError: If the line is empty or the verb is unknown
    """
    tokens = line.split()
    if not tokens:
        raise CommandError("Empty command")
    try:
        command = Command[tokens[0].upper()]
    except KeyError:
        raise CommandError(f"Invalid command {tokens[0]!r}") from None
    return command, tokens[1:]


def _expect_args(command: Command, args: Sequence[str], count: int) -> None:
    if len(args) != count:
        raise CommandError(
            f"{command.value} expects {count} argument(s), got {len(args)}"
        )


def _zip_registry(values: Sequence[Any]) -> Dict[AssetClass, Any]:
    return dict(zip(ASSET_CLASSES, values))


def _parse_amounts(tokens: Sequence[str]) -> List[Decimal]:
    try:
        return [to_amount(token) for token in tokens]
    except ValueError as e:
        raise CommandError(str(e)) from None


def _parse_rates(tokens: Sequence[str]) -> List[float]:
    try:
        return [to_rate(token) for token in tokens]
    except ValueError as e:
        raise CommandError(str(e)) from None


def _parse_month(token: str) -> Month:
    try:
        return Month.parse(token)
    except ValueError as e:
        raise CommandError(str(e)) from None


class CommandProcessor:
    """
    Runs command lines against one PortfolioLedger.

    Every failed line is recorded in `errors` as (line, error) and, when
    verbose, reported on stderr. It never stops the run.

    Example:
        processor = CommandProcessor()
        processor.process("ALLOCATE 6000 3000 1000")   # None
        processor.process("BALANCE JANUARY")           # None, no rates yet
        processor.errors[-1]                           # ("BALANCE JANUARY", MissingRateForMonth(...))
    """

    def __init__(self, ledger: Optional[PortfolioLedger] = None, verbose: bool = True):
        """
        Args:
            ledger: Ledger to drive (default: a fresh PortfolioLedger)
            verbose: Report rejected lines on stderr (default: True)
        """
        self.ledger = ledger if ledger is not None else PortfolioLedger()
        self.verbose = verbose
        self.errors: List[Tuple[str, PortfolioError]] = []

    def execute(self, line: str) -> Optional[str]:
        """
        Run one command line.

        Returns:
            The output line, or None for commands without output

        Raises:
            PortfolioError: If the line is malformed or the ledger rejects it
        """
        command, args = parse_line(line)
        n = len(ASSET_CLASSES)

        if command is Command.ALLOCATE:
            _expect_args(command, args, n)
            self.ledger.allocate(_zip_registry(_parse_amounts(args)))
            return None
        if command is Command.SIP:
            _expect_args(command, args, n)
            self.ledger.init_sip(_zip_registry(_parse_amounts(args)))
            return None
        if command is Command.CHANGE:
            _expect_args(command, args, n + 1)
            rates = _parse_rates(args[:n])
            month = _parse_month(args[n])
            self.ledger.change(_zip_registry(rates), month)
            return None
        if command is Command.BALANCE:
            _expect_args(command, args, 1)
            return format_amounts(self.ledger.balance(_parse_month(args[0])))
        if command is Command.REBALANCE:
            _expect_args(command, args, 0)
            return self.ledger.rebalance().format()
        raise CommandError(f"Unhandled command {command.value}")

    def process(self, line: str) -> Optional[str]:
        """
        Run one command line, reporting instead of raising on failure.

        Returns:
            The output line, or None when the command has no output or failed
        """
        try:
            return self.execute(line)
        except PortfolioError as e:
            self.errors.append((line.strip(), e))
            if self.verbose:
                print(f"✗ REJECTED: {line.strip()}: {e}", file=sys.stderr)
            return None

    def process_lines(self, lines: Iterable[str]) -> List[Optional[str]]:
        """Run every non-blank line, returning one result per line run."""
        return [self.process(line) for line in lines if line.strip()]

    def process_file(self, path) -> List[str]:
        """
        Run every command in a file.

        Returns:
            The output lines, in order (commands without output are skipped)

        Raises:
            OSError: If the file cannot be read
        """
        with Path(path).open(encoding="utf-8") as f:
            results = self.process_lines(f)
        return [result for result in results if result is not None]


def run_commands(lines: Iterable[str], verbose: bool = False) -> List[str]:
    """Run lines against a fresh ledger and return the output lines."""
    processor = CommandProcessor(verbose=verbose)
    return [r for r in processor.process_lines(lines) if r is not None]

