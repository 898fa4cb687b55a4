"""
Core types and pure functions for the portfolio ledger.

This module provides the foundational pieces every other module builds on:
1. Exact arithmetic: unbounded-scale add and multiply for holdings
2. Registries and constants: AssetClass, Month, rebalance thresholds
3. Exceptions: PortfolioError and the precondition violations it covers
4. Protocols: PortfolioView for read-only access to a ledger
5. Decimal helpers: exact floor division, rate conversion, output formatting

All functions in this module are pure.
"""

from __future__ import annotations
from decimal import (
    MAX_EMAX, MIN_EMIN, Context, Decimal, InvalidOperation,
)
from enum import Enum, IntEnum
from fractions import Fraction
import math
from typing import (
    Any, Dict, Iterable, Iterator, Mapping, Optional, Protocol, Sequence, Tuple,
    Type, runtime_checkable,
)


# ============================================================================
# EXACT ARITHMETIC
# ============================================================================
#
# Holding arithmetic must be exact. Each month multiplies an amount by a
# percentage and keeps every fractional digit, so the scale of an amount grows
# as the year advances, without bound for rates with many fractional digits.
# No fixed decimal precision is wide enough for that, so holdings are added
# and multiplied on their integer coefficients instead of through a decimal
# context. The result scales match decimal arithmetic: a sum keeps the finest
# exponent of its terms and a product adds the exponents of its factors.
#

def _scaled(value: Decimal) -> Tuple[int, int]:
    """Split a finite Decimal into (integer coefficient, exponent)."""
    exponent = value.as_tuple().exponent
    return int(Fraction(value) / Fraction(10) ** exponent), exponent


def _unscaled(coefficient: int, exponent: int) -> Decimal:
    """Build coefficient * 10**exponent, keeping every digit of coefficient."""
    value = Decimal(coefficient)
    context = Context(prec=value.adjusted() + 1, Emax=MAX_EMAX, Emin=MIN_EMIN)
    return value.scaleb(exponent, context)


def exact_add(a: Decimal, b: Decimal) -> Decimal:
    """Exact a + b, at the finer of the two exponents."""
    (ca, ea), (cb, eb) = _scaled(a), _scaled(b)
    exponent = min(ea, eb)
    return _unscaled(ca * 10 ** (ea - exponent) + cb * 10 ** (eb - exponent), exponent)


def exact_sum(values: Iterable[Decimal]) -> Decimal:
    """Exact sum of values, starting from Decimal("0") like sum()."""
    total = Decimal("0")
    for value in values:
        total = exact_add(total, value)
    return total


def exact_multiply(a: Decimal, b: Decimal) -> Decimal:
    """Exact a * b, whose exponent is the sum of the operands' exponents."""
    (ca, ea), (cb, eb) = _scaled(a), _scaled(b)
    return _unscaled(ca * cb, ea + eb)


# ============================================================================
# CONSTANTS
# ============================================================================

# Rates and weights are percentages.
PERCENT = Decimal("100")

# Number of registered rate months before a rebalance is allowed.
REBALANCE_MIN_MONTHS = 6

MONTHS_IN_YEAR = 12

# Result text for a rebalance requested before enough history exists.
CANNOT_REBALANCE = "CANNOT_REBALANCE"


# ============================================================================
# REGISTRIES
# ============================================================================

class AssetClass(Enum):
    """
    Tracked asset categories.

    Declaration order is significant: it is the column order of every output
    line and the order positional command arguments are zipped to.
    """
    EQUITY = "EQUITY"
    DEBT = "DEBT"
    GOLD = "GOLD"

    @classmethod
    def parse(cls, name: str) -> AssetClass:
        """Look up an asset class by name, ignoring case."""
        try:
            return cls[name.strip().upper()]
        except (KeyError, AttributeError):
            raise ValueError(f"Unknown asset class: {name!r}") from None


class Month(IntEnum):
    """Calendar months of the simulated year."""
    JANUARY = 1
    FEBRUARY = 2
    MARCH = 3
    APRIL = 4
    MAY = 5
    JUNE = 6
    JULY = 7
    AUGUST = 8
    SEPTEMBER = 9
    OCTOBER = 10
    NOVEMBER = 11
    DECEMBER = 12

    @classmethod
    def parse(cls, value: Any) -> Month:
        """
        Coerce a Month, a month number (1-12) or a month name to a Month.

        Raises:
            ValueError: If the value does not name a month
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise ValueError(f"Month number out of range: {value}") from None
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise ValueError(f"Unknown month: {value!r}")


ASSET_CLASSES: Tuple[AssetClass, ...] = tuple(AssetClass)
FIRST_MONTH = Month.JANUARY


def months_through(month: Month) -> Iterator[Month]:
    """Yield every month from January up to and including month."""
    for number in range(FIRST_MONTH, month + 1):
        yield Month(number)


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Amount per asset class (allocation, contribution, holdings, weights).
AmountMap = Dict[AssetClass, Decimal]

# Percentage rate of change per asset class for one month.
RateMap = Dict[AssetClass, float]


# ============================================================================
# EXCEPTIONS
# ============================================================================

class PortfolioError(Exception):
    """Base exception for all portfolio ledger errors."""
    pass


class AlreadyAllocated(PortfolioError):
    """Raised when allocate() is called on a portfolio that already holds funds."""
    pass


class IncompleteAllocation(PortfolioError):
    """Raised when an allocation does not cover exactly the registered asset classes."""
    pass


class ZeroAllocation(PortfolioError):
    """Raised when an allocation totals zero, leaving desired weights undefined."""
    pass


class NotAllocated(PortfolioError):
    """Raised when an operation needs holdings but nothing was allocated yet."""
    pass


class AlreadyRegisteredContribution(PortfolioError):
    """Raised when a monthly contribution schedule is registered a second time."""
    pass


class IncompleteContribution(PortfolioError):
    """Raised when a contribution schedule does not cover exactly the registered asset classes."""
    pass


class DuplicateMonthRate(PortfolioError):
    """Raised when rates for a month that already has rates are registered again."""
    pass


class InvalidRateInput(PortfolioError):
    """Raised when a rate registration is missing arguments or does not cover every asset class."""
    pass


class MissingRateForMonth(PortfolioError):
    """Raised when a balance must advance through a month that has no registered rates."""

    def __init__(self, month: Month):
        self.month = month
        super().__init__(f"No rate of change registered for {month.name}")


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class PortfolioView(Protocol):
    """
    Read-only interface to ledger state.

    Analytics and reporting functions accept a PortfolioView to declare that
    they never mutate the ledger. PortfolioLedger implements this protocol;
    tests use a FakePortfolioView.
    """

    @property
    def asset_classes(self) -> Tuple[AssetClass, ...]:
        """Registered asset classes, in output order."""
        ...

    def get_holdings(self) -> AmountMap:
        """Return a copy of the current amount invested per asset class."""
        ...

    def get_desired_weights(self) -> AmountMap:
        """Return a copy of the target percentage per asset class."""
        ...

    def cached_months(self) -> Tuple[Month, ...]:
        """Return the months with a cached month-end snapshot, ascending."""
        ...

    def get_snapshot_amounts(self, month: Month) -> AmountMap:
        """Return the cached month-end amounts for month."""
        ...


# ============================================================================
# DECIMAL HELPERS
# ============================================================================

def to_amount(value: Any) -> Decimal:
    """
    Convert a value to a finite Decimal amount.

    Strings and ints convert exactly; floats go through their shortest text
    form so 0.1 becomes Decimal("0.1").

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not an amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not an amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    return amount


def to_rate(value: Any) -> float:
    """
    Convert a percentage to the float a rate ledger stores.

    A trailing "%" on string input is stripped.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a rate: {value!r}")
    if isinstance(value, str):
        value = value.strip().removesuffix("%")
    try:
        rate = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Not a rate: {value!r}") from None
    if not math.isfinite(rate):
        raise ValueError(f"Rate must be finite, got {value!r}")
    return rate


def rate_to_decimal(rate: float) -> Decimal:
    """
    Convert a stored rate to Decimal through its shortest round-trip text.

    The text form fixes the decimal scale: 4.0 becomes Decimal("4.0") and
    12.5 becomes Decimal("12.5"). That scale takes part in floor_divide().
    """
    return Decimal(repr(float(rate)))


def floor_divide(dividend: Decimal, divisor: Decimal) -> Decimal:
    """
    Divide and floor toward negative infinity at the dividend's scale.

    The quotient keeps as many fractional digits as the dividend carries and
    everything beyond them is floored away, exactly:

        floor_divide(Decimal("87750.0"), Decimal("100"))  -> Decimal("877.5")
        floor_divide(Decimal("-26692.50"), Decimal("100")) -> Decimal("-266.93")
        floor_divide(Decimal("-1000"), Decimal("100"))     -> Decimal("-10")

    Args:
        dividend: Finite Decimal
        divisor: Finite, non-zero Decimal

    Returns:
        Floored quotient with the dividend's exponent

    Raises:
        ZeroDivisionError: If divisor is zero
    """
    if not divisor:
        raise ZeroDivisionError("floor_divide() by zero")
    exponent = dividend.as_tuple().exponent
    quotient = Fraction(dividend) / Fraction(divisor)
    units = math.floor(quotient / Fraction(10) ** exponent)
    return _unscaled(units, exponent)


def floor_amounts(amounts: Sequence[Decimal]) -> Tuple[int, ...]:
    """Floor each amount to an int."""
    return tuple(math.floor(amount) for amount in amounts)


def format_amounts(amounts: Sequence[int]) -> str:
    """Render amounts as one space-separated output line."""
    return " ".join(str(amount) for amount in amounts)


def coerce_asset_mapping(
    values: Optional[Mapping[Any, Any]],
    convert,
    error: Type[PortfolioError],
    what: str,
) -> Dict[AssetClass, Any]:
    """
    Validate that values covers exactly the registered asset classes.

    Keys may be AssetClass members or asset-class names. Each value is passed
    through convert. The result is ordered by the registry.

    Raises:
        error: If values is missing, names an unknown asset class, does not
               cover every asset class exactly once, or holds a value convert
               rejects
    """
    if values is None:
        raise error(f"No {what} supplied")
    converted: Dict[AssetClass, Any] = {}
    for key, value in values.items():
        try:
            asset_class = key if isinstance(key, AssetClass) else AssetClass.parse(key)
            if asset_class in converted:
                raise ValueError(f"{asset_class.name} given more than once")
            converted[asset_class] = convert(value)
        except ValueError as e:
            raise error(f"Invalid {what}: {e}") from None
    if set(converted) != set(ASSET_CLASSES):
        expected = ", ".join(a.name for a in ASSET_CLASSES)
        raise error(f"Please supply {what} for every asset class ({expected})")
    return {asset_class: converted[asset_class] for asset_class in ASSET_CLASSES}
