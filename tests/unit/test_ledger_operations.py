"""
test_ledger_operations.py - Unit tests for PortfolioLedger registration

Tests:
- allocate: holdings, desired weights, precondition violations
- init_sip: write-once schedule, completeness
- change: month parsing, write-once rates, completeness, check order
- Read-only view: NotAllocated guard, copies, clone independence
"""

import pytest
from decimal import Decimal

from mymoney import (
    AlreadyAllocated, AlreadyRegisteredContribution, AssetClass,
    DuplicateMonthRate, IncompleteAllocation, IncompleteContribution,
    InvalidRateInput, Month, NotAllocated, PortfolioLedger, PortfolioView,
    ZeroAllocation,
)
from tests.builders import by_class, EQUITY, DEBT, GOLD


class TestAllocate:
    """Tests for the initial allocation."""

    def test_creates_holdings(self, empty_ledger):
        empty_ledger.allocate(by_class("6000", "3000", "1000"))
        assert empty_ledger.is_allocated
        assert empty_ledger.get_holdings() == by_class(Decimal("6000"), Decimal("3000"), Decimal("1000"))
        assert empty_ledger.total_investment == Decimal("10000")

    def test_desired_weights(self, empty_ledger):
        empty_ledger.allocate(by_class(6000, 3000, 1000))
        assert empty_ledger.get_desired_weights() == by_class(Decimal("60"), Decimal("30"), Decimal("10"))

    def test_weights_floor_and_may_sum_below_hundred(self, empty_ledger):
        empty_ledger.allocate(by_class(1000, 1000, 1000))
        weights = empty_ledger.get_desired_weights()
        assert weights == by_class(Decimal("33"), Decimal("33"), Decimal("33"))
        assert sum(weights.values()) == Decimal("99")

    def test_weights_keep_fractional_scale(self, empty_ledger):
        empty_ledger.allocate(by_class("50.0", "30.0", "20.0"))
        weights = empty_ledger.get_desired_weights()
        assert str(weights[EQUITY]) == "50.0"
        assert sum(weights.values()) == Decimal("100")

    def test_name_keys(self, empty_ledger):
        empty_ledger.allocate({"gold": 1000, "equity": 6000, "debt": 3000})
        assert empty_ledger.get_holding(GOLD) == Decimal("1000")

    def test_zero_holding_allowed(self, empty_ledger):
        empty_ledger.allocate(by_class(1000, 0, 0))
        assert empty_ledger.get_desired_weights()[EQUITY] == Decimal("100")
        assert empty_ledger.get_holding(DEBT) == Decimal("0")

    def test_twice_rejected(self, empty_ledger):
        empty_ledger.allocate(by_class(6000, 3000, 1000))
        with pytest.raises(AlreadyAllocated):
            empty_ledger.allocate(by_class(1, 1, 1))
        assert empty_ledger.get_holding(EQUITY) == Decimal("6000")

    def test_missing_class_rejected(self, empty_ledger):
        with pytest.raises(IncompleteAllocation):
            empty_ledger.allocate({EQUITY: 6000, DEBT: 3000})
        assert not empty_ledger.is_allocated

    def test_unknown_class_rejected(self, empty_ledger):
        with pytest.raises(IncompleteAllocation):
            empty_ledger.allocate({"EQUITY": 1, "DEBT": 1, "GOLD": 1, "SILVER": 1})
        assert not empty_ledger.is_allocated

    def test_non_numeric_rejected(self, empty_ledger):
        with pytest.raises(IncompleteAllocation):
            empty_ledger.allocate(by_class("6000", "lots", "1000"))
        assert not empty_ledger.is_allocated

    def test_none_rejected(self, empty_ledger):
        with pytest.raises(IncompleteAllocation):
            empty_ledger.allocate(None)

    def test_zero_total_rejected(self, empty_ledger):
        with pytest.raises(ZeroAllocation):
            empty_ledger.allocate(by_class(0, 0, 0))
        assert not empty_ledger.is_allocated
        assert empty_ledger.get_desired_weights() == {}


class TestInitSip:
    """Tests for the contribution schedule."""

    def test_registers(self, empty_ledger):
        empty_ledger.init_sip(by_class("2000", "1000", "500"))
        assert empty_ledger.get_contributions() == by_class(Decimal("2000"), Decimal("1000"), Decimal("500"))

    def test_before_allocation_allowed(self, empty_ledger):
        empty_ledger.init_sip(by_class(1, 2, 3))
        assert not empty_ledger.is_allocated

    def test_twice_rejected(self, allocated_ledger):
        with pytest.raises(AlreadyRegisteredContribution):
            allocated_ledger.init_sip(by_class(1, 1, 1))
        assert allocated_ledger.get_contributions()[EQUITY] == Decimal("2000")

    def test_already_registered_checked_first(self, allocated_ledger):
        with pytest.raises(AlreadyRegisteredContribution):
            allocated_ledger.init_sip({EQUITY: 1})

    def test_incomplete_rejected(self, empty_ledger):
        with pytest.raises(IncompleteContribution):
            empty_ledger.init_sip({EQUITY: 1, GOLD: 1})
        assert empty_ledger.get_contributions() == {}

    def test_rejected_schedule_can_be_retried(self, empty_ledger):
        with pytest.raises(IncompleteContribution):
            empty_ledger.init_sip({EQUITY: 1})
        empty_ledger.init_sip(by_class(1, 1, 1))
        assert empty_ledger.get_contributions()[EQUITY] == Decimal("1")


class TestChange:
    """Tests for monthly rate registration."""

    def test_registers_floats(self, allocated_ledger):
        allocated_ledger.change(by_class("4.00%", "10.00%", "2.00%"), Month.JANUARY)
        assert allocated_ledger.get_rates(Month.JANUARY) == by_class(4.0, 10.0, 2.0)
        assert allocated_ledger.registered_months() == (Month.JANUARY,)

    def test_month_by_name_or_number(self, allocated_ledger):
        allocated_ledger.change(by_class(1, 1, 1), "march")
        allocated_ledger.change(by_class(1, 1, 1), 2)
        assert allocated_ledger.registered_months() == (Month.FEBRUARY, Month.MARCH)

    def test_before_allocation_allowed(self, empty_ledger):
        empty_ledger.change(by_class(1, 1, 1), Month.JANUARY)
        assert Month.JANUARY in empty_ledger.registered_months()

    def test_missing_rates_rejected(self, allocated_ledger):
        with pytest.raises(InvalidRateInput, match="missing"):
            allocated_ledger.change(None, Month.JANUARY)

    def test_missing_month_rejected(self, allocated_ledger):
        with pytest.raises(InvalidRateInput, match="missing"):
            allocated_ledger.change(by_class(1, 1, 1), None)

    def test_unknown_month_rejected(self, allocated_ledger):
        with pytest.raises(InvalidRateInput):
            allocated_ledger.change(by_class(1, 1, 1), "SMARCH")
        assert allocated_ledger.registered_months() == ()

    def test_incomplete_rejected(self, allocated_ledger):
        with pytest.raises(InvalidRateInput):
            allocated_ledger.change({EQUITY: 1, DEBT: 1}, Month.JANUARY)
        assert allocated_ledger.registered_months() == ()

    def test_non_finite_rejected(self, allocated_ledger):
        with pytest.raises(InvalidRateInput):
            allocated_ledger.change(by_class("nan", 1, 1), Month.JANUARY)

    def test_duplicate_rejected(self, allocated_ledger):
        allocated_ledger.change(by_class(4, 10, 2), Month.JANUARY)
        with pytest.raises(DuplicateMonthRate):
            allocated_ledger.change(by_class(5, 5, 5), Month.JANUARY)
        assert allocated_ledger.get_rates(Month.JANUARY) == by_class(4.0, 10.0, 2.0)

    def test_duplicate_checked_before_completeness(self, allocated_ledger):
        allocated_ledger.change(by_class(4, 10, 2), Month.JANUARY)
        with pytest.raises(DuplicateMonthRate):
            allocated_ledger.change({EQUITY: 5}, Month.JANUARY)

    def test_get_rates_for_unregistered_month_raises(self, allocated_ledger):
        with pytest.raises(KeyError):
            allocated_ledger.get_rates(Month.JUNE)


class TestReadOnlyView:
    """Tests for the PortfolioView side of the ledger."""

    def test_implements_protocol(self, empty_ledger):
        assert isinstance(empty_ledger, PortfolioView)

    def test_get_holding_before_allocation_raises(self, empty_ledger):
        with pytest.raises(NotAllocated):
            empty_ledger.get_holding(EQUITY)

    def test_get_holdings_returns_copy(self, allocated_ledger):
        allocated_ledger.get_holdings()[EQUITY] = Decimal("0")
        assert allocated_ledger.get_holding(EQUITY) == Decimal("6000")

    def test_snapshot_absent_before_balance(self, allocated_ledger):
        assert allocated_ledger.get_snapshot(Month.JANUARY) is None
        with pytest.raises(KeyError):
            allocated_ledger.get_snapshot_amounts(Month.JANUARY)

    def test_asset_classes(self, empty_ledger):
        assert empty_ledger.asset_classes == (AssetClass.EQUITY, AssetClass.DEBT, AssetClass.GOLD)

    def test_repr(self, allocated_ledger):
        assert repr(allocated_ledger) == (
            "PortfolioLedger('test', Portfolio(EQUITY=6000, DEBT=3000, GOLD=1000), "
            "rates=0, cached=0)"
        )


class TestClone:
    """Tests for ledger cloning."""

    def test_clone_is_independent(self, reference_ledger):
        reference_ledger.balance(Month.JANUARY)
        cloned = reference_ledger.clone()

        cloned.balance(Month.MARCH)
        assert cloned.cached_months() == (Month.JANUARY, Month.FEBRUARY, Month.MARCH)
        assert reference_ledger.cached_months() == (Month.JANUARY,)
        assert reference_ledger.get_holding(EQUITY) == Decimal("6240.0")

    def test_clone_registrations_independent(self, allocated_ledger):
        cloned = allocated_ledger.clone()
        cloned.change(by_class(1, 1, 1), Month.JANUARY)
        assert allocated_ledger.registered_months() == ()

    def test_clone_of_verbose_ledger_keeps_name(self):
        ledger = PortfolioLedger("noisy", verbose=True)
        cloned = ledger.clone()
        assert cloned.name == "noisy"
        assert cloned.verbose
