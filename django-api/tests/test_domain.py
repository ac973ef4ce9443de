"""Unit tests for domain primitives.

These test invariants that must hold at construction time.
Run with: pytest tests/test_domain.py -v
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from scheduling.domain import (
    AmountDetail,
    Interval,
    LineKind,
    Money,
    Percentage,
    PriceLine,
    PriceListId,
    Quantity,
    StackingPolicy,
    StackingRule,
    VoucherId,
)
from scheduling.domain.errors import DuplicateCodeError, ErrorCode, PlacementConflictError


class TestMoney:
    """Tests for Money value object."""

    def test_money_accepts_zero(self):
        assert Money(Decimal("0")).amount == Decimal("0")

    def test_money_rejects_negative_amount(self):
        with pytest.raises(ValueError):
            Money(Decimal("-0.01"))

    def test_money_str_format(self):
        """Money string representation is formatted to 2 decimal places."""
        assert str(Money(Decimal("45000"))) == "45000.00"


class TestQuantityAndPercentage:
    def test_quantity_rejects_negative_value(self):
        with pytest.raises(ValueError):
            Quantity(-1)

    @pytest.mark.parametrize("value", ["0", "12.5", "100"])
    def test_percentage_accepts_closed_range(self, value):
        assert Percentage(Decimal(value)).value == Decimal(value)

    def test_percentage_rejects_above_hundred(self):
        with pytest.raises(ValueError):
            Percentage(Decimal("100.01"))


class TestIdentifiers:
    """Tests for PriceListId and VoucherId."""

    def test_from_string_normalizes_case(self):
        parsed = VoucherId.from_string(" 65A1B2C3D4E5F60718293A4B ")
        assert parsed.value == "65a1b2c3d4e5f60718293a4b"

    def test_from_string_rejects_malformed_value(self):
        with pytest.raises(ValueError):
            PriceListId.from_string("not-an-id")

    def test_empty_value_rejected(self):
        with pytest.raises(ValueError):
            VoucherId("")

    def test_generated_ids_are_well_formed_and_distinct(self):
        first, second = PriceListId.generate(), PriceListId.generate()
        assert first != second
        assert PriceListId.from_string(first.value) == first

    def test_voucher_ids_order_lexicographically(self):
        assert VoucherId("A2") > VoucherId("A1")
        assert max(VoucherId("x1"), VoucherId("x2")) == VoucherId("x2")


class TestInterval:
    def test_rejects_start_after_end(self):
        with pytest.raises(ValueError):
            Interval(start=date(2024, 1, 10), end=date(2024, 1, 9))

    def test_single_day_interval(self):
        interval = Interval(start=date(2024, 1, 10), end=date(2024, 1, 10))
        assert interval.days == 1
        assert interval.contains(date(2024, 1, 10))

    def test_of_folds_timestamps_to_days(self):
        interval = Interval.of(datetime(2024, 1, 1, 23, 59), datetime(2024, 1, 3, 0, 1))
        assert interval == Interval(start=date(2024, 1, 1), end=date(2024, 1, 3))

    def test_str(self):
        assert str(Interval(start=date(2024, 1, 1), end=date(2024, 1, 5))) == "2024-01-01..2024-01-05"


class TestPriceLine:
    def test_ticket_line_requires_seat_type(self):
        with pytest.raises(ValueError):
            PriceLine(kind=LineKind.TICKET, price=Money(Decimal("50000")))

    def test_product_line_requires_product(self):
        with pytest.raises(ValueError):
            PriceLine(kind=LineKind.COMBO, price=Money(Decimal("50000")), product_id="C1")


class TestStackingRule:
    def test_exclusive_with_group_requires_group(self):
        with pytest.raises(ValueError):
            StackingRule(policy=StackingPolicy.EXCLUSIVE_WITH_GROUP)

    def test_stackable_rejects_group(self):
        with pytest.raises(ValueError):
            StackingRule(policy=StackingPolicy.STACKABLE, exclusion_group="weekend")


class TestPromotionDetails:
    def test_amount_requires_positive_discount(self):
        with pytest.raises(ValueError):
            AmountDetail(min_order_value=Money(Decimal("100000")), discount_value=Money(Decimal("0")))


class TestDomainErrors:
    def test_placement_conflict_carries_ids(self):
        error = PlacementConflictError(iter(["a", "b"]))
        assert error.code is ErrorCode.PLACEMENT_CONFLICT
        assert error.conflicting_ids == ("a", "b")

    def test_str_includes_code(self):
        assert str(DuplicateCodeError("BG01")) == "DUPLICATE_CODE: Code BG01 is already in use"
