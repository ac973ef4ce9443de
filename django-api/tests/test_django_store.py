"""Tests for the Django ORM stores.

Run with: pytest tests/test_django_store.py -v
"""

from datetime import date
from decimal import Decimal

import pytest

from scheduling import models as orm
from scheduling.domain import (
    CouponDetail,
    Interval,
    LineKind,
    Money,
    Percentage,
    PriceLine,
    PriceList,
    PriceListId,
    PromotionLine,
    Quantity,
    StackingRule,
    Voucher,
    VoucherId,
    VoucherStatus,
)
from scheduling.domain.errors import PromotionLineNotFoundError, VoucherNotFoundError, WriteConflictError
from scheduling.stores.django_store import DjangoPriceListStore, DjangoVoucherStore


def price_list(code: str, start: date, end: date) -> PriceList:
    return PriceList(
        id=PriceListId.generate(),
        code=code,
        name=code.title(),
        interval=Interval(start=start, end=end),
        lines=(PriceLine(kind=LineKind.TICKET, price=Money(Decimal("80000.00")), seat_type="vip"),),
    )


def voucher(code: str) -> Voucher:
    return Voucher(
        id=VoucherId.generate(),
        code=code,
        name=code,
        interval=Interval(start=date(2024, 1, 1), end=date(2024, 1, 31)),
        status=VoucherStatus.ENABLED,
    )


def coupon_line(code: str) -> PromotionLine:
    return PromotionLine(
        code=code,
        interval=Interval(start=date(2024, 1, 5), end=date(2024, 1, 10)),
        status=VoucherStatus.ENABLED,
        rule=StackingRule(),
        detail=CouponDetail(
            points_cost=Quantity(100),
            quantity=Quantity(20),
            total_quantity=Quantity(20),
            percent=Percentage(Decimal("15")),
            max_discount_value=Money(Decimal("30000")),
        ),
    )


@pytest.mark.django_db
class TestDjangoPriceListStore:
    def test_create_and_read_back(self):
        store = DjangoPriceListStore()
        created = store.create_price_list(price_list("JAN", date(2024, 1, 1), date(2024, 1, 31)))
        assert created.lines[0].price == Money(Decimal("80000.00"))
        assert store.code_exists("JAN")
        assert [pl.code for pl in store.list_price_lists()] == ["JAN"]

    def test_overlapping_insert_is_rejected(self):
        store = DjangoPriceListStore()
        existing = store.create_price_list(price_list("JAN", date(2024, 1, 1), date(2024, 1, 31)))
        with pytest.raises(WriteConflictError) as exc_info:
            store.create_price_list(price_list("MID", date(2024, 1, 31), date(2024, 2, 10)))
        assert exc_info.value.conflicting_ids == (existing.id.value,)
        assert orm.PriceList.objects.count() == 1

    def test_split_is_atomic(self):
        store = DjangoPriceListStore()
        source = store.create_price_list(price_list("JAN", date(2024, 1, 1), date(2024, 1, 31)))
        store.create_price_list(price_list("FEB", date(2024, 2, 1), date(2024, 2, 28)))
        with pytest.raises(WriteConflictError):
            store.split_price_list(
                source.id, date(2024, 1, 20), price_list("BAD", date(2024, 1, 21), date(2024, 2, 5))
            )
        assert store.get_price_list(source.id).interval.end == date(2024, 1, 31)
        assert not store.code_exists("BAD")

    def test_gap_detection(self):
        store = DjangoPriceListStore()
        store.create_price_list(price_list("JAN", date(2024, 1, 1), date(2024, 1, 10)))
        store.create_price_list(price_list("FEB", date(2024, 1, 15), date(2024, 1, 20)))
        assert store.detect_time_gaps().gaps == (Interval(start=date(2024, 1, 11), end=date(2024, 1, 14)),)

    def test_delete_missing_returns_false(self):
        assert DjangoPriceListStore().delete_price_list(PriceListId.generate()) is False


@pytest.mark.django_db
class TestDjangoVoucherStore:
    def test_status_update(self):
        store = DjangoVoucherStore()
        created = store.create_voucher(voucher("KM001"))
        store.update_voucher_status(created.id, VoucherStatus.DISABLED)
        assert store.get_voucher(created.id).status is VoucherStatus.DISABLED

    def test_status_update_missing_voucher(self):
        with pytest.raises(VoucherNotFoundError):
            DjangoVoucherStore().update_voucher_status(VoucherId.generate(), VoucherStatus.DISABLED)

    def test_promotion_line_round_trip_and_upsert(self):
        store = DjangoVoucherStore()
        created = store.create_voucher(voucher("KM001"))
        line = coupon_line("1234567890")
        assert store.save_promotion_line(created.id, line).lines == (line,)
        disabled = PromotionLine(
            code=line.code, interval=line.interval, status=VoucherStatus.DISABLED, rule=line.rule, detail=line.detail
        )
        assert store.save_promotion_line(created.id, disabled).lines == (disabled,)
        assert store.line_code_exists("1234567890")

    def test_delete_voucher_cascades_to_lines(self):
        store = DjangoVoucherStore()
        created = store.create_voucher(voucher("KM001"))
        store.save_promotion_line(created.id, coupon_line("1234567890"))
        assert store.delete_voucher(created.id) is True
        assert orm.PromotionLine.objects.count() == 0

    def test_delete_missing_line(self):
        store = DjangoVoucherStore()
        created = store.create_voucher(voucher("KM001"))
        with pytest.raises(PromotionLineNotFoundError):
            store.delete_promotion_line(created.id, "0000000000")
