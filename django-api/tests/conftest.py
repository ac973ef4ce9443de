"""Pytest configuration and shared fixtures."""

from dataclasses import replace
from datetime import date

import pytest
from rest_framework.test import APIClient

from scheduling.domain import (
    Interval,
    PriceList,
    PriceListId,
    PromotionLine,
    Voucher,
    VoucherId,
    VoucherStatus,
)
from scheduling.domain.errors import PromotionLineNotFoundError, VoucherNotFoundError, WriteConflictError
from scheduling.stores.interfaces import PriceListStore, VoucherStore


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


def make_price_list(value: str, start: date, end: date, code: str | None = None, lines=()) -> PriceList:
    return PriceList(
        id=PriceListId(value),
        code=code or value.upper(),
        name=f"Price list {value}",
        interval=Interval(start=start, end=end),
        lines=tuple(lines),
    )


def make_voucher(
    value: str,
    start: date,
    end: date,
    status: VoucherStatus = VoucherStatus.ENABLED,
    code: str | None = None,
    lines=(),
) -> Voucher:
    return Voucher(
        id=VoucherId(value),
        code=code or value.upper(),
        name=f"Voucher {value}",
        interval=Interval(start=start, end=end),
        status=status,
        lines=tuple(lines),
    )


class InMemoryPriceListStore(PriceListStore):
    """Dict-backed store that enforces the same non-overlap rule as the database."""

    def __init__(self, price_lists=()):
        self.rows = {pl.id: pl for pl in price_lists}

    def _colliding(self, interval, exclude=()):
        return [str(pl.id) for pl in self.rows.values() if pl.id not in exclude and pl.interval.overlaps(interval)]

    def list_price_lists(self):
        return sorted(self.rows.values(), key=lambda pl: pl.interval.start)

    def get_price_list(self, price_list_id):
        return self.rows.get(price_list_id)

    def code_exists(self, code):
        return any(pl.code == code for pl in self.rows.values())

    def create_price_list(self, price_list):
        colliding = self._colliding(price_list.interval)
        if colliding:
            raise WriteConflictError(colliding)
        self.rows[price_list.id] = price_list
        return price_list

    def update_price_list_interval(self, price_list_id, new_end):
        current = self.rows[price_list_id]
        interval = current.interval.with_end(new_end)
        colliding = self._colliding(interval, exclude=(price_list_id,))
        if colliding:
            raise WriteConflictError(colliding)
        self.rows[price_list_id] = replace(current, interval=interval)
        return self.rows[price_list_id]

    def delete_price_list(self, price_list_id):
        return self.rows.pop(price_list_id, None) is not None

    def split_price_list(self, price_list_id, old_end, successor):
        source = self.rows[price_list_id]
        shortened = replace(source, interval=source.interval.with_end(old_end))
        colliding = self._colliding(successor.interval, exclude=(price_list_id,))
        if colliding or shortened.interval.overlaps(successor.interval):
            raise WriteConflictError(colliding)
        self.rows[price_list_id] = shortened
        self.rows[successor.id] = successor
        return shortened, successor


class InMemoryVoucherStore(VoucherStore):
    """Dict-backed voucher store that records every status write."""

    def __init__(self, vouchers=()):
        self.rows = {v.id: v for v in vouchers}
        self.status_writes: list[tuple[VoucherId, VoucherStatus]] = []
        self.failing_ids: set[VoucherId] = set()

    def list_vouchers(self):
        return sorted(self.rows.values(), key=lambda v: v.id, reverse=True)

    def get_voucher(self, voucher_id):
        return self.rows.get(voucher_id)

    def voucher_code_exists(self, code):
        return any(v.code == code for v in self.rows.values())

    def create_voucher(self, voucher):
        self.rows[voucher.id] = voucher
        return voucher

    def update_voucher_status(self, voucher_id, status):
        if voucher_id in self.failing_ids:
            raise WriteConflictError((voucher_id.value,))
        if voucher_id not in self.rows:
            raise VoucherNotFoundError(voucher_id.value)
        self.status_writes.append((voucher_id, status))
        self.rows[voucher_id] = replace(self.rows[voucher_id], status=status)

    def delete_voucher(self, voucher_id):
        return self.rows.pop(voucher_id, None) is not None

    def line_code_exists(self, code):
        return any(line.code == code for v in self.rows.values() for line in v.lines)

    def save_promotion_line(self, voucher_id, line: PromotionLine):
        voucher = self.rows[voucher_id]
        lines = [existing for existing in voucher.lines if existing.code != line.code] + [line]
        self.rows[voucher_id] = replace(voucher, lines=tuple(lines))
        return self.rows[voucher_id]

    def delete_promotion_line(self, voucher_id, code):
        voucher = self.rows[voucher_id]
        if not any(line.code == code for line in voucher.lines):
            raise PromotionLineNotFoundError(code)
        self.rows[voucher_id] = replace(voucher, lines=tuple(line for line in voucher.lines if line.code != code))
        return self.rows[voucher_id]


@pytest.fixture
def price_list_store() -> InMemoryPriceListStore:
    return InMemoryPriceListStore()


@pytest.fixture
def voucher_store() -> InMemoryVoucherStore:
    return InMemoryVoucherStore()
