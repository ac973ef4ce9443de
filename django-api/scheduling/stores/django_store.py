"""Django ORM implementation of the price list and voucher stores."""

import functools
import logging
from datetime import date
from decimal import Decimal

from django.db import DatabaseError, IntegrityError, transaction

from scheduling import models as orm
from scheduling.domain import (
    Interval,
    LineKind,
    Money,
    PriceLine,
    PriceList,
    PriceListId,
    PromotionLine,
    PromotionType,
    StackingPolicy,
    StackingRule,
    Voucher,
    VoucherId,
    VoucherStatus,
)
from scheduling.domain.errors import (
    PriceListNotFoundError,
    PromotionLineNotFoundError,
    StoreUnavailableError,
    VoucherNotFoundError,
    WriteConflictError,
)
from scheduling.domain.payloads import detail_from_dict, detail_to_dict
from scheduling.stores.interfaces import PriceListStore, VoucherStore

logger = logging.getLogger(__name__)


def _guarded(method):
    """Translate database failures into domain errors at the store boundary."""

    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except IntegrityError as exc:
            logger.warning("%s rejected by the database: %s", method.__name__, exc)
            raise WriteConflictError() from exc
        except DatabaseError as exc:
            logger.error("%s failed: %s", method.__name__, exc)
            raise StoreUnavailableError() from exc

    return wrapper


def _to_price_list(row: orm.PriceList) -> PriceList:
    return PriceList(
        id=PriceListId(row.id),
        code=row.code,
        name=row.name,
        description=row.description,
        interval=Interval(start=row.start_date, end=row.end_date),
        lines=tuple(
            PriceLine(
                kind=LineKind(line.kind),
                price=Money(Decimal(line.price)),
                seat_type=line.seat_type,
                product_id=line.product_id,
                product_name=line.product_name,
            )
            for line in row.lines.all()
        ),
    )


def _to_promotion_line(row: orm.PromotionLine) -> PromotionLine:
    promotion_type = PromotionType(row.promotion_type)
    return PromotionLine(
        code=row.code,
        interval=Interval(start=row.start_date, end=row.end_date),
        status=VoucherStatus(row.status),
        rule=StackingRule(
            policy=StackingPolicy(row.stacking_policy),
            exclusion_group=row.exclusion_group or None,
        ),
        detail=detail_from_dict(promotion_type, row.detail),
    )


def _to_voucher(row: orm.Voucher) -> Voucher:
    return Voucher(
        id=VoucherId(row.id),
        code=row.code,
        name=row.name,
        description=row.description,
        interval=Interval(start=row.start_date, end=row.end_date),
        status=VoucherStatus(row.status),
        lines=tuple(_to_promotion_line(line) for line in row.lines.all()),
    )


class DjangoPriceListStore(PriceListStore):
    """Relational price list store using Django ORM."""

    def _queryset(self):
        return orm.PriceList.objects.prefetch_related("lines")

    def _colliding_ids(self, interval: Interval, exclude: list[str]) -> list[str]:
        qs = orm.PriceList.objects.select_for_update().filter(
            start_date__lte=interval.end, end_date__gte=interval.start
        )
        return list(qs.exclude(pk__in=exclude).values_list("id", flat=True))

    def _insert(self, price_list: PriceList) -> None:
        row = orm.PriceList.objects.create(
            id=price_list.id.value,
            code=price_list.code,
            name=price_list.name,
            description=price_list.description,
            start_date=price_list.interval.start,
            end_date=price_list.interval.end,
        )
        orm.PriceLine.objects.bulk_create(
            orm.PriceLine(
                price_list=row,
                kind=line.kind.value,
                seat_type=line.seat_type,
                product_id=line.product_id,
                product_name=line.product_name,
                price=line.price.amount,
            )
            for line in price_list.lines
        )

    @_guarded
    def list_price_lists(self) -> list[PriceList]:
        return [_to_price_list(row) for row in self._queryset().order_by("start_date")]

    @_guarded
    def get_price_list(self, price_list_id: PriceListId) -> PriceList | None:
        row = self._queryset().filter(pk=price_list_id.value).first()
        return _to_price_list(row) if row else None

    @_guarded
    def code_exists(self, code: str) -> bool:
        return orm.PriceList.objects.filter(code=code).exists()

    @_guarded
    def create_price_list(self, price_list: PriceList) -> PriceList:
        with transaction.atomic():
            colliding = self._colliding_ids(price_list.interval, exclude=[])
            if colliding:
                raise WriteConflictError(colliding)
            self._insert(price_list)
        return self.get_price_list(price_list.id)

    @_guarded
    def update_price_list_interval(self, price_list_id: PriceListId, new_end: date) -> PriceList:
        with transaction.atomic():
            row = orm.PriceList.objects.select_for_update().filter(pk=price_list_id.value).first()
            if row is None:
                raise PriceListNotFoundError(price_list_id.value)
            interval = Interval(start=row.start_date, end=new_end)
            colliding = self._colliding_ids(interval, exclude=[row.pk])
            if colliding:
                raise WriteConflictError(colliding)
            row.end_date = new_end
            row.save(update_fields=["end_date", "updated_at"])
        return self.get_price_list(price_list_id)

    @_guarded
    def delete_price_list(self, price_list_id: PriceListId) -> bool:
        row = orm.PriceList.objects.filter(pk=price_list_id.value).first()
        if row is None:
            return False
        row.delete()
        return True

    @_guarded
    def split_price_list(
        self, price_list_id: PriceListId, old_end: date, successor: PriceList
    ) -> tuple[PriceList, PriceList]:
        with transaction.atomic():
            row = orm.PriceList.objects.select_for_update().filter(pk=price_list_id.value).first()
            if row is None:
                raise PriceListNotFoundError(price_list_id.value)
            row.end_date = old_end
            row.save(update_fields=["end_date", "updated_at"])
            colliding = self._colliding_ids(successor.interval, exclude=[])
            if colliding:
                raise WriteConflictError(colliding)
            self._insert(successor)
        return self.get_price_list(price_list_id), self.get_price_list(successor.id)


class DjangoVoucherStore(VoucherStore):
    """Relational voucher store using Django ORM."""

    def _queryset(self):
        return orm.Voucher.objects.prefetch_related("lines")

    def _row(self, voucher_id: VoucherId) -> orm.Voucher:
        row = orm.Voucher.objects.filter(pk=voucher_id.value).first()
        if row is None:
            raise VoucherNotFoundError(voucher_id.value)
        return row

    @_guarded
    def list_vouchers(self) -> list[Voucher]:
        return [_to_voucher(row) for row in self._queryset()]

    @_guarded
    def get_voucher(self, voucher_id: VoucherId) -> Voucher | None:
        row = self._queryset().filter(pk=voucher_id.value).first()
        return _to_voucher(row) if row else None

    @_guarded
    def voucher_code_exists(self, code: str) -> bool:
        return orm.Voucher.objects.filter(code=code).exists()

    @_guarded
    def create_voucher(self, voucher: Voucher) -> Voucher:
        orm.Voucher.objects.create(
            id=voucher.id.value,
            code=voucher.code,
            name=voucher.name,
            description=voucher.description,
            start_date=voucher.interval.start,
            end_date=voucher.interval.end,
            status=voucher.status.value,
        )
        return self.get_voucher(voucher.id)

    @_guarded
    def update_voucher_status(self, voucher_id: VoucherId, status: VoucherStatus) -> None:
        row = self._row(voucher_id)
        row.status = status.value
        row.save(update_fields=["status", "updated_at"])

    @_guarded
    def delete_voucher(self, voucher_id: VoucherId) -> bool:
        row = orm.Voucher.objects.filter(pk=voucher_id.value).first()
        if row is None:
            return False
        row.delete()
        return True

    @_guarded
    def line_code_exists(self, code: str) -> bool:
        return orm.PromotionLine.objects.filter(code=code).exists()

    @_guarded
    def save_promotion_line(self, voucher_id: VoucherId, line: PromotionLine) -> Voucher:
        with transaction.atomic():
            voucher = self._row(voucher_id)
            orm.PromotionLine.objects.update_or_create(
                voucher=voucher,
                code=line.code,
                defaults={
                    "promotion_type": line.promotion_type.value,
                    "start_date": line.interval.start,
                    "end_date": line.interval.end,
                    "status": line.status.value,
                    "stacking_policy": line.rule.policy.value,
                    "exclusion_group": line.rule.exclusion_group,
                    "detail": detail_to_dict(line.detail),
                },
            )
        return self.get_voucher(voucher_id)

    @_guarded
    def delete_promotion_line(self, voucher_id: VoucherId, code: str) -> Voucher:
        row = orm.PromotionLine.objects.filter(voucher_id=voucher_id.value, code=code).first()
        if row is None:
            raise PromotionLineNotFoundError(code)
        row.delete()
        return self.get_voucher(voucher_id)
