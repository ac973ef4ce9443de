"""Calendar-derived price list status and placement rules.

Price lists partition time: their intervals never overlap, and gaps between
them are reported but tolerated. All functions here are pure and work on
calendar days.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime

from scheduling.domain.calendar import add_days, to_day
from scheduling.domain.interval import Interval
from scheduling.domain.models import LineKind, PriceLine, PriceList, PriceListStatus
from scheduling.domain.value_objects import PriceListId


@dataclass(frozen=True)
class PriceListEntry:
    """A price list together with its status on the day it was read."""

    price_list: PriceList
    status: PriceListStatus


def derive_status(interval: Interval, now: date | datetime) -> PriceListStatus:
    """Inclusive on both ends: the first and last day are active."""
    day = to_day(now)
    if day < interval.start:
        return PriceListStatus.SCHEDULED
    if day > interval.end:
        return PriceListStatus.EXPIRED
    return PriceListStatus.ACTIVE


def with_status(price_lists: Iterable[PriceList], now: date | datetime) -> list[PriceListEntry]:
    return [PriceListEntry(price_list=pl, status=derive_status(pl.interval, now)) for pl in price_lists]


def find_conflicts(
    candidate: Interval,
    existing: Iterable[PriceList],
    ignore_id: PriceListId | None = None,
) -> list[PriceList]:
    """Price lists whose interval overlaps ``candidate``, except ``ignore_id``."""
    return [pl for pl in existing if pl.id != ignore_id and pl.interval.overlaps(candidate)]


def is_placement_legal(
    candidate: Interval,
    existing: Iterable[PriceList],
    ignore_id: PriceListId | None = None,
) -> bool:
    return not find_conflicts(candidate, existing, ignore_id)


def has_active(existing: Iterable[PriceList], now: date | datetime) -> bool:
    return any(derive_status(pl.interval, now) is PriceListStatus.ACTIVE for pl in existing)


def find_current(existing: Iterable[PriceList], now: date | datetime) -> PriceList | None:
    for pl in existing:
        if derive_status(pl.interval, now) is PriceListStatus.ACTIVE:
            return pl
    return None


def is_date_blocked(day: date | datetime, existing: Iterable[PriceList], now: date | datetime) -> bool:
    """Date-picker predicate: past days and days inside any list are blocked."""
    day = to_day(day)
    if day < to_day(now):
        return True
    return any(pl.interval.contains(day) for pl in existing)


def next_free_start(existing: Sequence[PriceList], now: date | datetime) -> date:
    """First day a new price list may start on.

    With nothing active, the timeline is bootstrapped from today. Otherwise
    the earliest future day not covered by any list.
    """
    today = to_day(now)
    if not has_active(existing, today):
        return today

    candidate = add_days(today, 1)
    for pl in sorted(existing, key=lambda p: p.interval.start):
        if pl.interval.contains(candidate):
            candidate = add_days(pl.interval.end, 1)
    return candidate


def requires_bootstrap_start(candidate: Interval, existing: Iterable[PriceList], now: date | datetime) -> bool:
    """True when nothing is active and ``candidate`` does not start today."""
    today = to_day(now)
    return not has_active(existing, today) and candidate.start != today


def missing_seat_types(lines: Iterable[PriceLine], required: Iterable[str]) -> list[str]:
    """Seat types without a ticket line. Empty line sets need none."""
    lines = list(lines)
    if not lines:
        return []
    priced = {line.seat_type for line in lines if line.kind is LineKind.TICKET}
    return [seat_type for seat_type in required if seat_type not in priced]
