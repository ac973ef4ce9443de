"""Timeline versioning: duplicate and split a price list without breaking the partition.

Both planners validate against a snapshot of every price list and return
the intervals to write. Nothing is written here; a rejected plan leaves no
partial state behind.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime

from scheduling.domain.calendar import days_between, to_day
from scheduling.domain.errors import (
    EditNotAllowedError,
    InvalidIntervalError,
    PastDateError,
    PlacementConflictError,
)
from scheduling.domain.interval import Interval
from scheduling.domain.models import PriceList, PriceListStatus
from scheduling.domain.price_lists import derive_status, find_conflicts


@dataclass(frozen=True)
class SplitPlan:
    """Shortened source interval plus the successor's interval."""

    source: PriceList
    shortened: Interval
    successor: Interval


def plan_duplicate(
    source: PriceList,
    interval: Interval,
    existing: Sequence[PriceList],
    now: date | datetime,
) -> Interval:
    """Validate the interval chosen for a copy of ``source``.

    The source itself is one of the lists the copy must not overlap.
    """
    if interval.start < to_day(now):
        raise PastDateError("A duplicated price list cannot start in the past")
    conflicts = find_conflicts(interval, existing)
    if conflicts:
        raise PlacementConflictError(str(pl.id) for pl in conflicts)
    return interval


def plan_split(
    source: PriceList,
    old_end: date | datetime,
    new_start: date | datetime,
    existing: Sequence[PriceList],
    now: date | datetime,
    new_end: date | datetime | None = None,
) -> SplitPlan:
    """Validate shortening ``source`` to ``old_end`` and starting a successor.

    ``new_end`` defaults to the source's current end, so the successor takes
    over exactly the days the source gives up.
    """
    today = to_day(now)
    old_end = to_day(old_end)
    new_start = to_day(new_start)
    new_end = to_day(new_end) if new_end is not None else source.interval.end

    if derive_status(source.interval, today) is not PriceListStatus.ACTIVE:
        raise EditNotAllowedError("Only an active price list can be split into a new version")
    if old_end < today:
        raise PastDateError("The current version cannot end in the past")
    if old_end < source.interval.start:
        raise InvalidIntervalError("The current version cannot end before it starts")
    if new_start <= old_end:
        raise InvalidIntervalError("The new version must start after the current one ends")
    if new_start < today:
        raise PastDateError("The new version cannot start in the past")
    if days_between(old_end, new_start) > 1:
        raise InvalidIntervalError("The new version must start the day after the current one ends")
    if new_end < new_start:
        raise InvalidIntervalError("The new version must end on or after its start")

    shortened = source.interval.with_end(old_end)
    successor = Interval(start=new_start, end=new_end)
    conflicts = find_conflicts(successor, existing, ignore_id=source.id)
    if conflicts:
        raise PlacementConflictError(str(pl.id) for pl in conflicts)
    return SplitPlan(source=source, shortened=shortened, successor=successor)
