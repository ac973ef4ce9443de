"""Price list service - all price list business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Every write is validated against a fresh read of all price lists. When a
store reports a write conflict, the service re-reads and re-derives the
reason instead of retrying.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import date

from scheduling.conf import get_setting
from scheduling.domain import GapReport, Interval, PriceLine, PriceList, PriceListId, PriceListStatus
from scheduling.domain import calendar
from scheduling.domain.errors import (
    BootstrapStartError,
    DuplicateCodeError,
    DeleteNotAllowedError,
    EditNotAllowedError,
    InvalidIdError,
    InvalidIntervalError,
    InvalidPriceLinesError,
    PastDateError,
    PlacementConflictError,
    PriceListNotFoundError,
    WriteConflictError,
)
from scheduling.domain.price_lists import (
    PriceListEntry,
    derive_status,
    find_conflicts,
    find_current,
    is_date_blocked,
    missing_seat_types,
    next_free_start,
    requires_bootstrap_start,
    with_status,
)
from scheduling.domain.versioning import plan_duplicate, plan_split
from scheduling.stores.interfaces import PriceListStore

logger = logging.getLogger(__name__)


class PriceListService:
    """Service for price list timeline operations."""

    def __init__(self, store: PriceListStore, clock: Callable[[], date] = calendar.today) -> None:
        self._store = store
        self._clock = clock

    def _parse_id(self, price_list_id: str) -> PriceListId:
        try:
            return PriceListId.from_string(price_list_id)
        except ValueError:
            raise InvalidIdError()

    def _load(self, price_list_id: str) -> PriceList:
        parsed = self._parse_id(price_list_id)
        price_list = self._store.get_price_list(parsed)
        if price_list is None:
            raise PriceListNotFoundError(price_list_id)
        return price_list

    def _entry(self, price_list: PriceList) -> PriceListEntry:
        return PriceListEntry(price_list=price_list, status=derive_status(price_list.interval, self._clock()))

    def _normalize_code(self, code: str) -> str:
        code = code.strip().upper()
        if self._store.code_exists(code):
            raise DuplicateCodeError(code)
        return code

    def _validate_lines(self, lines: Iterable[PriceLine]) -> tuple[PriceLine, ...]:
        lines = tuple(lines)
        missing = missing_seat_types(lines, get_setting("REQUIRED_SEAT_TYPES"))
        if missing:
            raise InvalidPriceLinesError(f"Ticket prices are missing for seat types: {', '.join(missing)}")
        return lines

    def _rederive_conflict(self, interval: Interval, ignore_id: PriceListId | None, exc: WriteConflictError):
        """Re-read after a rejected write and explain it from fresh state."""
        logger.warning("Write for %s conflicted; re-reading price lists", interval)
        conflicts = find_conflicts(interval, self._store.list_price_lists(), ignore_id=ignore_id)
        if conflicts:
            return PlacementConflictError(str(pl.id) for pl in conflicts)
        return exc

    def list_price_lists(self) -> list[PriceListEntry]:
        """Return all price lists with their status as of today."""
        return with_status(self._store.list_price_lists(), self._clock())

    def get_price_list(self, price_list_id: str) -> PriceListEntry:
        """Return a price list by ID.

        Raises:
            InvalidIdError: If the id is malformed.
            PriceListNotFoundError: If the price list does not exist.
        """
        return self._entry(self._load(price_list_id))

    def current_price_list(self) -> PriceListEntry | None:
        current = find_current(self._store.list_price_lists(), self._clock())
        return self._entry(current) if current else None

    def next_free_start(self) -> date:
        return next_free_start(self._store.list_price_lists(), self._clock())

    def blocked_days(self, window: Interval) -> list[date]:
        """Days in ``window`` a date picker must disable."""
        existing = self._store.list_price_lists()
        today = self._clock()
        return [
            day
            for offset in range(window.days)
            if is_date_blocked(day := calendar.add_days(window.start, offset), existing, today)
        ]

    def detect_time_gaps(self) -> GapReport:
        report = self._store.detect_time_gaps()
        if report.has_gap:
            logger.warning("Price list timeline has %d gap(s): %s", len(report.gaps), ", ".join(map(str, report.gaps)))
        return report

    def create_price_list(
        self,
        code: str,
        name: str,
        interval: Interval,
        lines: Iterable[PriceLine] = (),
        description: str = "",
    ) -> PriceListEntry:
        """Create a price list in a free slot of the timeline.

        Raises:
            DuplicateCodeError, InvalidPriceLinesError, PastDateError,
            BootstrapStartError, PlacementConflictError.
        """
        today = self._clock()
        code = self._normalize_code(code)
        lines = self._validate_lines(lines)
        if interval.start < today:
            raise PastDateError("A price list cannot start in the past")

        existing = self._store.list_price_lists()
        if requires_bootstrap_start(interval, existing, today):
            raise BootstrapStartError()
        conflicts = find_conflicts(interval, existing)
        if conflicts:
            raise PlacementConflictError(str(pl.id) for pl in conflicts)

        price_list = PriceList(
            id=PriceListId.generate(),
            code=code,
            name=name,
            interval=interval,
            lines=lines,
            description=description,
        )
        try:
            created = self._store.create_price_list(price_list)
        except WriteConflictError as exc:
            raise self._rederive_conflict(interval, None, exc) from exc
        logger.info("Created price list %s (%s) for %s", created.code, created.id, created.interval)
        return self._entry(created)

    def update_end_date(self, price_list_id: str, new_end: date) -> PriceListEntry:
        """Extend or shrink a price list.

        Raises:
            EditNotAllowedError: If the price list has expired.
            PastDateError, InvalidIntervalError, PlacementConflictError.
        """
        price_list = self._load(price_list_id)
        today = self._clock()
        if derive_status(price_list.interval, today) is PriceListStatus.EXPIRED:
            raise EditNotAllowedError("An expired price list cannot be edited")
        if new_end < today:
            raise PastDateError("The end date cannot be in the past")
        if new_end < price_list.interval.start:
            raise InvalidIntervalError("The end date cannot be before the start date")

        interval = price_list.interval.with_end(new_end)
        conflicts = find_conflicts(interval, self._store.list_price_lists(), ignore_id=price_list.id)
        if conflicts:
            raise PlacementConflictError(str(pl.id) for pl in conflicts)
        try:
            updated = self._store.update_price_list_interval(price_list.id, new_end)
        except WriteConflictError as exc:
            raise self._rederive_conflict(interval, price_list.id, exc) from exc
        logger.info("Moved end of price list %s to %s", updated.code, new_end)
        return self._entry(updated)

    def delete_price_list(self, price_list_id: str) -> None:
        """Delete a scheduled price list.

        Raises:
            DeleteNotAllowedError: If the price list is active or expired.
        """
        price_list = self._load(price_list_id)
        status = derive_status(price_list.interval, self._clock())
        if status is not PriceListStatus.SCHEDULED:
            raise DeleteNotAllowedError(f"A price list that is {status.value} cannot be deleted")
        if not self._store.delete_price_list(price_list.id):
            raise PriceListNotFoundError(price_list_id)
        logger.info("Deleted price list %s", price_list.code)

    def duplicate(self, price_list_id: str, code: str, name: str, interval: Interval) -> PriceListEntry:
        """Copy a price list's lines into a new list at a free interval.

        The source is left untouched.
        """
        source = self._load(price_list_id)
        code = self._normalize_code(code)
        plan_duplicate(source, interval, self._store.list_price_lists(), self._clock())

        copy = PriceList(
            id=PriceListId.generate(),
            code=code,
            name=name,
            interval=interval,
            lines=source.lines,
            description=source.description,
        )
        try:
            created = self._store.create_price_list(copy)
        except WriteConflictError as exc:
            raise self._rederive_conflict(interval, None, exc) from exc
        logger.info("Duplicated price list %s into %s for %s", source.code, created.code, interval)
        return self._entry(created)

    def split_version(
        self,
        price_list_id: str,
        code: str,
        name: str,
        old_end: date,
        new_start: date,
        new_end: date | None = None,
    ) -> tuple[PriceListEntry, PriceListEntry]:
        """End the active list at ``old_end`` and continue with a successor.

        Returns the shortened source and the successor.
        """
        source = self._load(price_list_id)
        code = self._normalize_code(code)
        plan = plan_split(source, old_end, new_start, self._store.list_price_lists(), self._clock(), new_end)

        successor = PriceList(
            id=PriceListId.generate(),
            code=code,
            name=name,
            interval=plan.successor,
            lines=source.lines,
            description=source.description,
        )
        try:
            shortened, created = self._store.split_price_list(source.id, plan.shortened.end, successor)
        except WriteConflictError as exc:
            raise self._rederive_conflict(plan.successor, source.id, exc) from exc
        logger.info(
            "Split price list %s at %s; successor %s covers %s",
            source.code,
            plan.shortened.end,
            created.code,
            created.interval,
        )
        return self._entry(shortened), self._entry(created)
