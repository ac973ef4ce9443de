"""Voucher status resolution.

``resolve`` maps one snapshot of vouchers to the status changes that should
be written. It runs in two phases:

* Temporal gating. A voucher outside its window is forced to DISABLED. A
  voucher inside its window keeps whatever status the operator gave it;
  automation only ever deactivates.
* Overlap resolution. Among vouchers that are inside their window and
  ENABLED, every overlapping pair disables the one with the smaller id.

The window check excludes both boundary days, unlike price lists, so a
voucher is disabled on its own first and last day. Pairs are resolved
independently in one pass; with three or more mutually overlapping vouchers
a stable result may need another pass on a later tick.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from itertools import combinations

from scheduling.domain.calendar import to_day
from scheduling.domain.interval import Interval
from scheduling.domain.models import Voucher, VoucherStatus
from scheduling.domain.value_objects import VoucherId

logger = logging.getLogger(__name__)


class ChangeReason(Enum):
    OUT_OF_WINDOW = "out_of_window"
    OVERLAP_LOST = "overlap_lost"


@dataclass(frozen=True)
class StatusChange:
    voucher_id: VoucherId
    status: VoucherStatus
    reason: ChangeReason
    winner_id: VoucherId | None = None


def in_window(interval: Interval, now: date | datetime) -> bool:
    # TODO: confirm with product whether boundary days should be active; price lists include them
    day = to_day(now)
    return interval.start < day < interval.end


def gate(vouchers: Iterable[Voucher], now: date | datetime) -> list[StatusChange]:
    changes = []
    for voucher in vouchers:
        if in_window(voucher.interval, now):
            continue
        if voucher.status is not VoucherStatus.DISABLED:
            changes.append(
                StatusChange(
                    voucher_id=voucher.id,
                    status=VoucherStatus.DISABLED,
                    reason=ChangeReason.OUT_OF_WINDOW,
                )
            )
    return changes


def resolve_overlaps(vouchers: Iterable[Voucher], now: date | datetime) -> list[StatusChange]:
    participants = [v for v in vouchers if v.is_enabled and in_window(v.interval, now)]
    changes = []
    for first, second in combinations(participants, 2):
        if not first.interval.overlaps(second.interval):
            continue
        winner, loser = (first, second) if first.id > second.id else (second, first)
        changes.append(
            StatusChange(
                voucher_id=loser.id,
                status=VoucherStatus.DISABLED,
                reason=ChangeReason.OVERLAP_LOST,
                winner_id=winner.id,
            )
        )
    return changes


def resolve(vouchers: Sequence[Voucher], now: date | datetime) -> list[StatusChange]:
    """Return one change per voucher whose desired status differs from its stored one."""
    merged: dict[VoucherId, StatusChange] = {}
    for change in gate(vouchers, now):
        merged[change.voucher_id] = change
    for change in resolve_overlaps(vouchers, now):
        merged.setdefault(change.voucher_id, change)

    stored = {v.id: v.status for v in vouchers}
    changes = [c for c in merged.values() if stored.get(c.voucher_id) is not c.status]
    for change in changes:
        logger.debug(
            "voucher %s -> %s (%s)", change.voucher_id, change.status.value, change.reason.value
        )
    return changes


def apply_changes(vouchers: Iterable[Voucher], changes: Iterable[StatusChange]) -> list[Voucher]:
    """Project ``changes`` onto a local snapshot."""
    desired = {c.voucher_id: c.status for c in changes}
    return [replace(v, status=desired[v.id]) if v.id in desired else v for v in vouchers]
