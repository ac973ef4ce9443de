"""Promotion line rules: codes, stacking groups, ownership checks."""

import secrets
from collections.abc import Iterable

from scheduling.domain.models import PromotionLine, StackingPolicy, Voucher, VoucherStatus


def generate_line_code() -> str:
    """Random 10-digit numeric code."""
    return str(1_000_000_000 + secrets.randbelow(9_000_000_000))


def exclusion_conflicts(line: PromotionLine, others: Iterable[PromotionLine]) -> list[PromotionLine]:
    """Enabled lines sharing ``line``'s exclusion group over overlapping days."""
    if line.status is not VoucherStatus.ENABLED:
        return []
    if line.rule.policy is not StackingPolicy.EXCLUSIVE_WITH_GROUP:
        return []
    return [
        other
        for other in others
        if other.code != line.code
        and other.status is VoucherStatus.ENABLED
        and other.rule.policy is StackingPolicy.EXCLUSIVE_WITH_GROUP
        and other.rule.exclusion_group == line.rule.exclusion_group
        and other.interval.overlaps(line.interval)
    ]


def find_line(voucher: Voucher, code: str) -> PromotionLine | None:
    for line in voucher.lines:
        if line.code == code:
            return line
    return None
