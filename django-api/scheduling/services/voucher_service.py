"""Voucher service - voucher and promotion line business logic.

``converge`` is the single entry point every re-evaluation trigger uses:
read all vouchers, resolve desired statuses, write only the differences,
then read again. The resolver's output is advisory; the second read is what
callers should trust.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime

from django.utils import timezone

from scheduling.conf import get_setting
from scheduling.domain import (
    Interval,
    PromotionDetail,
    PromotionLine,
    StackingRule,
    Voucher,
    VoucherId,
    VoucherStatus,
)
from scheduling.domain.errors import (
    DeleteNotAllowedError,
    DomainError,
    DuplicateCodeError,
    ExclusionGroupConflictError,
    InvalidCodeError,
    InvalidIdError,
    InvalidPromotionLineError,
    PromotionLineNotFoundError,
    VoucherNotFoundError,
)
from scheduling.domain.promotions import exclusion_conflicts, find_line, generate_line_code
from scheduling.domain.vouchers import StatusChange, resolve
from scheduling.stores.interfaces import VoucherStore

logger = logging.getLogger(__name__)

VOUCHER_CODE_PATTERN = re.compile(r"^KM\d{3}$")


@dataclass(frozen=True)
class ConvergenceResult:
    """Outcome of one read-resolve-write-reread cycle."""

    changes: tuple[StatusChange, ...]
    vouchers: tuple[Voucher, ...]
    failed: tuple[VoucherId, ...] = field(default_factory=tuple)


class VoucherService:
    """Service for vouchers, their lines and status convergence."""

    def __init__(self, store: VoucherStore, clock: Callable[[], datetime] = timezone.now) -> None:
        self._store = store
        self._clock = clock

    def _parse_id(self, voucher_id: str) -> VoucherId:
        try:
            return VoucherId.from_string(voucher_id)
        except ValueError:
            raise InvalidIdError()

    def _load(self, voucher_id: str) -> Voucher:
        voucher = self._store.get_voucher(self._parse_id(voucher_id))
        if voucher is None:
            raise VoucherNotFoundError(voucher_id)
        return voucher

    def list_vouchers(self) -> list[Voucher]:
        return self._store.list_vouchers()

    def get_voucher(self, voucher_id: str) -> Voucher:
        """Return a voucher by ID.

        Raises:
            InvalidIdError: If the id is malformed.
            VoucherNotFoundError: If the voucher does not exist.
        """
        return self._load(voucher_id)

    def create_voucher(
        self,
        code: str,
        name: str,
        interval: Interval,
        status: VoucherStatus = VoucherStatus.ENABLED,
        description: str = "",
    ) -> Voucher:
        code = code.strip().upper()
        if not VOUCHER_CODE_PATTERN.match(code):
            raise InvalidCodeError("Voucher codes look like KM001, KM002, ...")
        if self._store.voucher_code_exists(code):
            raise DuplicateCodeError(code)
        voucher = Voucher(
            id=VoucherId.generate(),
            code=code,
            name=name,
            interval=interval,
            status=status,
            description=description,
        )
        created = self._store.create_voucher(voucher)
        logger.info("Created voucher %s (%s) for %s", created.code, created.id, created.interval)
        return created

    def set_status(self, voucher_id: str, status: VoucherStatus) -> Voucher:
        """Operator status change; the next convergence may still disable it."""
        voucher = self._load(voucher_id)
        self._store.update_voucher_status(voucher.id, status)
        logger.info("Voucher %s set to %s by operator", voucher.code, status.value)
        return self._load(voucher_id)

    def delete_voucher(self, voucher_id: str) -> None:
        voucher = self._load(voucher_id)
        if voucher.is_enabled:
            raise DeleteNotAllowedError("Disable the voucher before deleting it")
        if not self._store.delete_voucher(voucher.id):
            raise VoucherNotFoundError(voucher_id)
        logger.info("Deleted voucher %s with %d line(s)", voucher.code, len(voucher.lines))

    def _check_line(self, voucher: Voucher, line: PromotionLine) -> None:
        if line.status is VoucherStatus.ENABLED and not voucher.is_enabled:
            raise InvalidPromotionLineError("A line cannot be enabled while its voucher is disabled")
        conflicts = exclusion_conflicts(line, voucher.lines)
        if conflicts:
            raise ExclusionGroupConflictError(line.rule.exclusion_group, (c.code for c in conflicts))

    def _new_line_code(self) -> str:
        for _ in range(get_setting("LINE_CODE_ATTEMPTS")):
            code = generate_line_code()
            if not self._store.line_code_exists(code):
                return code
        raise InvalidPromotionLineError("Could not allocate a unique promotion line code")

    def add_line(
        self,
        voucher_id: str,
        interval: Interval,
        detail: PromotionDetail,
        rule: StackingRule = StackingRule(),
        status: VoucherStatus = VoucherStatus.ENABLED,
    ) -> Voucher:
        voucher = self._load(voucher_id)
        line = PromotionLine(
            code=self._new_line_code(),
            interval=interval,
            status=status,
            rule=rule,
            detail=detail,
        )
        self._check_line(voucher, line)
        updated = self._store.save_promotion_line(voucher.id, line)
        logger.info("Added %s line %s to voucher %s", line.promotion_type.value, line.code, voucher.code)
        return updated

    def update_line(
        self,
        voucher_id: str,
        code: str,
        interval: Interval,
        detail: PromotionDetail,
        rule: StackingRule,
        status: VoucherStatus,
    ) -> Voucher:
        voucher = self._load(voucher_id)
        existing = find_line(voucher, code)
        if existing is None:
            raise PromotionLineNotFoundError(code)
        line = replace(existing, interval=interval, detail=detail, rule=rule, status=status)
        self._check_line(voucher, line)
        return self._store.save_promotion_line(voucher.id, line)

    def delete_line(self, voucher_id: str, code: str) -> Voucher:
        voucher = self._load(voucher_id)
        line = find_line(voucher, code)
        if line is None:
            raise PromotionLineNotFoundError(code)
        if line.status is VoucherStatus.ENABLED:
            raise DeleteNotAllowedError("Disable the line before deleting it")
        return self._store.delete_promotion_line(voucher.id, code)

    def resolve(self, vouchers: list[Voucher] | None = None) -> list[StatusChange]:
        """Desired status changes for the given (or freshly read) snapshot. No writes."""
        if vouchers is None:
            vouchers = self._store.list_vouchers()
        return resolve(vouchers, self._clock())

    def converge(self) -> ConvergenceResult:
        """Write the resolver's changes and return the re-read vouchers.

        A failed update is logged and skipped; the next cycle retries it.
        Read failures propagate to the caller.
        """
        snapshot = self._store.list_vouchers()
        changes = resolve(snapshot, self._clock())
        if not changes:
            return ConvergenceResult(changes=(), vouchers=tuple(snapshot))

        failed = []
        for change in changes:
            try:
                self._store.update_voucher_status(change.voucher_id, change.status)
            except DomainError as exc:
                logger.warning("Could not set voucher %s to %s: %s", change.voucher_id, change.status.value, exc)
                failed.append(change.voucher_id)
            else:
                logger.info(
                    "Voucher %s set to %s (%s)", change.voucher_id, change.status.value, change.reason.value
                )
        return ConvergenceResult(
            changes=tuple(changes),
            vouchers=tuple(self._store.list_vouchers()),
            failed=tuple(failed),
        )
