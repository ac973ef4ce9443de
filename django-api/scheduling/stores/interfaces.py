"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. They are the only way
the engine reaches persisted price lists and vouchers; the engine never
assumes a write landed exactly as requested and re-reads after writing.
"""

from abc import ABC, abstractmethod
from datetime import date

from scheduling.domain import (
    GapReport,
    PriceList,
    PriceListId,
    PromotionLine,
    Voucher,
    VoucherId,
    VoucherStatus,
)


class PriceListStore(ABC):
    """Interface for price list persistence operations."""

    @abstractmethod
    def list_price_lists(self) -> list[PriceList]:
        """Return all price lists ordered by start date ascending."""
        ...

    @abstractmethod
    def get_price_list(self, price_list_id: PriceListId) -> PriceList | None:
        """Return a price list by ID, or None if not found."""
        ...

    @abstractmethod
    def code_exists(self, code: str) -> bool:
        ...

    @abstractmethod
    def create_price_list(self, price_list: PriceList) -> PriceList:
        """Persist a new price list.

        Raises:
            WriteConflictError: If the interval collides with stored lists.
        """
        ...

    @abstractmethod
    def update_price_list_interval(self, price_list_id: PriceListId, new_end: date) -> PriceList:
        """Move a price list's end date.

        Raises:
            WriteConflictError: If the new interval collides with stored lists.
        """
        ...

    @abstractmethod
    def delete_price_list(self, price_list_id: PriceListId) -> bool:
        ...

    @abstractmethod
    def split_price_list(
        self, price_list_id: PriceListId, old_end: date, successor: PriceList
    ) -> tuple[PriceList, PriceList]:
        """Shorten a list and create its successor atomically."""
        ...

    def detect_time_gaps(self) -> GapReport:
        """Report uncovered days between stored lists.

        Stores that can compute this closer to the data may override it; the
        result must match the client-side computation.
        """
        return GapReport.from_intervals(pl.interval for pl in self.list_price_lists())


class VoucherStore(ABC):
    """Interface for voucher persistence operations."""

    @abstractmethod
    def list_vouchers(self) -> list[Voucher]:
        """Return all vouchers with their promotion lines."""
        ...

    @abstractmethod
    def get_voucher(self, voucher_id: VoucherId) -> Voucher | None:
        ...

    @abstractmethod
    def voucher_code_exists(self, code: str) -> bool:
        ...

    @abstractmethod
    def create_voucher(self, voucher: Voucher) -> Voucher:
        ...

    @abstractmethod
    def update_voucher_status(self, voucher_id: VoucherId, status: VoucherStatus) -> None:
        """Overwrite the stored status. Last write wins."""
        ...

    @abstractmethod
    def delete_voucher(self, voucher_id: VoucherId) -> bool:
        """Delete a voucher together with all of its lines."""
        ...

    @abstractmethod
    def line_code_exists(self, code: str) -> bool:
        ...

    @abstractmethod
    def save_promotion_line(self, voucher_id: VoucherId, line: PromotionLine) -> Voucher:
        """Insert or replace the line with ``line.code`` and return the voucher."""
        ...

    @abstractmethod
    def delete_promotion_line(self, voucher_id: VoucherId, code: str) -> Voucher:
        ...
