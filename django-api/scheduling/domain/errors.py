"""Domain error codes for the scheduling module."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    PRICE_LIST_NOT_FOUND = "PRICE_LIST_NOT_FOUND"
    VOUCHER_NOT_FOUND = "VOUCHER_NOT_FOUND"
    PROMOTION_LINE_NOT_FOUND = "PROMOTION_LINE_NOT_FOUND"
    INVALID_ID = "INVALID_ID"
    INVALID_INTERVAL = "INVALID_INTERVAL"
    PAST_DATE = "PAST_DATE"
    PLACEMENT_CONFLICT = "PLACEMENT_CONFLICT"
    BOOTSTRAP_START = "BOOTSTRAP_START"
    INVALID_PRICE_LINES = "INVALID_PRICE_LINES"
    DUPLICATE_CODE = "DUPLICATE_CODE"
    INVALID_CODE = "INVALID_CODE"
    INVALID_PROMOTION_LINE = "INVALID_PROMOTION_LINE"
    EXCLUSION_GROUP_CONFLICT = "EXCLUSION_GROUP_CONFLICT"
    EDIT_NOT_ALLOWED = "EDIT_NOT_ALLOWED"
    DELETE_NOT_ALLOWED = "DELETE_NOT_ALLOWED"
    WRITE_CONFLICT = "WRITE_CONFLICT"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class PriceListNotFoundError(DomainError):
    """Raised when a price list is not found."""

    def __init__(self, price_list_id: str) -> None:
        super().__init__(
            code=ErrorCode.PRICE_LIST_NOT_FOUND,
            message="Price list not found",
        )
        self.price_list_id = price_list_id


class VoucherNotFoundError(DomainError):
    """Raised when a voucher is not found."""

    def __init__(self, voucher_id: str) -> None:
        super().__init__(
            code=ErrorCode.VOUCHER_NOT_FOUND,
            message="Voucher not found",
        )
        self.voucher_id = voucher_id


class PromotionLineNotFoundError(DomainError):
    def __init__(self, line_code: str) -> None:
        super().__init__(
            code=ErrorCode.PROMOTION_LINE_NOT_FOUND,
            message="Promotion line not found",
        )
        self.line_code = line_code


class InvalidIdError(DomainError):
    """Raised when an identifier is malformed."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message="Invalid id format",
        )


class InvalidIntervalError(DomainError):
    def __init__(self, message: str = "Start date must not be after end date") -> None:
        super().__init__(code=ErrorCode.INVALID_INTERVAL, message=message)


class PastDateError(DomainError):
    def __init__(self, message: str = "Date cannot be in the past") -> None:
        super().__init__(code=ErrorCode.PAST_DATE, message=message)


class PlacementConflictError(DomainError):
    """Raised when an interval overlaps existing price lists."""

    def __init__(self, conflicting_ids: Iterable[str]) -> None:
        super().__init__(
            code=ErrorCode.PLACEMENT_CONFLICT,
            message="Interval overlaps another price list",
        )
        self.conflicting_ids = tuple(conflicting_ids)


class BootstrapStartError(DomainError):
    """Raised when the first list after a gap in coverage does not start today."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.BOOTSTRAP_START,
            message="No price list is active; the new price list must start today",
        )


class InvalidPriceLinesError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_PRICE_LINES, message=message)


class DuplicateCodeError(DomainError):
    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_CODE,
            message=f"Code {code} is already in use",
        )
        self.duplicate_code = code


class InvalidCodeError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_CODE, message=message)


class InvalidPromotionLineError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_PROMOTION_LINE, message=message)


class ExclusionGroupConflictError(DomainError):
    """Raised when two enabled lines of one exclusion group overlap in time."""

    def __init__(self, group: str, conflicting_codes: Iterable[str]) -> None:
        super().__init__(
            code=ErrorCode.EXCLUSION_GROUP_CONFLICT,
            message=f"Another enabled line in group {group} overlaps this period",
        )
        self.group = group
        self.conflicting_codes = tuple(conflicting_codes)


class EditNotAllowedError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.EDIT_NOT_ALLOWED, message=message)


class DeleteNotAllowedError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.DELETE_NOT_ALLOWED, message=message)


class WriteConflictError(DomainError):
    """Raised by stores when persisted state no longer admits a write."""

    def __init__(self, conflicting_ids: Iterable[str] = ()) -> None:
        super().__init__(
            code=ErrorCode.WRITE_CONFLICT,
            message="The record changed concurrently; reload and try again",
        )
        self.conflicting_ids = tuple(conflicting_ids)


class StoreUnavailableError(DomainError):
    """Raised when the backing store cannot be reached."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message="Storage is temporarily unavailable",
        )
