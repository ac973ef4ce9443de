"""Domain primitives that enforce validity at creation time."""

import re
import secrets
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Self

_HEX_ID = re.compile(r"^[0-9a-f]{24}$")


def _new_hex_id() -> str:
    # 4-byte seconds prefix keeps identifiers ordered by creation time
    return f"{int(time.time()):08x}{secrets.token_hex(8)}"


@dataclass(frozen=True, order=True)
class PriceListId:
    """Unique identifier for a PriceList."""

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("PriceListId cannot be empty")

    @classmethod
    def from_string(cls, value: str) -> Self:
        value = value.strip().lower()
        if not _HEX_ID.match(value):
            raise ValueError(f"Malformed price list id: {value!r}")
        return cls(value=value)

    @classmethod
    def generate(cls) -> Self:
        return cls(value=_new_hex_id())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class VoucherId:
    """Unique identifier for a Voucher.

    Ordering is lexicographic on the raw value; generated ids sort by
    creation time, so the greater id is the newer voucher.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("VoucherId cannot be empty")

    @classmethod
    def from_string(cls, value: str) -> Self:
        value = value.strip().lower()
        if not _HEX_ID.match(value):
            raise ValueError(f"Malformed voucher id: {value!r}")
        return cls(value=value)

    @classmethod
    def generate(cls) -> Self:
        return cls(value=_new_hex_id())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Quantity:
    """Non-negative integer count (items, coupons, redemptions)."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Quantity cannot be negative")


@dataclass(frozen=True)
class Percentage:
    """Percentage in the closed range 0..100."""

    value: Decimal

    def __post_init__(self) -> None:
        if not Decimal(0) <= self.value <= Decimal(100):
            raise ValueError("Percentage must be between 0 and 100")

    def __str__(self) -> str:
        return f"{self.value.normalize()}%"
