"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in scheduling/models.py (persistence layer).
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import ClassVar

from scheduling.domain.interval import Interval
from scheduling.domain.value_objects import Money, Percentage, PriceListId, Quantity, VoucherId


class PriceListStatus(Enum):
    """Status derived from the calendar; never stored as authoritative."""

    SCHEDULED = "scheduled"
    ACTIVE = "active"
    EXPIRED = "expired"


class VoucherStatus(Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


class LineKind(Enum):
    TICKET = "ticket"
    COMBO = "combo"
    SINGLE = "single"


class StackingPolicy(Enum):
    STACKABLE = "STACKABLE"
    EXCLUSIVE = "EXCLUSIVE"
    EXCLUSIVE_WITH_GROUP = "EXCLUSIVE_WITH_GROUP"


class PromotionType(Enum):
    ITEM = "item"
    AMOUNT = "amount"
    PERCENT = "percent"
    VOUCHER = "voucher"


class ApplyType(Enum):
    COMBO = "combo"
    TICKET = "ticket"


class RewardType(Enum):
    FREE = "free"
    DISCOUNT = "discount"


@dataclass(frozen=True)
class PriceLine:
    """One priced entry of a price list: a seat type or a product."""

    kind: LineKind
    price: Money
    seat_type: str | None = None
    product_id: str | None = None
    product_name: str | None = None

    def __post_init__(self) -> None:
        if self.kind is LineKind.TICKET and not self.seat_type:
            raise ValueError("Ticket lines require a seat type")
        if self.kind is not LineKind.TICKET and not (self.product_id and self.product_name):
            raise ValueError("Product lines require a product id and name")


@dataclass(frozen=True)
class PriceList:
    """Domain representation of a PriceList."""

    id: PriceListId
    code: str
    name: str
    interval: Interval
    lines: tuple[PriceLine, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class StackingRule:
    policy: StackingPolicy = StackingPolicy.STACKABLE
    exclusion_group: str | None = None

    def __post_init__(self) -> None:
        if self.policy is StackingPolicy.EXCLUSIVE_WITH_GROUP and not self.exclusion_group:
            raise ValueError("EXCLUSIVE_WITH_GROUP requires an exclusion group")
        if self.policy is not StackingPolicy.EXCLUSIVE_WITH_GROUP and self.exclusion_group:
            raise ValueError("Only EXCLUSIVE_WITH_GROUP lines carry an exclusion group")


@dataclass(frozen=True)
class ItemDetail:
    """Buy ``buy_quantity`` of an item, get ``reward_quantity`` of another."""

    promotion_type: ClassVar[PromotionType] = PromotionType.ITEM

    buy_item: str
    buy_quantity: Quantity
    reward_item: str
    reward_quantity: Quantity
    reward_type: RewardType
    reward_discount_percent: Percentage | None = None
    apply_type: ApplyType | None = None
    budget: Quantity | None = None
    description: str = ""

    def __post_init__(self) -> None:
        if not self.buy_item or not self.reward_item:
            raise ValueError("Item promotions need both a bought and a reward item")
        if self.buy_quantity.value == 0 or self.reward_quantity.value == 0:
            raise ValueError("Item promotion quantities must be positive")
        if self.reward_type is RewardType.DISCOUNT and self.reward_discount_percent is None:
            raise ValueError("Discounted rewards need a discount percent")


@dataclass(frozen=True)
class AmountDetail:
    """Flat discount once the order reaches ``min_order_value``."""

    promotion_type: ClassVar[PromotionType] = PromotionType.AMOUNT

    min_order_value: Money
    discount_value: Money
    budget: Money | None = None
    description: str = ""

    def __post_init__(self) -> None:
        if self.discount_value.amount == Decimal(0):
            raise ValueError("Amount promotions need a positive discount")


@dataclass(frozen=True)
class PercentDetail:
    """Percent off a named combo or a seat-type ticket."""

    promotion_type: ClassVar[PromotionType] = PromotionType.PERCENT

    apply_type: ApplyType
    percent: Percentage
    combo_id: str | None = None
    combo_name: str | None = None
    seat_type: str | None = None
    budget: Money | None = None
    description: str = ""

    def __post_init__(self) -> None:
        if self.apply_type is ApplyType.COMBO and not self.combo_name:
            raise ValueError("Combo percent promotions need a combo name")
        if self.apply_type is ApplyType.TICKET and not self.seat_type:
            raise ValueError("Ticket percent promotions need a seat type")


@dataclass(frozen=True)
class CouponDetail:
    """Point-redeemable coupon, percent off capped at ``max_discount_value``."""

    promotion_type: ClassVar[PromotionType] = PromotionType.VOUCHER

    points_cost: Quantity
    quantity: Quantity
    percent: Percentage
    max_discount_value: Money
    total_quantity: Quantity | None = None
    description: str = ""

    @property
    def issued_quantity(self) -> Quantity:
        return self.total_quantity if self.total_quantity is not None else self.quantity


PromotionDetail = ItemDetail | AmountDetail | PercentDetail | CouponDetail


@dataclass(frozen=True)
class PromotionLine:
    """One concrete discount rule owned by a Voucher."""

    code: str
    interval: Interval
    status: VoucherStatus
    rule: StackingRule
    detail: PromotionDetail

    @property
    def promotion_type(self) -> PromotionType:
        return self.detail.promotion_type


@dataclass(frozen=True)
class Voucher:
    """Domain representation of a Voucher (promotion header)."""

    id: VoucherId
    code: str
    name: str
    interval: Interval
    status: VoucherStatus
    lines: tuple[PromotionLine, ...] = ()
    description: str = ""

    @property
    def is_enabled(self) -> bool:
        return self.status is VoucherStatus.ENABLED
