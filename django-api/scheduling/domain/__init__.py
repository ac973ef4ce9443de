from scheduling.domain.interval import GapReport, Interval
from scheduling.domain.models import (
    AmountDetail,
    ApplyType,
    CouponDetail,
    ItemDetail,
    LineKind,
    PercentDetail,
    PriceLine,
    PriceList,
    PriceListStatus,
    PromotionDetail,
    PromotionLine,
    PromotionType,
    RewardType,
    StackingPolicy,
    StackingRule,
    Voucher,
    VoucherStatus,
)
from scheduling.domain.value_objects import Money, Percentage, PriceListId, Quantity, VoucherId

__all__ = [
    "Interval",
    "GapReport",
    "PriceList",
    "PriceLine",
    "PriceListStatus",
    "LineKind",
    "Voucher",
    "VoucherStatus",
    "PromotionLine",
    "PromotionType",
    "PromotionDetail",
    "ItemDetail",
    "AmountDetail",
    "PercentDetail",
    "CouponDetail",
    "StackingRule",
    "StackingPolicy",
    "ApplyType",
    "RewardType",
    "PriceListId",
    "VoucherId",
    "Money",
    "Quantity",
    "Percentage",
]
