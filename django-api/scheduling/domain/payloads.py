"""Plain-dict form of promotion line payloads.

Used for the JSON ``detail`` column and for API bodies. Each variant maps
to and from a flat dict keyed by field name.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from scheduling.domain.models import (
    AmountDetail,
    ApplyType,
    CouponDetail,
    ItemDetail,
    PercentDetail,
    PromotionDetail,
    PromotionType,
    RewardType,
)
from scheduling.domain.value_objects import Money, Percentage, Quantity


def _money(value: Any) -> Money:
    return Money(Decimal(str(value)))


def _optional(value: Any, factory):
    return None if value is None else factory(value)


def detail_from_dict(promotion_type: PromotionType, data: dict[str, Any]) -> PromotionDetail:
    """Build the variant for ``promotion_type``.

    Raises:
        ValueError: On missing or invalid fields.
    """
    try:
        match promotion_type:
            case PromotionType.ITEM:
                return ItemDetail(
                    buy_item=data["buy_item"],
                    buy_quantity=Quantity(int(data["buy_quantity"])),
                    reward_item=data["reward_item"],
                    reward_quantity=Quantity(int(data["reward_quantity"])),
                    reward_type=RewardType(data["reward_type"]),
                    reward_discount_percent=_optional(
                        data.get("reward_discount_percent"), lambda v: Percentage(Decimal(str(v)))
                    ),
                    apply_type=_optional(data.get("apply_type"), ApplyType),
                    budget=_optional(data.get("budget"), lambda v: Quantity(int(v))),
                    description=data.get("description") or "",
                )
            case PromotionType.AMOUNT:
                return AmountDetail(
                    min_order_value=_money(data["min_order_value"]),
                    discount_value=_money(data["discount_value"]),
                    budget=_optional(data.get("budget"), _money),
                    description=data.get("description") or "",
                )
            case PromotionType.PERCENT:
                return PercentDetail(
                    apply_type=ApplyType(data["apply_type"]),
                    percent=Percentage(Decimal(str(data["percent"]))),
                    combo_id=data.get("combo_id"),
                    combo_name=data.get("combo_name"),
                    seat_type=data.get("seat_type"),
                    budget=_optional(data.get("budget"), _money),
                    description=data.get("description") or "",
                )
            case PromotionType.VOUCHER:
                quantity = Quantity(int(data["quantity"]))
                total = data.get("total_quantity")
                return CouponDetail(
                    points_cost=Quantity(int(data["points_cost"])),
                    quantity=quantity,
                    percent=Percentage(Decimal(str(data["percent"]))),
                    max_discount_value=_money(data["max_discount_value"]),
                    total_quantity=Quantity(int(total)) if total is not None else quantity,
                    description=data.get("description") or "",
                )
    except KeyError as exc:
        raise ValueError(f"Missing field {exc.args[0]} for {promotion_type.value} promotion") from exc
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Invalid number in {promotion_type.value} promotion") from exc
    raise ValueError(f"Unsupported promotion type {promotion_type!r}")


def detail_to_dict(detail: PromotionDetail) -> dict[str, Any]:
    match detail:
        case ItemDetail():
            return {
                "buy_item": detail.buy_item,
                "buy_quantity": detail.buy_quantity.value,
                "reward_item": detail.reward_item,
                "reward_quantity": detail.reward_quantity.value,
                "reward_type": detail.reward_type.value,
                "reward_discount_percent": (
                    str(detail.reward_discount_percent.value) if detail.reward_discount_percent else None
                ),
                "apply_type": detail.apply_type.value if detail.apply_type else None,
                "budget": detail.budget.value if detail.budget else None,
                "description": detail.description,
            }
        case AmountDetail():
            return {
                "min_order_value": str(detail.min_order_value),
                "discount_value": str(detail.discount_value),
                "budget": str(detail.budget) if detail.budget else None,
                "description": detail.description,
            }
        case PercentDetail():
            return {
                "apply_type": detail.apply_type.value,
                "percent": str(detail.percent.value),
                "combo_id": detail.combo_id,
                "combo_name": detail.combo_name,
                "seat_type": detail.seat_type,
                "budget": str(detail.budget) if detail.budget else None,
                "description": detail.description,
            }
        case CouponDetail():
            return {
                "points_cost": detail.points_cost.value,
                "quantity": detail.quantity.value,
                "total_quantity": detail.issued_quantity.value,
                "percent": str(detail.percent.value),
                "max_discount_value": str(detail.max_discount_value),
                "description": detail.description,
            }
    raise ValueError(f"Unsupported promotion detail {type(detail).__name__}")
