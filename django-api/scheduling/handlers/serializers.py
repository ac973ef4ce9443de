"""Serializers for request validation and for rendering domain models."""

from decimal import Decimal

from rest_framework import serializers

from scheduling.conf import get_setting
from scheduling.domain import (
    ApplyType,
    Interval,
    LineKind,
    Money,
    PriceLine,
    PromotionType,
    RewardType,
    StackingPolicy,
    StackingRule,
    VoucherStatus,
)
from scheduling.domain.payloads import detail_from_dict, detail_to_dict
from scheduling.services.scheduler import Trigger


def _interval(attrs: dict, start_key: str = "start", end_key: str = "end") -> Interval:
    try:
        return Interval(start=attrs[start_key], end=attrs[end_key])
    except ValueError as exc:
        raise serializers.ValidationError({end_key: str(exc)}) from exc


class IntervalSerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()


class BlockedDaysSerializer(IntervalSerializer):
    def validate(self, attrs):
        window = _interval(attrs)
        limit = get_setting("BLOCKED_DAYS_MAX_WINDOW")
        if window.days > limit:
            raise serializers.ValidationError({"end": f"The window may span at most {limit} days"})
        attrs["window"] = window
        return attrs


# Input


class PriceLineInputSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=[k.value for k in LineKind])
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal(0))
    seat_type = serializers.CharField(required=False, allow_null=True, default=None)
    product_id = serializers.CharField(required=False, allow_null=True, default=None)
    product_name = serializers.CharField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        try:
            attrs["line"] = PriceLine(
                kind=LineKind(attrs["kind"]),
                price=Money(attrs["price"]),
                seat_type=attrs["seat_type"],
                product_id=attrs["product_id"],
                product_name=attrs["product_name"],
            )
        except ValueError as exc:
            raise serializers.ValidationError(str(exc)) from exc
        return attrs


class PriceListCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=32)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    start = serializers.DateField()
    end = serializers.DateField()
    lines = PriceLineInputSerializer(many=True, required=False, default=list)

    def validate(self, attrs):
        attrs["interval"] = _interval(attrs)
        attrs["price_lines"] = [line["line"] for line in attrs["lines"]]
        return attrs


class EndDateSerializer(serializers.Serializer):
    end = serializers.DateField()


class DuplicateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=32)
    name = serializers.CharField(max_length=255)
    start = serializers.DateField()
    end = serializers.DateField()

    def validate(self, attrs):
        attrs["interval"] = _interval(attrs)
        return attrs


class SplitSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=32)
    name = serializers.CharField(max_length=255)
    old_end = serializers.DateField()
    new_start = serializers.DateField()
    new_end = serializers.DateField(required=False, allow_null=True, default=None)


class VoucherCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=16)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    start = serializers.DateField()
    end = serializers.DateField()
    status = serializers.ChoiceField(choices=[s.value for s in VoucherStatus], default=VoucherStatus.ENABLED.value)

    def validate(self, attrs):
        attrs["interval"] = _interval(attrs)
        attrs["status"] = VoucherStatus(attrs["status"])
        return attrs


class VoucherStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[s.value for s in VoucherStatus])

    def validate_status(self, value):
        return VoucherStatus(value)


class ReevaluateSerializer(serializers.Serializer):
    trigger = serializers.ChoiceField(choices=[t.value for t in Trigger], default=Trigger.MANUAL.value)

    def validate_trigger(self, value):
        return Trigger(value)


def _amount(**kwargs):
    return serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal(0), **kwargs)


def _percent(**kwargs):
    return serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal(0), max_value=Decimal(100), **kwargs
    )


def _optional(field_factory, **kwargs):
    return field_factory(required=False, allow_null=True, default=None, **kwargs)


class ItemDetailSerializer(serializers.Serializer):
    buy_item = serializers.CharField()
    buy_quantity = serializers.IntegerField(min_value=1)
    reward_item = serializers.CharField()
    reward_quantity = serializers.IntegerField(min_value=1)
    reward_type = serializers.ChoiceField(choices=[r.value for r in RewardType])
    reward_discount_percent = _optional(_percent)
    apply_type = _optional(serializers.ChoiceField, choices=[a.value for a in ApplyType])
    budget = _optional(serializers.IntegerField, min_value=0)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class AmountDetailSerializer(serializers.Serializer):
    min_order_value = _amount()
    discount_value = _amount()
    budget = _optional(_amount)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class PercentDetailSerializer(serializers.Serializer):
    apply_type = serializers.ChoiceField(choices=[a.value for a in ApplyType])
    percent = _percent()
    combo_id = _optional(serializers.CharField)
    combo_name = _optional(serializers.CharField)
    seat_type = _optional(serializers.CharField)
    budget = _optional(_amount)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class CouponDetailSerializer(serializers.Serializer):
    points_cost = serializers.IntegerField(min_value=0)
    quantity = serializers.IntegerField(min_value=0)
    total_quantity = _optional(serializers.IntegerField, min_value=0)
    percent = _percent()
    max_discount_value = _amount()
    description = serializers.CharField(required=False, allow_blank=True, default="")


DETAIL_SERIALIZERS = {
    PromotionType.ITEM: ItemDetailSerializer,
    PromotionType.AMOUNT: AmountDetailSerializer,
    PromotionType.PERCENT: PercentDetailSerializer,
    PromotionType.VOUCHER: CouponDetailSerializer,
}


class PromotionLineInputSerializer(serializers.Serializer):
    promotion_type = serializers.ChoiceField(choices=[t.value for t in PromotionType])
    start = serializers.DateField()
    end = serializers.DateField()
    status = serializers.ChoiceField(choices=[s.value for s in VoucherStatus], default=VoucherStatus.ENABLED.value)
    stacking_policy = serializers.ChoiceField(
        choices=[p.value for p in StackingPolicy], default=StackingPolicy.STACKABLE.value
    )
    exclusion_group = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)
    detail = serializers.DictField()

    def validate(self, attrs):
        attrs["interval"] = _interval(attrs)
        attrs["status"] = VoucherStatus(attrs["status"])
        try:
            attrs["rule"] = StackingRule(
                policy=StackingPolicy(attrs["stacking_policy"]),
                exclusion_group=attrs["exclusion_group"] or None,
            )
        except ValueError as exc:
            raise serializers.ValidationError({"exclusion_group": str(exc)}) from exc
        promotion_type = PromotionType(attrs["promotion_type"])
        detail = DETAIL_SERIALIZERS[promotion_type](data=attrs["detail"])
        if not detail.is_valid():
            raise serializers.ValidationError({"detail": detail.errors})
        try:
            attrs["promotion_detail"] = detail_from_dict(promotion_type, detail.validated_data)
        except ValueError as exc:
            raise serializers.ValidationError({"detail": str(exc)}) from exc
        return attrs


# Output


class PriceLineSerializer(serializers.Serializer):
    kind = serializers.CharField(source="kind.value")
    price = serializers.DecimalField(source="price.amount", max_digits=12, decimal_places=2)
    seat_type = serializers.CharField(allow_null=True)
    product_id = serializers.CharField(allow_null=True)
    product_name = serializers.CharField(allow_null=True)


class PriceListSerializer(serializers.Serializer):
    """Serializer for a price list with its derived status."""

    id = serializers.CharField(source="price_list.id.value")
    code = serializers.CharField(source="price_list.code")
    name = serializers.CharField(source="price_list.name")
    description = serializers.CharField(source="price_list.description")
    start = serializers.DateField(source="price_list.interval.start")
    end = serializers.DateField(source="price_list.interval.end")
    status = serializers.CharField(source="status.value")
    lines = PriceLineSerializer(source="price_list.lines", many=True)


class GapReportSerializer(serializers.Serializer):
    has_gap = serializers.BooleanField()
    gaps = IntervalSerializer(many=True)


class PromotionLineSerializer(serializers.Serializer):
    code = serializers.CharField()
    promotion_type = serializers.CharField(source="promotion_type.value")
    start = serializers.DateField(source="interval.start")
    end = serializers.DateField(source="interval.end")
    status = serializers.CharField(source="status.value")
    stacking_policy = serializers.CharField(source="rule.policy.value")
    exclusion_group = serializers.CharField(source="rule.exclusion_group", allow_null=True)
    detail = serializers.SerializerMethodField()

    def get_detail(self, line):
        return detail_to_dict(line.detail)


class VoucherSerializer(serializers.Serializer):
    """Serializer for Voucher domain model."""

    id = serializers.CharField(source="id.value")
    code = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()
    start = serializers.DateField(source="interval.start")
    end = serializers.DateField(source="interval.end")
    status = serializers.CharField(source="status.value")
    lines = PromotionLineSerializer(many=True)


class StatusChangeSerializer(serializers.Serializer):
    voucher_id = serializers.CharField(source="voucher_id.value")
    status = serializers.CharField(source="status.value")
    reason = serializers.CharField(source="reason.value")
    winner_id = serializers.SerializerMethodField()

    def get_winner_id(self, change):
        return change.winner_id.value if change.winner_id else None
