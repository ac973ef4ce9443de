"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

from django.db import models

from scheduling.domain.value_objects import PriceListId, VoucherId


def _new_price_list_id() -> str:
    return PriceListId.generate().value


def _new_voucher_id() -> str:
    return VoucherId.generate().value


class PriceList(models.Model):
    """Persistence model for price lists.

    Status is not stored; it is derived from the dates on every read.
    """

    id = models.CharField(primary_key=True, max_length=24, default=_new_price_list_id, editable=False)
    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    start_date = models.DateField()
    end_date = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_date"]
        indexes = [
            models.Index(fields=["start_date", "end_date"], name="price_list_dates_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="price_list_end_after_start",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.code} ({self.start_date} - {self.end_date})"


class PriceLine(models.Model):
    """Persistence model for one priced entry of a price list."""

    price_list = models.ForeignKey(PriceList, on_delete=models.CASCADE, related_name="lines")
    kind = models.CharField(max_length=16)
    seat_type = models.CharField(max_length=32, blank=True, null=True)
    product_id = models.CharField(max_length=64, blank=True, null=True)
    product_name = models.CharField(max_length=255, blank=True, null=True)
    price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.kind} {self.seat_type or self.product_name} - {self.price}"


class Voucher(models.Model):
    """Persistence model for vouchers (promotion headers)."""

    id = models.CharField(primary_key=True, max_length=24, default=_new_voucher_id, editable=False)
    code = models.CharField(max_length=16, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(max_length=16, default="enabled")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-id"]
        indexes = [
            models.Index(fields=["status"], name="voucher_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"


class PromotionLine(models.Model):
    """Persistence model for promotion lines; ``detail`` holds the variant payload."""

    voucher = models.ForeignKey(Voucher, on_delete=models.CASCADE, related_name="lines")
    code = models.CharField(max_length=10, unique=True)
    promotion_type = models.CharField(max_length=16)
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(max_length=16, default="enabled")
    stacking_policy = models.CharField(max_length=32, default="STACKABLE")
    exclusion_group = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["voucher", "status"], name="promotion_line_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.code} ({self.promotion_type})"
