from django.contrib import admin

from scheduling.models import PriceLine, PriceList, PromotionLine, Voucher


class PriceLineInline(admin.TabularInline):
    model = PriceLine
    extra = 1


class PromotionLineInline(admin.TabularInline):
    model = PromotionLine
    extra = 0
    fields = ["code", "promotion_type", "start_date", "end_date", "status", "stacking_policy", "exclusion_group"]


@admin.register(PriceList)
class PriceListAdmin(admin.ModelAdmin):
    list_display = ["code", "name", "start_date", "end_date", "updated_at"]
    search_fields = ["code", "name"]
    ordering = ["start_date"]
    inlines = [PriceLineInline]


@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    list_display = ["code", "name", "start_date", "end_date", "status"]
    list_filter = ["status"]
    search_fields = ["code", "name"]
    inlines = [PromotionLineInline]
