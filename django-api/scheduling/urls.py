from django.urls import path

from scheduling.handlers.views import (
    BlockedDaysView,
    CurrentPriceListView,
    GapReportView,
    NextSlotView,
    PriceListDetailView,
    PriceListDuplicateView,
    PriceListEndDateView,
    PriceListListView,
    PriceListSplitView,
    PromotionLineDetailView,
    PromotionLineListView,
    VoucherDetailView,
    VoucherListView,
    VoucherReevaluateView,
    VoucherStatusView,
)

urlpatterns = [
    path("price-lists", PriceListListView.as_view(), name="price-list-list"),
    path("price-lists/current", CurrentPriceListView.as_view(), name="price-list-current"),
    path("price-lists/gaps", GapReportView.as_view(), name="price-list-gaps"),
    path("price-lists/next-slot", NextSlotView.as_view(), name="price-list-next-slot"),
    path("price-lists/blocked-days", BlockedDaysView.as_view(), name="price-list-blocked-days"),
    path("price-lists/<str:price_list_id>", PriceListDetailView.as_view(), name="price-list-detail"),
    path(
        "price-lists/<str:price_list_id>/end-date",
        PriceListEndDateView.as_view(),
        name="price-list-end-date",
    ),
    path(
        "price-lists/<str:price_list_id>/duplicate",
        PriceListDuplicateView.as_view(),
        name="price-list-duplicate",
    ),
    path("price-lists/<str:price_list_id>/split", PriceListSplitView.as_view(), name="price-list-split"),
    path("vouchers", VoucherListView.as_view(), name="voucher-list"),
    path("vouchers/reevaluate", VoucherReevaluateView.as_view(), name="voucher-reevaluate"),
    path("vouchers/<str:voucher_id>", VoucherDetailView.as_view(), name="voucher-detail"),
    path("vouchers/<str:voucher_id>/status", VoucherStatusView.as_view(), name="voucher-status"),
    path("vouchers/<str:voucher_id>/lines", PromotionLineListView.as_view(), name="promotion-line-list"),
    path(
        "vouchers/<str:voucher_id>/lines/<str:code>",
        PromotionLineDetailView.as_view(),
        name="promotion-line-detail",
    ),
]
