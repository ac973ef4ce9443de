"""Cache keys shared by the views that fill them and the signals that clear them."""

PRICE_LISTS_KEY = "price_lists:list"
GAPS_KEY = "price_lists:gaps"
VOUCHERS_KEY = "vouchers:list"
