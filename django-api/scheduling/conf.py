"""App settings with defaults, overridable through ``settings.SCHEDULING``."""

from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "REEVALUATION_INTERVAL_SECONDS": 60,
    "GAP_CACHE_TIMEOUT": 300,
    "LIST_CACHE_TIMEOUT": 60,
    "LINE_CODE_ATTEMPTS": 10,
    "REQUIRED_SEAT_TYPES": ("normal", "vip", "couple", "4dx"),
    "BLOCKED_DAYS_MAX_WINDOW": 366,
}


def get_setting(name: str) -> Any:
    """Return a scheduling setting, falling back to its default."""
    overrides = getattr(settings, "SCHEDULING", {})
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
