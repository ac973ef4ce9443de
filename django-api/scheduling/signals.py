"""Django signals for cache invalidation.

Every write to a price list or voucher (and their child rows) clears the
cached list responses. Store writes go through ``save``/``delete`` on model
instances so these handlers always fire.
"""

import logging

from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from scheduling.cache_keys import GAPS_KEY, PRICE_LISTS_KEY, VOUCHERS_KEY
from scheduling.models import PriceLine, PriceList, PromotionLine, Voucher

logger = logging.getLogger(__name__)


@receiver([post_save, post_delete], sender=PriceList)
@receiver([post_save, post_delete], sender=PriceLine)
def invalidate_price_list_cache(sender, instance, **kwargs):
    """Invalidate the price list and gap caches."""
    cache.delete_many([PRICE_LISTS_KEY, GAPS_KEY])
    logger.debug("Cleared price list caches after %s change", sender.__name__)


@receiver([post_save, post_delete], sender=Voucher)
@receiver([post_save, post_delete], sender=PromotionLine)
def invalidate_voucher_cache(sender, instance, **kwargs):
    """Invalidate the voucher list cache."""
    cache.delete(VOUCHERS_KEY)
    logger.debug("Cleared voucher cache after %s change", sender.__name__)
