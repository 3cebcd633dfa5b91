"""
Publish-time validation of products.
"""

import logging

from apps.products.exceptions import VariationsDisabledError
from apps.products.models import Variation

logger = logging.getLogger(__name__)


def validate_publish(product) -> None:
    """A product that requires variations needs at least one enabled variation."""
    if not product.requires_variation():
        return

    enabled = product.variations.filter(status=Variation.STATUS_ENABLED).exists()
    if not enabled:
        raise VariationsDisabledError()


def publish(product):
    validate_publish(product)
    product.is_published = True
    product.save(update_fields=['is_published', 'updated_at'])
    logger.info("Published product %s", product.pk)
    return product
