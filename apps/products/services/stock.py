"""
Stock ledger: arithmetic and persistence of product and variation stock levels.

Every stock movement goes through ``StockLedger.update_stock_by`` so that the
floor at zero and the unlimited sentinel apply to adding to a cart and to
reclaiming abandoned carts alike.
"""

import logging

from django.db.models import F, Value
from django.db.models.functions import Greatest

from apps.products.exceptions import OutOfStock
from apps.products.models import StockLevel

logger = logging.getLogger(__name__)

UNLIMITED = StockLevel.UNLIMITED


def adjust(level: int, delta: int) -> int:
    """
    Return the new level after applying ``delta``, floored at zero.

    ``StockLedger.update_stock_by`` applies this same rule in its UPDATE
    statement; keep the two in step.
    """
    if level == UNLIMITED:
        return level
    return max(level + delta, 0)


def is_in_stock(level: int) -> bool:
    return level == UNLIMITED or level != 0


def product_in_stock(product) -> bool:
    """
    A product is in stock if its own stock level is, or, when it requires a
    variation, if ANY of its enabled variations is in stock.
    """
    if product.requires_variation():
        return any(
            variation.is_enabled() and variation.in_stock()
            for variation in product.variations.select_related('stock_level')
        )

    if product.stock_level_id is None:
        return False
    return is_in_stock(product.stock_level.level)


class StockLedger:
    """Persists stock movements for the owner of a stock level."""

    @staticmethod
    def update_stock_by(owner, delta: int) -> int:
        """
        Apply ``delta`` to the stock level of ``owner`` (a Product or Variation)
        in a single UPDATE, so concurrent requests cannot lose updates.
        Returns the new level.
        """
        if owner.stock_level_id is None:
            raise OutOfStock(f"{owner} has no stock level.")

        updated = StockLevel.objects.filter(
            pk=owner.stock_level_id
        ).exclude(
            level=UNLIMITED
        ).update(
            level=Greatest(F('level') + delta, Value(0))
        )

        owner.stock_level.refresh_from_db(fields=['level'])
        if updated:
            logger.info(
                "Stock for %s %s changed by %s to %s",
                owner._meta.model_name, owner.pk, delta, owner.stock_level.level
            )
        return owner.stock_level.level
