"""
Cart line builder: turns a product, a quantity and an option selection into
a LineItem for the order subsystem, taking the stock it consumes.

This is the only place stock is decremented. Removing a line from a cart goes
through ``release_line`` which restores it.
"""

import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from apps.products.conf import shop_setting
from apps.products.exceptions import InvalidSelection, NoMatchingVariation, OutOfStock
from apps.products.models import LineItem, Option, StockLevel
from .matching import find_exact_match
from .pricing import resolve
from .selection import Selection
from .stock import is_in_stock

logger = logging.getLogger(__name__)


def _clean_quantity(quantity) -> int:
    if quantity in (None, ''):
        return 1
    try:
        quantity = int(quantity)
    except (TypeError, ValueError):
        raise InvalidSelection('Quantity must be a whole number.')
    if quantity < 1:
        raise InvalidSelection('Quantity must be at least 1.')
    return quantity


def validate_selection(product, selection: Selection) -> None:
    """Every selected attribute and option must belong to ``product``."""
    if not selection:
        return

    attribute_ids = set(product.attributes.values_list('id', flat=True))
    unknown = selection.attribute_ids - attribute_ids
    if unknown:
        raise InvalidSelection(
            f"Attribute(s) {sorted(unknown)} do not belong to this product."
        )

    option_attributes = dict(
        Option.objects.filter(
            product=product,
            pk__in=[option_id for _, option_id in selection]
        ).values_list('id', 'attribute_id')
    )
    for attribute_id, option_id in selection:
        if option_attributes.get(option_id) != attribute_id:
            raise InvalidSelection(
                f"Option {option_id} is not an option of attribute {attribute_id}."
            )


def build_line(product, quantity=1, selection=None, order_reference: str = '') -> LineItem:
    """
    Add ``quantity`` of ``product`` to a cart.

    Raises:
        OutOfStock: the product, or the chosen variation, is not in stock
        NoMatchingVariation: the product requires a variation and the
            selection does not match exactly one enabled variation
        InvalidSelection: bad quantity, or options not belonging to the product
    """
    quantity = _clean_quantity(quantity)
    if not isinstance(selection, Selection):
        selection = Selection.from_mapping(selection)

    if not product.in_stock():
        raise OutOfStock()

    variation = None
    if product.requires_variation():
        if not selection:
            raise NoMatchingVariation('Please choose an option for every attribute.')
        validate_selection(product, selection)
        variations = product.variations.prefetch_related('options').select_related('stock_level')
        variation = find_exact_match(variations, selection, product.attribute_ids())
        if variation is None:
            logger.warning(
                "No variation of product %s matches selection %s",
                product.pk, selection.as_dict()
            )
            raise NoMatchingVariation()
    elif selection:
        raise InvalidSelection('This product has no options to select.')

    owner = variation or product
    if owner.stock_level_id is None:
        raise OutOfStock()

    with transaction.atomic():
        stock_level = StockLevel.objects.select_for_update().filter(pk=owner.stock_level_id).first()
        if stock_level is None or not is_in_stock(stock_level.level):
            raise OutOfStock()

        price = resolve(product, variation)
        line = LineItem.objects.create(
            product=product,
            variation=variation,
            quantity=quantity,
            unit_price=price.amount,
            currency=price.currency,
            order_reference=order_reference,
        )
        owner.update_stock_by(-quantity)

    logger.info(
        "Added %s x product %s (variation %s) to cart %r at %s",
        quantity, product.pk, variation.pk if variation else None,
        order_reference, price.nice()
    )
    return line


def release_line(line: LineItem) -> LineItem:
    """
    Give the stock of a line back and cancel it. Cancelled lines are left
    alone, also when another request cancelled the line since it was loaded.
    """
    if line.order_status == LineItem.STATUS_CANCELLED:
        return line

    with transaction.atomic():
        cancelled = LineItem.objects.filter(pk=line.pk).exclude(
            order_status=LineItem.STATUS_CANCELLED
        ).update(order_status=LineItem.STATUS_CANCELLED)
        line.order_status = LineItem.STATUS_CANCELLED
        if not cancelled:
            return line

        owner = line.stock_owner()
        if owner.stock_level_id is None:
            logger.warning("Line item %s was cancelled, its %s has no stock level", line.pk, owner)
            return line
        owner.update_stock_by(line.quantity)

    logger.info("Released line item %s, %s back in stock", line.pk, line.quantity)
    return line


def reclaim_abandoned(older_than=None) -> int:
    """
    Release cart lines that have been sitting in a cart for longer than the
    cart lifetime. Returns how many lines were released.
    """
    if older_than is None:
        older_than = timedelta(minutes=shop_setting('CART_LIFETIME_MINUTES'))
    cutoff = timezone.now() - older_than

    abandoned = LineItem.objects.filter(
        order_status=LineItem.STATUS_CART,
        created_at__lt=cutoff
    ).select_related('product__stock_level', 'variation__stock_level')

    count = 0
    for line in abandoned:
        release_line(line)
        count += 1

    if count:
        logger.info("Reclaimed stock from %s abandoned cart lines", count)
    return count
