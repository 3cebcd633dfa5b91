"""
Price resolution for products and variations.

All amounts are in the shop base currency; the display symbol comes from the
shop configuration.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from apps.products.conf import base_currency, base_currency_symbol

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


@dataclass(frozen=True)
class Price:
    amount: Decimal
    currency: str
    symbol: str

    @classmethod
    def in_base_currency(cls, amount) -> 'Price':
        return cls(Decimal(amount), base_currency(), base_currency_symbol())

    def nice(self) -> str:
        amount = self.amount.quantize(CENTS, rounding=ROUND_HALF_UP)
        return f"{self.symbol}{amount:,}"

    def __str__(self):
        return self.nice()


def resolve(product, variation=None) -> Price:
    """
    Total price of a product, with the price difference of ``variation``
    added when it is positive.
    """
    amount = Decimal(product.price)
    if variation is not None:
        delta = Decimal(variation.price)
        if delta > 0:
            amount += delta
        elif delta < 0:
            logger.warning(
                "Variation %s has a negative price difference %s, ignoring it",
                variation.pk, delta
            )
    return Price(amount, product.currency or base_currency(), base_currency_symbol())


def price_difference(variation):
    """
    Display value of the price difference of a variation: None without a
    variation, 0 when there is nothing to add, e.g. '(+$2.00)' otherwise.
    """
    if variation is None:
        return None
    delta = Decimal(variation.price)
    if delta <= 0:
        return 0
    return f"(+{Price.in_base_currency(delta).nice()})"
