"""
Shop-wide configuration read from ``settings.SHOP``.
"""

from django.conf import settings

DEFAULTS = {
    'BASE_CURRENCY': 'USD',
    'BASE_CURRENCY_SYMBOL': '$',
    'CART_LIFETIME_MINUTES': 60,
}


def shop_setting(name):
    return getattr(settings, 'SHOP', {}).get(name, DEFAULTS[name])


def base_currency():
    return shop_setting('BASE_CURRENCY')


def base_currency_symbol():
    return shop_setting('BASE_CURRENCY_SYMBOL')
