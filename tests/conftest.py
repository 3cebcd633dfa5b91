from decimal import Decimal

import pytest

from apps.products.models import Attribute, Option, Product, Variation


def make_variation(product, options, price='0', stock=-1, status=Variation.STATUS_ENABLED):
    variation = Variation(product=product, price=Decimal(price), status=status)
    variation.initial_stock = stock
    variation.save()
    for option in options:
        variation.set_option(option)
    return variation


@pytest.fixture
def simple_product(db):
    """A product without attributes and 3 in stock."""
    product = Product(title='Coffee Mug', price=Decimal('8.50'), is_published=True)
    product.initial_stock = 3
    product.save()
    return product


@pytest.fixture
def shirt(db):
    """
    Base price 10.00 with a Color attribute:
    Red (no price difference, 5 in stock) and Blue (+2.00, out of stock).
    """
    product = Product.objects.create(title='T-Shirt', price=Decimal('10.00'), is_published=True)
    color = Attribute.objects.create(product=product, title='Color')
    red = Option.objects.create(attribute=color, title='Red')
    blue = Option.objects.create(attribute=color, title='Blue')
    red_variation = make_variation(product, [red], price='0', stock=5)
    blue_variation = make_variation(product, [blue], price='2.00', stock=0)
    return {
        'product': product,
        'color': color,
        'red': red,
        'blue': blue,
        'red_variation': red_variation,
        'blue_variation': blue_variation,
    }


@pytest.fixture
def jacket(db):
    """Two attributes, Size and Color. Large/Green is disabled."""
    product = Product.objects.create(title='Jacket', price=Decimal('50.00'), is_published=True)
    size = Attribute.objects.create(product=product, title='Size', display_order=1)
    color = Attribute.objects.create(product=product, title='Color', display_order=2)
    small = Option.objects.create(attribute=size, title='Small')
    large = Option.objects.create(attribute=size, title='Large')
    black = Option.objects.create(attribute=color, title='Black')
    green = Option.objects.create(attribute=color, title='Green')
    variations = {
        ('small', 'black'): make_variation(product, [small, black], stock=2),
        ('small', 'green'): make_variation(product, [small, green], price='5.00', stock=1),
        ('large', 'black'): make_variation(product, [large, black], stock=-1),
        ('large', 'green'): make_variation(
            product, [large, green], stock=4, status=Variation.STATUS_DISABLED
        ),
    }
    return {
        'product': product,
        'size': size,
        'color': color,
        'small': small,
        'large': large,
        'black': black,
        'green': green,
        'variations': variations,
    }
