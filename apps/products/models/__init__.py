"""
Product catalog models.

Model Hierarchy:
- Product: Item for sale with a base price and its own stock level
- Attribute: Selectable dimension of a product (Size, Color)
- Option: Values for each attribute (Small, Red)
- Variation: One option per attribute, with a price difference and stock level
- StockLevel: Stock counter, -1 meaning unlimited
- ProductImage: Ordered product images
- Category: Hierarchical product categories
- LineItem: Product or variation added to a cart
"""

from .stock import StockLevel
from .category import Category
from .product import Product
from .attribute import Attribute, Option
from .variation import Variation, VariationOption
from .image import ProductImage
from .line_item import LineItem

__all__ = [
    'StockLevel',
    'Category',
    'Product',
    'Attribute',
    'Option',
    'Variation',
    'VariationOption',
    'ProductImage',
    'LineItem',
]
