from .serializers import (
    AttributeSerializer,
    CategorySerializer,
    OptionSerializer,
    ProductDetailSerializer,
    ProductImageSerializer,
    ProductListSerializer,
    StockAdjustmentSerializer,
    VariationSerializer,
)

__all__ = [
    'AttributeSerializer',
    'CategorySerializer',
    'OptionSerializer',
    'ProductDetailSerializer',
    'ProductImageSerializer',
    'ProductListSerializer',
    'StockAdjustmentSerializer',
    'VariationSerializer',
]
