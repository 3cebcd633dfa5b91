import logging

from rest_framework import viewsets, filters, permissions, status
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from apps.products.exceptions import CatalogError
from apps.products.models import Category, Product, Variation
from apps.products.services.publishing import publish
from .serializers import (
    CategorySerializer,
    ProductDetailSerializer,
    ProductListSerializer,
    StockAdjustmentSerializer,
    VariationSerializer,
)
from .filters import ProductFilter, VariationFilter

logger = logging.getLogger(__name__)


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    """
    API endpoint for products.

    list: List published products (all products for staff)
    retrieve: Get product detail with images, attributes and variations
    publish: Publish a product (staff)
    unprocessed: Quantity in carts and unprocessed orders (staff)
    """
    queryset = Product.objects.select_related('stock_level')
    lookup_field = 'slug'
    filterset_class = ProductFilter
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['title', 'description']
    ordering_fields = ['title', 'price', 'created_at']
    ordering = ['title']

    def get_serializer_class(self):
        if self.action == 'list':
            return ProductListSerializer
        return ProductDetailSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        if not self.request.user.is_staff:
            queryset = queryset.filter(is_published=True)
        if self.action == 'retrieve':
            queryset = queryset.prefetch_related(
                'images', 'attributes__options', 'variations__options', 'categories'
            )
        return queryset

    @action(detail=True, methods=['post'], permission_classes=[permissions.IsAdminUser])
    def publish(self, request, slug=None):
        """Publish a product, refused when none of its variations is enabled."""
        product = self.get_object()
        try:
            publish(product)
        except CatalogError as e:
            logger.warning("Publishing product %s refused: %s", product.pk, e.code)
            return Response(e.as_dict(), status=e.status_code)
        return Response({'status': 'ok', 'is_published': product.is_published})

    @action(detail=True, methods=['get'], permission_classes=[permissions.IsAdminUser])
    def unprocessed(self, request, slug=None):
        product = self.get_object()
        return Response(product.get_unprocessed_quantity())


class VariationViewSet(viewsets.ReadOnlyModelViewSet):
    """
    API endpoint for variations.

    Supports filtering by product, status, stock status and option.
    """
    queryset = Variation.objects.select_related('product', 'stock_level').prefetch_related(
        'options__attribute'
    )
    serializer_class = VariationSerializer
    filterset_class = VariationFilter
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    ordering_fields = ['id', 'price', 'created_at']
    ordering = ['id']

    @action(detail=True, methods=['post'], permission_classes=[permissions.IsAdminUser])
    def adjust_stock(self, request, pk=None):
        """
        Change the stock level of a variation.

        Expected payload:
        {"delta": -2}
        """
        variation = self.get_object()
        serializer = StockAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            level = variation.update_stock_by(serializer.validated_data['delta'])
        except CatalogError as e:
            logger.warning("Stock adjustment of variation %s refused: %s", variation.pk, e.code)
            return Response(e.as_dict(), status=e.status_code)
        return Response({'id': variation.pk, 'stock': level, 'in_stock': variation.in_stock()})


class CategoryViewSet(viewsets.ReadOnlyModelViewSet):
    """
    API endpoint for product categories.
    """
    queryset = Category.objects.select_related('parent')
    serializer_class = CategorySerializer
    lookup_field = 'slug'
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name']
    ordering = ['display_order', 'name']
