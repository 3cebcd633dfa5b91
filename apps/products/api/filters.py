from django.db.models import Exists, OuterRef, Q
from django_filters import rest_framework as filters
from apps.products.models import Attribute, Product, Variation

# Stock level -1 is unlimited, 0 is out of stock
IN_STOCK = Q(stock_level__level__lt=0) | Q(stock_level__level__gt=0)


class ProductFilter(filters.FilterSet):
    """Filter for products by category and availability."""

    category = filters.CharFilter(field_name='categories__slug')
    min_price = filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = filters.NumberFilter(field_name='price', lookup_expr='lte')
    in_stock = filters.BooleanFilter(method='filter_in_stock')

    class Meta:
        model = Product
        fields = ['category', 'is_published']

    def filter_in_stock(self, queryset, name, value):
        if value is None:
            return queryset

        queryset = queryset.annotate(
            has_attributes=Exists(Attribute.objects.filter(product=OuterRef('pk'))),
            has_variation_in_stock=Exists(
                Variation.objects.filter(
                    product=OuterRef('pk'),
                    status=Variation.STATUS_ENABLED
                ).filter(IN_STOCK)
            ),
        )
        in_stock = (
            Q(has_attributes=True, has_variation_in_stock=True)
            | (Q(has_attributes=False) & IN_STOCK)
        )
        if value:
            return queryset.filter(in_stock)
        return queryset.exclude(pk__in=queryset.filter(in_stock).values('pk'))


class VariationFilter(filters.FilterSet):
    """Filter for variations by product, status, stock and option."""

    product = filters.CharFilter(field_name='product__slug')
    product_id = filters.NumberFilter(field_name='product__id')
    in_stock = filters.BooleanFilter(method='filter_in_stock')
    option = filters.NumberFilter(field_name='options__id')

    class Meta:
        model = Variation
        fields = ['product', 'product_id', 'status', 'option']

    def filter_in_stock(self, queryset, name, value):
        if value is True:
            return queryset.filter(IN_STOCK)
        elif value is False:
            return queryset.filter(stock_level__level=0)
        return queryset
