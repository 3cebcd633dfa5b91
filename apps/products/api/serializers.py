from rest_framework import serializers
from apps.products.models import (
    Attribute,
    Category,
    Option,
    Product,
    ProductImage,
    Variation,
)


# =============================================================================
# Attribute Serializers
# =============================================================================

class OptionSerializer(serializers.ModelSerializer):
    attribute_title = serializers.CharField(
        source='attribute.title', read_only=True
    )

    class Meta:
        model = Option
        fields = ['id', 'attribute', 'attribute_title', 'title', 'display_order']


class AttributeSerializer(serializers.ModelSerializer):
    options = OptionSerializer(many=True, read_only=True)

    class Meta:
        model = Attribute
        fields = ['id', 'title', 'display_order', 'options']


# =============================================================================
# Image Serializer
# =============================================================================

class ProductImageSerializer(serializers.ModelSerializer):
    thumbnail_url = serializers.SerializerMethodField()

    class Meta:
        model = ProductImage
        fields = ['id', 'image', 'thumbnail_url', 'caption', 'sort_order']

    def get_thumbnail_url(self, obj):
        if obj.thumbnail:
            request = self.context.get('request')
            if request:
                return request.build_absolute_uri(obj.thumbnail.url)
            return obj.thumbnail.url
        return None


# =============================================================================
# Variation Serializers
# =============================================================================

class VariationSerializer(serializers.ModelSerializer):
    stock = serializers.IntegerField(source='stock_level.level', read_only=True, default=None)
    is_enabled = serializers.BooleanField(read_only=True)
    in_stock = serializers.BooleanField(read_only=True)
    options = serializers.SerializerMethodField()
    summary = serializers.CharField(source='summary_of_options', read_only=True)

    class Meta:
        model = Variation
        fields = [
            'id', 'product', 'price', 'status', 'is_enabled',
            'stock', 'in_stock', 'options', 'summary',
            'created_at', 'updated_at'
        ]

    def get_options(self, obj):
        """Return {attribute_id: option_id} for this variation."""
        return {str(a): o for a, o in obj.get_selection()}


class StockAdjustmentSerializer(serializers.Serializer):
    delta = serializers.IntegerField()


# =============================================================================
# Product Serializers
# =============================================================================

class CategorySerializer(serializers.ModelSerializer):
    breadcrumbs = serializers.CharField(read_only=True)

    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'parent', 'description', 'display_order', 'breadcrumbs']


class ProductListSerializer(serializers.ModelSerializer):
    """Product list with price and availability."""
    amount = serializers.SerializerMethodField()
    in_stock = serializers.BooleanField(read_only=True)
    requires_variation = serializers.BooleanField(read_only=True)
    first_image = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'title', 'slug', 'price', 'currency', 'amount',
            'in_stock', 'requires_variation', 'is_published', 'first_image'
        ]

    def get_amount(self, obj):
        return obj.amount().nice()

    def get_first_image(self, obj):
        img = obj.first_image()
        if img:
            request = self.context.get('request')
            if request and img.thumbnail:
                return request.build_absolute_uri(img.thumbnail.url)
        return None


class ProductDetailSerializer(ProductListSerializer):
    """Full product detail with images, attributes and variations."""
    images = ProductImageSerializer(many=True, read_only=True)
    attributes = AttributeSerializer(many=True, read_only=True)
    variations = VariationSerializer(many=True, read_only=True)
    categories = CategorySerializer(many=True, read_only=True)
    parent_type = serializers.CharField(source='get_parent_type', read_only=True)
    url = serializers.CharField(source='get_absolute_url', read_only=True)

    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + [
            'description', 'parent_type', 'url', 'categories',
            'images', 'attributes', 'variations',
            'created_at', 'updated_at'
        ]
