from django.contrib import admin, messages
from django.utils.html import format_html
from import_export import resources, fields
from import_export.admin import ImportExportModelAdmin
from import_export.widgets import ForeignKeyWidget
from adminsortable2.admin import SortableAdminBase, SortableInlineAdminMixin
from simple_history.admin import SimpleHistoryAdmin

from .exceptions import CatalogError
from .forms import ProductAdminForm, VariationAdminForm
from .models import (
    Attribute,
    Category,
    LineItem,
    Option,
    Product,
    ProductImage,
    Variation,
    VariationOption,
)
from .services.publishing import publish
from .signals import add_parent_category


# =============================================================================
# Import/Export Resources
# =============================================================================

class VariationResource(resources.ModelResource):
    """Resource for importing/exporting variations."""

    product_slug = fields.Field(
        column_name='product_slug',
        attribute='product',
        widget=ForeignKeyWidget(Product, 'slug')
    )
    stock = fields.Field(column_name='stock', readonly=True)
    options = fields.Field(column_name='options', readonly=True)

    class Meta:
        model = Variation
        fields = ('id', 'product_slug', 'price', 'status', 'stock', 'options')
        export_order = fields

    def dehydrate_stock(self, variation):
        return variation.stock_level.level if variation.stock_level_id else None

    def dehydrate_options(self, variation):
        return variation.summary_of_options()


# =============================================================================
# Inlines
# =============================================================================

class ProductImageInline(SortableInlineAdminMixin, admin.TabularInline):
    model = ProductImage
    extra = 1
    fields = ['image', 'caption', 'sort_order', 'image_preview']
    readonly_fields = ['image_preview']

    def image_preview(self, obj):
        if obj.image:
            return format_html(
                '<img src="{}" style="max-height: 50px; max-width: 100px;" />',
                obj.thumbnail.url if obj.thumbnail else obj.image.url
            )
        return '(No Image)'
    image_preview.short_description = 'Preview'


class AttributeInline(admin.TabularInline):
    model = Attribute
    extra = 1
    fields = ['title', 'display_order']
    show_change_link = True


class OptionInline(admin.TabularInline):
    model = Option
    extra = 1
    fields = ['title', 'display_order']


class VariationOptionInline(admin.TabularInline):
    model = VariationOption
    extra = 1
    autocomplete_fields = ['option']


class VariationInline(admin.TabularInline):
    model = Variation
    form = VariationAdminForm
    extra = 0
    fields = ['summary', 'price', 'status', 'stock']
    readonly_fields = ['summary']
    show_change_link = True

    def summary(self, obj):
        return obj.summary_of_options() if obj.pk else '-'
    summary.short_description = 'Options'


# =============================================================================
# Model Admins
# =============================================================================

@admin.register(Product)
class ProductAdmin(SortableAdminBase, SimpleHistoryAdmin):
    form = ProductAdminForm
    list_display = ['first_image_preview', 'title', 'price_display', 'categories_display', 'stock_status', 'is_published']
    list_filter = ['is_published', 'categories', 'created_at']
    search_fields = ['title', 'slug', 'description', 'categories__name']
    prepopulated_fields = {'slug': ('title',)}
    filter_horizontal = ['categories']
    inlines = [ProductImageInline, AttributeInline, VariationInline]

    fieldsets = (
        (None, {
            'fields': ('title', 'slug', 'price', 'stock', 'description', 'is_published')
        }),
        ('Placement', {
            'fields': ('in_site_tree', 'parent_category', 'categories'),
        }),
    )

    actions = ['publish_products', 'unpublish_products', 'duplicate_products']

    def get_fieldsets(self, request, obj=None):
        fieldsets = super().get_fieldsets(request, obj)
        # Products with attributes keep their stock on each variation
        if obj is not None and obj.requires_variation():
            main = dict(fieldsets[0][1])
            main['fields'] = tuple(f for f in main['fields'] if f != 'stock')
            fieldsets = ((fieldsets[0][0], main),) + tuple(fieldsets[1:])
        return fieldsets

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        add_parent_category(Product, form.instance)

    def first_image_preview(self, obj):
        img = obj.first_image()
        if img:
            return format_html(
                '<img src="{}" style="max-height: 40px; max-width: 60px;" />',
                img.thumbnail.url if img.thumbnail else img.image.url
            )
        return 'no image'
    first_image_preview.short_description = 'Image'

    def price_display(self, obj):
        return obj.amount().nice()
    price_display.short_description = 'Price'

    def categories_display(self, obj):
        return obj.summary_of_categories()
    categories_display.short_description = 'Categories'

    def stock_status(self, obj):
        if obj.in_stock():
            return format_html('<span style="color: green;">In stock</span>')
        return format_html('<span style="color: red;">Out of stock</span>')
    stock_status.short_description = 'Stock'

    @admin.action(description='Publish selected products')
    def publish_products(self, request, queryset):
        count = 0
        for product in queryset:
            try:
                publish(product)
                count += 1
            except CatalogError as e:
                self.message_user(request, f'{product.title}: {e.message}', level=messages.ERROR)
        self.message_user(request, f'{count} products published.')

    @admin.action(description='Unpublish selected products')
    def unpublish_products(self, request, queryset):
        count = queryset.update(is_published=False)
        self.message_user(request, f'{count} products unpublished.')

    @admin.action(description='Duplicate selected products')
    def duplicate_products(self, request, queryset):
        for product in queryset:
            product.duplicate()
        self.message_user(request, f'{queryset.count()} products duplicated.')


@admin.register(Attribute)
class AttributeAdmin(admin.ModelAdmin):
    list_display = ['title', 'product', 'option_count', 'display_order']
    list_filter = ['product']
    search_fields = ['title', 'product__title']
    inlines = [OptionInline]

    def option_count(self, obj):
        return obj.options.count()
    option_count.short_description = 'Options'


@admin.register(Option)
class OptionAdmin(admin.ModelAdmin):
    list_display = ['title', 'attribute', 'product', 'display_order']
    list_filter = ['attribute__product']
    search_fields = ['title', 'attribute__title', 'product__title']


@admin.register(Variation)
class VariationAdmin(ImportExportModelAdmin, SimpleHistoryAdmin):
    form = VariationAdminForm
    resource_class = VariationResource
    list_display = ['__str__', 'product', 'price', 'stock_level', 'status', 'is_valid_display']
    list_filter = ['product', 'status']
    list_editable = ['status']
    search_fields = ['product__title', 'options__title']
    autocomplete_fields = ['product']
    readonly_fields = ['stock_level', 'created_at', 'updated_at']
    inlines = [VariationOptionInline]

    actions = ['enable_variations', 'disable_variations']

    def is_valid_display(self, obj):
        return obj.is_valid()
    is_valid_display.short_description = 'Valid'
    is_valid_display.boolean = True

    @admin.action(description='Enable selected variations')
    def enable_variations(self, request, queryset):
        count = queryset.update(status=Variation.STATUS_ENABLED)
        self.message_user(request, f'{count} variations enabled.')

    @admin.action(description='Disable selected variations')
    def disable_variations(self, request, queryset):
        count = queryset.update(status=Variation.STATUS_DISABLED)
        self.message_user(request, f'{count} variations disabled.')


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'slug', 'display_order']
    list_editable = ['display_order']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}


@admin.register(LineItem)
class LineItemAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'variation', 'unit_price', 'currency', 'order_reference', 'order_status', 'created_at']
    list_filter = ['order_status', 'created_at']
    search_fields = ['order_reference', 'product__title']
    readonly_fields = [
        'product', 'variation', 'quantity', 'unit_price', 'currency',
        'order_reference', 'order_status', 'created_at'
    ]
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


# =============================================================================
# Admin Site Configuration
# =============================================================================

admin.site.site_header = 'Shop Admin'
admin.site.site_title = 'Shop'
admin.site.index_title = 'Products'
