from django.db import models
from django.db.models import Q, Sum
from django.urls import reverse
from django.utils.text import slugify
from simple_history.models import HistoricalRecords

from apps.products.conf import base_currency


class Product(models.Model):
    """
    A product for sale. If a product has attributes (e.g. Size, Color) then it
    must be added to a cart with one of its enabled variations, and its own
    stock level is not used for availability.

    Products are versioned so that a line item can refer to the product as it
    was when it was added to a cart.
    """
    PARENT_ROOT = 'root'
    PARENT_EXEMPT = 'exempt'
    PARENT_SUBPAGE = 'subpage'

    title = models.CharField(
        max_length=255,
        verbose_name='Title'
    )
    slug = models.SlugField(
        max_length=255,
        unique=True,
        blank=True,
        verbose_name='Slug'
    )
    description = models.TextField(
        blank=True,
        verbose_name='Description'
    )
    price = models.DecimalField(
        max_digits=19,
        decimal_places=4,
        verbose_name='Price'
    )
    currency = models.CharField(
        max_length=3,
        blank=True,
        verbose_name='Currency'
    )

    # Placement in the page tree
    in_site_tree = models.BooleanField(
        default=False,
        verbose_name='Part of the site tree',
        help_text='Products outside the site tree are shown at /product/<slug>/'
    )
    parent_category = models.ForeignKey(
        'products.Category',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='child_products',
        verbose_name='Parent category'
    )
    categories = models.ManyToManyField(
        'products.Category',
        blank=True,
        related_name='products',
        verbose_name='Categories'
    )

    stock_level = models.OneToOneField(
        'products.StockLevel',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='product',
        verbose_name='Stock level'
    )

    is_published = models.BooleanField(
        default=False,
        verbose_name='Published'
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Created at'
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Updated at'
    )

    # History tracking
    history = HistoricalRecords()

    # Stock level supplied by the admin form, applied on save
    initial_stock = None

    class Meta:
        ordering = ['title']
        verbose_name = 'Product'
        verbose_name_plural = 'Products'

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        from .stock import StockLevel

        if not self.slug:
            self.slug = slugify(self.title)
            base_slug = self.slug
            counter = 1
            while Product.objects.filter(slug=self.slug).exclude(pk=self.pk).exists():
                self.slug = f"{base_slug}-{counter}"
                counter += 1

        # Always saved in the base currency
        self.currency = base_currency()

        if self.stock_level_id is None:
            level = StockLevel.UNLIMITED if self.initial_stock is None else self.initial_stock
            self.stock_level = StockLevel.objects.create(level=level)
        elif self.initial_stock is not None:
            StockLevel.objects.filter(pk=self.stock_level_id).update(level=self.initial_stock)
            self.stock_level.level = self.initial_stock
        self.initial_stock = None

        super().save(*args, **kwargs)

    def amount(self):
        from apps.products.services.pricing import resolve
        return resolve(self)

    def requires_variation(self):
        """
        A product with attributes can only be added to a cart with a variation,
        so it needs some enabled variations.
        """
        return self.attributes.exists()

    def attribute_ids(self):
        return frozenset(self.attributes.values_list('id', flat=True))

    def in_stock(self):
        from apps.products.services.stock import product_in_stock
        return product_in_stock(self)

    def update_stock_by(self, quantity):
        """
        A negative quantity is passed when the product is added to a cart,
        a positive quantity when it is removed from a cart.
        """
        from apps.products.services.stock import StockLedger
        return StockLedger.update_stock_by(self, quantity)

    def get_options_for_attribute(self, attribute_id):
        """Options of an attribute that belong to enabled, valid, in stock variations."""
        from apps.products.services.matching import filter_by_selection, options_for_next_attribute

        variations = filter_by_selection(
            self.variations.prefetch_related('options'), {}, self.attribute_ids()
        )
        variations = [v for v in variations if v.in_stock()]
        return options_for_next_attribute(variations, attribute_id)

    def get_parent_type(self):
        """Returns root, exempt or subpage."""
        if self.parent_category_id:
            return self.PARENT_SUBPAGE
        if self.in_site_tree:
            return self.PARENT_ROOT
        return self.PARENT_EXEMPT

    def get_absolute_url(self):
        parent_type = self.get_parent_type()
        if parent_type == self.PARENT_EXEMPT:
            return reverse('products:detail', kwargs={'slug': self.slug})
        if parent_type == self.PARENT_ROOT:
            return f"/{self.slug}/"
        segments = self.parent_category.get_path_segments() + [self.slug]
        return '/' + '/'.join(segments) + '/'

    def first_image(self):
        return self.images.first()

    def summary_of_categories(self):
        return ', '.join(c.breadcrumbs() for c in self.categories.all())

    def get_unprocessed_quantity(self):
        """Quantity of this product in shopping carts and in unprocessed orders."""
        from .line_item import LineItem

        totals = LineItem.objects.filter(product=self).aggregate(
            in_carts=Sum('quantity', filter=Q(order_status=LineItem.STATUS_CART)),
            in_orders=Sum('quantity', filter=Q(order_status__in=[
                LineItem.STATUS_PENDING, LineItem.STATUS_PROCESSING
            ])),
        )
        return {
            'in_carts': totals['in_carts'] or 0,
            'in_orders': totals['in_orders'] or 0,
        }

    def duplicate(self):
        """Copy this product and its images. Variations are not copied."""
        images = list(self.images.all())
        categories = list(self.categories.all())

        clone = Product.objects.get(pk=self.pk)
        clone.pk = None
        clone.id = None
        clone._state.adding = True
        clone.slug = ''
        clone.is_published = False
        clone.stock_level = None
        if self.stock_level_id:
            clone.initial_stock = self.stock_level.level
        clone.save()
        clone.categories.set(categories)

        for image in images:
            image.pk = None
            image.id = None
            image._state.adding = True
            image.product = clone
            image.save()
        return clone
