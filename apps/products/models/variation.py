from decimal import Decimal

from django.db import models
from simple_history.models import HistoricalRecords


class Variation(models.Model):
    """
    One concrete combination of options, one per attribute of the product,
    with its own price difference and stock level.
    """
    STATUS_ENABLED = 'Enabled'
    STATUS_DISABLED = 'Disabled'
    STATUS_CHOICES = [
        (STATUS_ENABLED, 'Enabled'),
        (STATUS_DISABLED, 'Disabled'),
    ]

    product = models.ForeignKey(
        'products.Product',
        on_delete=models.CASCADE,
        related_name='variations',
        verbose_name='Product'
    )
    price = models.DecimalField(
        max_digits=19,
        decimal_places=4,
        default=Decimal('0'),
        verbose_name='Price difference',
        help_text='Added to the product price when this variation is chosen'
    )
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_ENABLED,
        verbose_name='Status'
    )
    stock_level = models.OneToOneField(
        'products.StockLevel',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='variation',
        verbose_name='Stock level'
    )
    options = models.ManyToManyField(
        'products.Option',
        through='VariationOption',
        related_name='variations',
        verbose_name='Options'
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

    initial_stock = None

    class Meta:
        ordering = ['product', 'id']
        verbose_name = 'Variation'
        verbose_name_plural = 'Variations'

    def __str__(self):
        summary = self.summary_of_options() if self.pk else ''
        return f"{self.product.title} ({summary})" if summary else self.product.title

    def save(self, *args, **kwargs):
        from .stock import StockLevel

        if self.stock_level_id is None:
            level = StockLevel.UNLIMITED if self.initial_stock is None else self.initial_stock
            self.stock_level = StockLevel.objects.create(level=level)
        elif self.initial_stock is not None:
            StockLevel.objects.filter(pk=self.stock_level_id).update(level=self.initial_stock)
            self.stock_level.level = self.initial_stock
        self.initial_stock = None

        super().save(*args, **kwargs)

    def is_enabled(self):
        return self.status == self.STATUS_ENABLED

    def in_stock(self):
        from apps.products.services.stock import is_in_stock
        return self.stock_level_id is not None and is_in_stock(self.stock_level.level)

    def update_stock_by(self, quantity):
        from apps.products.services.stock import StockLedger
        return StockLedger.update_stock_by(self, quantity)

    def amount(self):
        """Price difference of this variation as a Price."""
        from apps.products.services.pricing import Price
        return Price.in_base_currency(self.price)

    def set_option(self, option):
        """Choose an option, replacing any option of the same attribute."""
        VariationOption.objects.create(variation=self, option=option)

    def get_option_for_attribute(self, attribute_id):
        for option in self.options.all():
            if option.attribute_id == int(attribute_id):
                return option
        return None

    def get_selection(self):
        """Return the {attribute_id: option_id} map of this variation as a Selection."""
        from apps.products.services.selection import Selection
        return Selection.from_pairs(
            (option.attribute_id, option.id) for option in self.options.all()
        )

    def is_valid(self):
        """A variation needs exactly one option for every attribute of its product."""
        attribute_ids = set(self.product.attributes.values_list('id', flat=True))
        chosen = [option.attribute_id for option in self.options.all()]
        return len(chosen) == len(attribute_ids) and set(chosen) == attribute_ids

    def summary_of_options(self):
        return ', '.join(
            f"{option.attribute.title}:{option.title}"
            for option in self.options.select_related('attribute').order_by(
                'attribute__display_order', 'attribute_id'
            )
        )


class VariationOption(models.Model):
    """
    Through model linking Variation to Option.
    Ensures each variation has only one option per attribute.
    """
    variation = models.ForeignKey(
        Variation,
        on_delete=models.CASCADE,
        verbose_name='Variation'
    )
    option = models.ForeignKey(
        'products.Option',
        on_delete=models.CASCADE,
        verbose_name='Option'
    )

    class Meta:
        unique_together = ['variation', 'option']
        verbose_name = 'Variation option'
        verbose_name_plural = 'Variation options'

    def __str__(self):
        return f"{self.variation_id} - {self.option}"

    def save(self, *args, **kwargs):
        # Ensure only one option per attribute per variation
        VariationOption.objects.filter(
            variation=self.variation,
            option__attribute=self.option.attribute
        ).exclude(pk=self.pk).delete()

        super().save(*args, **kwargs)
