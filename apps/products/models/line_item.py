from django.db import models


class LineItem(models.Model):
    """
    A product (and its variation) added to a cart, with a price snapshot.
    Order status transitions belong to the order subsystem; the catalog reads
    them to report unprocessed quantities and to reclaim abandoned carts.
    """
    STATUS_CART = 'Cart'
    STATUS_PENDING = 'Pending'
    STATUS_PROCESSING = 'Processing'
    STATUS_DISPATCHED = 'Dispatched'
    STATUS_CANCELLED = 'Cancelled'
    STATUS_CHOICES = [
        (STATUS_CART, 'Cart'),
        (STATUS_PENDING, 'Pending'),
        (STATUS_PROCESSING, 'Processing'),
        (STATUS_DISPATCHED, 'Dispatched'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    product = models.ForeignKey(
        'products.Product',
        on_delete=models.PROTECT,
        related_name='line_items',
        verbose_name='Product'
    )
    variation = models.ForeignKey(
        'products.Variation',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='line_items',
        verbose_name='Variation'
    )
    quantity = models.PositiveIntegerField(
        default=1,
        verbose_name='Quantity'
    )
    unit_price = models.DecimalField(
        max_digits=19,
        decimal_places=4,
        verbose_name='Unit price'
    )
    currency = models.CharField(
        max_length=3,
        verbose_name='Currency'
    )
    order_reference = models.CharField(
        max_length=100,
        blank=True,
        db_index=True,
        verbose_name='Order reference'
    )
    order_status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_CART,
        db_index=True,
        verbose_name='Order status'
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Created at'
    )

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Line item'
        verbose_name_plural = 'Line items'

    def __str__(self):
        return f"{self.quantity} x {self.product.title}"

    @property
    def total_price(self):
        return self.unit_price * self.quantity

    def stock_owner(self):
        return self.variation or self.product
