from django.db import models


class Attribute(models.Model):
    """
    A selectable dimension of a product, e.g. Size or Color.
    A product with attributes must be sold through its variations.
    """
    product = models.ForeignKey(
        'products.Product',
        on_delete=models.CASCADE,
        related_name='attributes',
        verbose_name='Product'
    )
    title = models.CharField(
        max_length=100,
        verbose_name='Title'
    )
    display_order = models.PositiveIntegerField(
        default=0,
        verbose_name='Display order'
    )

    class Meta:
        ordering = ['display_order', 'id']
        unique_together = ['product', 'title']
        verbose_name = 'Attribute'
        verbose_name_plural = 'Attributes'

    def __str__(self):
        return self.title


class Option(models.Model):
    """
    One value of an attribute, always linked to the attribute's product.

    Examples:
        - Product "T-Shirt" + Attribute "Size" -> Options: "Small", "Large"
        - Product "T-Shirt" + Attribute "Color" -> Options: "Red", "Blue"
    """
    attribute = models.ForeignKey(
        Attribute,
        on_delete=models.CASCADE,
        related_name='options',
        verbose_name='Attribute'
    )
    product = models.ForeignKey(
        'products.Product',
        on_delete=models.CASCADE,
        related_name='options',
        verbose_name='Product'
    )
    title = models.CharField(
        max_length=100,
        verbose_name='Title'
    )
    display_order = models.PositiveIntegerField(
        default=0,
        verbose_name='Display order'
    )

    class Meta:
        ordering = ['display_order', 'title']
        unique_together = ['attribute', 'title']
        verbose_name = 'Option'
        verbose_name_plural = 'Options'

    def __str__(self):
        return f"{self.attribute.title}: {self.title}"

    def save(self, *args, **kwargs):
        if not self.product_id:
            self.product_id = self.attribute.product_id
        super().save(*args, **kwargs)
