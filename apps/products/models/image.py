from django.db import models
from imagekit.models import ProcessedImageField, ImageSpecField
from imagekit.processors import ResizeToFill, ResizeToFit


class ProductImage(models.Model):
    """Images for a product, shown in sort order, with automatic thumbnails."""
    product = models.ForeignKey(
        'products.Product',
        on_delete=models.CASCADE,
        related_name='images',
        verbose_name='Product'
    )
    image = ProcessedImageField(
        upload_to='products/%Y/%m/',
        processors=[ResizeToFit(1200, 1200)],
        format='JPEG',
        options={'quality': 85},
        verbose_name='Image'
    )
    thumbnail = ImageSpecField(
        source='image',
        processors=[ResizeToFill(300, 300)],
        format='JPEG',
        options={'quality': 70}
    )
    caption = models.TextField(
        blank=True,
        verbose_name='Caption'
    )
    sort_order = models.PositiveIntegerField(
        default=0,
        verbose_name='Sort order'
    )

    class Meta:
        ordering = ['sort_order', 'id']
        verbose_name = 'Image'
        verbose_name_plural = 'Images'

    def __str__(self):
        return f"{self.product.title} - Image {self.sort_order}"
