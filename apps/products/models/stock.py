from django.db import models


class StockLevel(models.Model):
    """
    Stock counter owned by exactly one Product or one Variation.
    A level of -1 means unlimited stock: it is never decremented or incremented.
    """
    UNLIMITED = -1

    level = models.IntegerField(
        default=UNLIMITED,
        verbose_name='Level',
        help_text='Use -1 for unlimited stock'
    )

    class Meta:
        verbose_name = 'Stock level'
        verbose_name_plural = 'Stock levels'

    def __str__(self):
        if self.is_unlimited:
            return 'Unlimited'
        return str(self.level)

    @property
    def is_unlimited(self):
        return self.level == self.UNLIMITED
