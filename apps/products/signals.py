"""
Django signals for the products app.
Keeps category membership in line with the product's place in the site tree.
"""

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Product


@receiver(post_save, sender=Product)
def add_parent_category(sender, instance, raw=False, **kwargs):
    """
    If the product is placed under a category, make sure that category is
    one of the product's categories.
    """
    if raw or not instance.parent_category_id:
        return

    if not instance.categories.filter(pk=instance.parent_category_id).exists():
        instance.categories.add(instance.parent_category_id)
