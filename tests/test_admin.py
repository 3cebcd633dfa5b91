import pytest

from apps.products.forms import ProductAdminForm, VariationAdminForm
from apps.products.models import StockLevel, Variation

pytestmark = pytest.mark.django_db


class TestVariationAdminForm:

    def test_new_variation_starts_at_the_given_stock(self, shirt):
        form = VariationAdminForm(data={
            'product': shirt['product'].pk,
            'price': '1.50',
            'status': Variation.STATUS_ENABLED,
            'stock': 7,
        })
        assert form.is_valid(), form.errors
        variation = form.save()
        assert variation.stock_level.level == 7

    def test_stock_defaults_to_unlimited(self, shirt):
        form = VariationAdminForm(data={
            'product': shirt['product'].pk,
            'price': '0',
            'status': Variation.STATUS_ENABLED,
        })
        assert form.is_valid(), form.errors
        variation = form.save()
        assert variation.stock_level.level == StockLevel.UNLIMITED

    def test_edit_stock_of_existing_variation(self, shirt):
        variation = shirt['red_variation']
        form = VariationAdminForm(instance=variation)
        assert form.fields['stock'].initial == 5

        form = VariationAdminForm(instance=variation, data={
            'product': shirt['product'].pk,
            'price': '0',
            'status': Variation.STATUS_ENABLED,
            'stock': 0,
        })
        assert form.is_valid(), form.errors
        form.save()
        assert StockLevel.objects.get(pk=variation.stock_level_id).level == 0
        assert not variation.in_stock()

    def test_stock_below_unlimited_is_rejected(self, shirt):
        form = VariationAdminForm(instance=shirt['red_variation'], data={
            'product': shirt['product'].pk,
            'price': '0',
            'status': Variation.STATUS_ENABLED,
            'stock': -2,
        })
        assert 'stock' in form.errors


def test_product_form_writes_stock(simple_product):
    form = ProductAdminForm(instance=simple_product, data={
        'title': simple_product.title,
        'slug': simple_product.slug,
        'price': '8.50',
        'is_published': True,
        'stock': 12,
    })
    assert form.is_valid(), form.errors
    form.save()
    simple_product.stock_level.refresh_from_db()
    assert simple_product.stock_level.level == 12


class TestAdminPages:

    def test_variation_change_page_has_stock_field(self, admin_client, shirt):
        response = admin_client.get(f"/admin/products/variation/{shirt['red_variation'].pk}/change/")
        assert response.status_code == 200
        assert b'name="stock"' in response.content

    def test_product_page_lists_variation_stock(self, admin_client, shirt):
        response = admin_client.get(f"/admin/products/product/{shirt['product'].pk}/change/")
        assert response.status_code == 200
        assert b'name="variations-0-stock"' in response.content
        assert b'name="stock"' not in response.content
