import pytest
from decimal import Decimal
from rest_framework.test import APIClient

from apps.products.models import Category, LineItem, Product, StockLevel, Variation
from apps.products.services.cart import build_line

pytestmark = pytest.mark.django_db


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def staff_client(admin_user):
    client = APIClient()
    client.force_authenticate(admin_user)
    return client


@pytest.fixture
def draft(db):
    product = Product(title='Draft Hat', price=Decimal('15.00'))
    product.initial_stock = 0
    product.save()
    return product


def slugs(response):
    return [item['slug'] for item in response.json()['results']]


class TestProductList:

    def test_anonymous_sees_published_only(self, api_client, simple_product, draft):
        response = api_client.get('/api/products/')
        assert response.status_code == 200
        assert slugs(response) == ['coffee-mug']

    def test_staff_sees_everything(self, staff_client, simple_product, draft):
        response = staff_client.get('/api/products/')
        assert sorted(slugs(response)) == ['coffee-mug', 'draft-hat']

    def test_list_fields(self, api_client, simple_product):
        item = api_client.get('/api/products/').json()['results'][0]
        assert item['amount'] == '$8.50'
        assert item['currency'] == 'USD'
        assert item['in_stock'] is True
        assert item['requires_variation'] is False
        assert item['first_image'] is None

    def test_in_stock_filter(self, staff_client, simple_product, shirt, draft):
        assert sorted(slugs(staff_client.get('/api/products/?in_stock=true'))) == ['coffee-mug', 't-shirt']
        assert slugs(staff_client.get('/api/products/?in_stock=false')) == ['draft-hat']

    def test_category_filter(self, api_client, simple_product, shirt):
        kitchen = Category.objects.create(name='Kitchen')
        simple_product.categories.add(kitchen)
        assert slugs(api_client.get('/api/products/?category=kitchen')) == ['coffee-mug']

    def test_price_filter(self, api_client, simple_product, shirt):
        assert slugs(api_client.get('/api/products/?min_price=9')) == ['t-shirt']
        assert slugs(api_client.get('/api/products/?max_price=9')) == ['coffee-mug']


class TestProductDetail:

    def test_detail(self, api_client, jacket):
        response = api_client.get('/api/products/jacket/')
        assert response.status_code == 200
        data = response.json()
        assert data['url'] == '/product/jacket/'
        assert data['parent_type'] == 'exempt'
        assert [a['title'] for a in data['attributes']] == ['Size', 'Color']
        assert len(data['variations']) == 4

        small_black = jacket['variations'][('small', 'black')]
        variation = next(v for v in data['variations'] if v['id'] == small_black.pk)
        assert variation['stock'] == 2
        assert variation['summary'] == 'Size:Small, Color:Black'
        assert variation['options'] == {
            str(jacket['size'].pk): jacket['small'].pk,
            str(jacket['color'].pk): jacket['black'].pk,
        }

    def test_unpublished_is_hidden(self, api_client, draft):
        assert api_client.get('/api/products/draft-hat/').status_code == 404


class TestPublish:

    def test_requires_staff(self, api_client, draft):
        assert api_client.post('/api/products/draft-hat/publish/').status_code in (401, 403)

    def test_publish(self, staff_client, draft):
        response = staff_client.post('/api/products/draft-hat/publish/')
        assert response.status_code == 200
        assert response.json() == {'status': 'ok', 'is_published': True}
        draft.refresh_from_db()
        assert draft.is_published

    def test_refused_without_enabled_variations(self, staff_client, shirt):
        product = shirt['product']
        product.variations.update(status=Variation.STATUS_DISABLED)
        response = staff_client.post(f'/api/products/{product.slug}/publish/')
        assert response.status_code == 400
        assert response.json()['code'] == 'VariationsDisabledError'


class TestUnprocessed:

    def test_unprocessed_quantity(self, staff_client, simple_product):
        build_line(simple_product, quantity=2, order_reference='cart-1')
        line = build_line(simple_product, quantity=1, order_reference='order-1')
        line.order_status = LineItem.STATUS_PROCESSING
        line.save()

        response = staff_client.get('/api/products/coffee-mug/unprocessed/')
        assert response.status_code == 200
        assert response.json() == {'in_carts': 2, 'in_orders': 1}


class TestVariations:

    def test_filter_by_product_and_stock(self, api_client, shirt, jacket):
        response = api_client.get('/api/variations/?product=t-shirt&in_stock=true')
        ids = [v['id'] for v in response.json()['results']]
        assert ids == [shirt['red_variation'].pk]

        response = api_client.get('/api/variations/?product=t-shirt&in_stock=false')
        ids = [v['id'] for v in response.json()['results']]
        assert ids == [shirt['blue_variation'].pk]

    def test_filter_by_option(self, api_client, jacket):
        response = api_client.get(f"/api/variations/?option={jacket['green'].pk}&status=Enabled")
        ids = [v['id'] for v in response.json()['results']]
        assert ids == [jacket['variations'][('small', 'green')].pk]

    def test_adjust_stock(self, staff_client, shirt):
        variation = shirt['red_variation']
        response = staff_client.post(f'/api/variations/{variation.pk}/adjust_stock/', {'delta': -7}, format='json')
        assert response.status_code == 200
        assert response.json() == {'id': variation.pk, 'stock': 0, 'in_stock': False}

    def test_adjust_unlimited_stock_is_ignored(self, staff_client, jacket):
        variation = jacket['variations'][('large', 'black')]
        response = staff_client.post(f'/api/variations/{variation.pk}/adjust_stock/', {'delta': -3}, format='json')
        assert response.json()['stock'] == -1

    def test_adjust_stock_without_stock_level(self, staff_client, shirt):
        variation = shirt['red_variation']
        StockLevel.objects.filter(pk=variation.stock_level_id).delete()

        response = staff_client.post(f'/api/variations/{variation.pk}/adjust_stock/', {'delta': 2}, format='json')
        assert response.status_code == 409
        assert response.json()['code'] == 'OutOfStock'

    def test_adjust_stock_requires_staff(self, api_client, shirt):
        variation = shirt['red_variation']
        response = api_client.post(f'/api/variations/{variation.pk}/adjust_stock/', {'delta': 1}, format='json')
        assert response.status_code in (401, 403)


class TestCategories:

    def test_breadcrumbs(self, api_client):
        clothing = Category.objects.create(name='Clothing')
        Category.objects.create(name='Shirts', parent=clothing)
        response = api_client.get('/api/categories/shirts/')
        assert response.status_code == 200
        assert response.json()['breadcrumbs'] == 'Clothing > Shirts'
