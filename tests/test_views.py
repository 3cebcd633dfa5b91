import json

import pytest
from django.urls import reverse

from apps.products.models import Category, LineItem, Variation

from .conftest import make_variation

pytestmark = pytest.mark.django_db


def post_json(client, url, data):
    return client.post(url, data=json.dumps(data), content_type='application/json')


class TestProductDetail:

    def test_renders_add_to_cart_form(self, client, shirt):
        response = client.get(reverse('products:detail', kwargs={'slug': shirt['product'].slug}))
        assert response.status_code == 200
        assert response.context['in_stock']
        assert response.context['form'] is not None
        assert response.context['first_options'] == [shirt['red']]
        assert b'$10.00' in response.content

    def test_every_attribute_select_is_filled(self, client, jacket):
        response = client.get(jacket['product'].get_absolute_url())
        choices = {attribute.title: set(options) for attribute, options in response.context['attribute_choices']}
        assert choices == {
            'Size': {jacket['small'], jacket['large']},
            'Color': {jacket['black'], jacket['green']},
        }

        content = response.content.decode()
        assert f'name="options[{jacket["color"].pk}]"' in content
        assert f'<option value="{jacket["green"].pk}">Green</option>' in content
        assert 'disabled' not in content
        assert 'products/js/product.js' in content

    def test_selects_post_a_full_selection(self, client, jacket):
        response = client.post(reverse('products:add', kwargs={'slug': 'jacket'}), {
            f"options[{jacket['size'].pk}]": jacket['small'].pk,
            f"options[{jacket['color'].pk}]": jacket['green'].pk,
            'quantity': 1,
        })
        assert response.status_code == 302
        assert LineItem.objects.get().variation == jacket['variations'][('small', 'green')]

    def test_out_of_stock_hides_form(self, client, simple_product):
        simple_product.update_stock_by(-3)
        response = client.get(simple_product.get_absolute_url())
        assert response.status_code == 200
        assert response.context['form'] is None
        assert b'currently out of stock' in response.content

    def test_unknown_or_unpublished_product(self, client, simple_product):
        assert client.get(reverse('products:detail', kwargs={'slug': 'nope'})).status_code == 404
        simple_product.is_published = False
        simple_product.save()
        assert client.get(simple_product.get_absolute_url()).status_code == 404


class TestProductInSiteTree:

    def test_root_product(self, client, simple_product):
        simple_product.in_site_tree = True
        simple_product.save()

        assert client.get('/coffee-mug/').status_code == 200
        response = client.get(reverse('products:detail', kwargs={'slug': 'coffee-mug'}))
        assert response.status_code == 301
        assert response['Location'] == '/coffee-mug/'

    def test_product_below_its_category(self, client, simple_product):
        kitchen = Category.objects.create(name='Kitchen')
        cups = Category.objects.create(name='Cups', parent=kitchen)
        simple_product.parent_category = cups
        simple_product.save()

        response = client.get('/kitchen/cups/coffee-mug/')
        assert response.status_code == 200
        assert response.context['product'] == simple_product
        assert client.get('/cups/coffee-mug/').status_code == 404

    def test_exempt_product_is_not_in_the_tree(self, client, simple_product):
        assert client.get('/coffee-mug/').status_code == 404


class TestOptions:

    def url(self, product):
        return reverse('products:options', kwargs={'slug': product.slug})

    def test_options_for_next_attribute(self, client, jacket):
        response = post_json(client, self.url(jacket['product']), {
            'options': {str(jacket['size'].pk): str(jacket['small'].pk)},
            'next_attribute_id': jacket['color'].pk,
        })
        assert response.status_code == 200
        assert response.json() == {
            'options': {
                str(jacket['black'].pk): 'Black',
                str(jacket['green'].pk): 'Green',
            },
            'count': 2,
            'nextAttributeID': jacket['color'].pk,
        }

    def test_disabled_variations_are_skipped(self, client, jacket):
        response = post_json(client, self.url(jacket['product']), {
            'options': {jacket['size'].pk: jacket['large'].pk},
            'next_attribute_id': jacket['color'].pk,
        })
        assert response.json()['options'] == {str(jacket['black'].pk): 'Black'}

    def test_no_continuation(self, client, jacket):
        Variation.objects.filter(product=jacket['product']).update(status=Variation.STATUS_DISABLED)
        response = post_json(client, self.url(jacket['product']), {
            'options': {jacket['size'].pk: jacket['small'].pk},
            'next_attribute_id': jacket['color'].pk,
        })
        assert response.json() == {}

    def test_form_encoded_options(self, client, jacket):
        response = client.post(self.url(jacket['product']), {
            f"options[{jacket['size'].pk}]": jacket['small'].pk,
            'next_attribute_id': jacket['color'].pk,
        })
        assert response.json()['count'] == 2

    def test_missing_next_attribute(self, client, jacket):
        response = post_json(client, self.url(jacket['product']), {'options': {}})
        assert response.status_code == 400
        assert response.json()['code'] == 'InvalidSelection'

    def test_invalid_json(self, client, jacket):
        response = client.post(self.url(jacket['product']), data='{oops', content_type='application/json')
        assert response.status_code == 400
        assert response.json() == {'status': 'error', 'message': 'Invalid JSON'}

    def test_get_not_allowed(self, client, jacket):
        assert client.get(self.url(jacket['product'])).status_code == 405


class TestVariationPrice:

    def url(self, product):
        return reverse('products:variation_price', kwargs={'slug': product.slug})

    def test_price_difference(self, client, shirt):
        response = post_json(client, self.url(shirt['product']), {
            'options': {shirt['color'].pk: shirt['blue'].pk},
        })
        assert response.json() == {'totalPrice': '$12.00', 'priceDifference': '(+$2.00)'}

    def test_no_price_difference(self, client, shirt):
        response = post_json(client, self.url(shirt['product']), {
            'options': {shirt['color'].pk: shirt['red'].pk},
        })
        assert response.json() == {'totalPrice': '$10.00', 'priceDifference': 0}

    def test_no_matching_variation(self, client, jacket):
        response = post_json(client, self.url(jacket['product']), {
            'options': {jacket['size'].pk: jacket['small'].pk},
        })
        assert response.json() == {'totalPrice': '$50.00'}

    def test_variation_missing_an_option_is_not_priced(self, client, jacket):
        make_variation(jacket['product'], [jacket['small']], price='9.00', stock=5)
        response = post_json(client, self.url(jacket['product']), {
            'options': {jacket['size'].pk: jacket['small'].pk},
        })
        assert response.json() == {'totalPrice': '$50.00'}


class TestAddToCart:

    def url(self, product):
        return reverse('products:add', kwargs={'slug': product.slug})

    def test_add_variation(self, client, shirt):
        response = post_json(client, self.url(shirt['product']), {
            'quantity': 2,
            'options': {shirt['color'].pk: shirt['red'].pk},
            'order_reference': 'cart-42',
        })
        assert response.status_code == 200
        data = response.json()
        assert data['status'] == 'ok'
        assert data['line_item']['variation'] == shirt['red_variation'].pk
        assert data['line_item']['quantity'] == 2
        assert data['line_item']['currency'] == 'USD'

        line = LineItem.objects.get()
        assert line.order_reference == 'cart-42'
        shirt['red_variation'].stock_level.refresh_from_db()
        assert shirt['red_variation'].stock_level.level == 3

    def test_cart_reference_defaults_to_session(self, client, simple_product):
        response = post_json(client, self.url(simple_product), {})
        assert response.status_code == 200
        assert LineItem.objects.get().order_reference == client.session.session_key

    def test_out_of_stock(self, client, shirt):
        response = post_json(client, self.url(shirt['product']), {
            'options': {shirt['color'].pk: shirt['blue'].pk},
        })
        assert response.status_code == 409
        assert response.json()['code'] == 'OutOfStock'
        assert not LineItem.objects.exists()

    def test_no_matching_variation(self, client, shirt):
        response = post_json(client, self.url(shirt['product']), {'options': {}})
        assert response.status_code == 400
        assert response.json()['code'] == 'NoMatchingVariation'

    def test_invalid_quantity(self, client, simple_product):
        response = post_json(client, self.url(simple_product), {'quantity': -4})
        assert response.status_code == 400
        assert 'quantity' in response.json()['errors']

    def test_form_post_redirects_back(self, client, simple_product):
        response = client.post(self.url(simple_product), {'quantity': 1})
        assert response.status_code == 302
        assert response['Location'] == simple_product.get_absolute_url()
        assert LineItem.objects.count() == 1

    def test_form_post_redirect_target(self, client, simple_product):
        response = client.post(self.url(simple_product), {'quantity': 1, 'redirect': '/cart/'})
        assert response['Location'] == '/cart/'

    def test_form_post_offsite_redirect_is_ignored(self, client, simple_product):
        response = client.post(self.url(simple_product), {'quantity': 1, 'redirect': 'https://evil.example/'})
        assert response['Location'] == simple_product.get_absolute_url()
