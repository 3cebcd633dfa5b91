import json
import logging
import re

from django.contrib import messages
from django.http import Http404, JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_http_methods

from .exceptions import CatalogError
from .forms import AddToCartForm
from .models import Product
from .services.cart import build_line, reclaim_abandoned
from .services.matching import filter_by_selection, find_exact_match, options_for_next_attribute
from .services.pricing import price_difference, resolve
from .services.selection import Selection

logger = logging.getLogger(__name__)

OPTION_KEY = re.compile(r'^options\[(\d+)\]$')


def _published_product(slug):
    return get_object_or_404(Product, slug=slug, is_published=True)


def _is_json(request):
    return request.content_type == 'application/json'


def _parse_payload(request):
    """
    Read the request data, either a JSON body or form fields where options
    are posted as options[<attribute id>]=<option id>.
    """
    if _is_json(request):
        payload = json.loads(request.body or b'{}')
        if not isinstance(payload, dict):
            raise json.JSONDecodeError('Expected an object', '', 0)
        return payload

    payload = {key: value for key, value in request.POST.items() if not OPTION_KEY.match(key)}
    payload['options'] = {
        OPTION_KEY.match(key).group(1): value
        for key, value in request.POST.items()
        if OPTION_KEY.match(key)
    }
    return payload


def _invalid_json():
    return JsonResponse({'status': 'error', 'message': 'Invalid JSON'}, status=400)


def _error_response(error):
    return JsonResponse(error.as_dict(), status=error.status_code)


def _cart_reference(request, payload):
    reference = payload.get('order_reference')
    if reference:
        return reference
    if not request.session.session_key:
        request.session.save()
    return request.session.session_key


# =============================================================================
# PRODUCT PAGE
# =============================================================================

def _render_product(request, product):
    # Update stock levels before displaying the product
    reclaim_abandoned()

    attributes = list(product.attributes.all())
    attribute_choices = [
        (attribute, product.get_options_for_attribute(attribute.pk))
        for attribute in attributes
    ]
    first_options = attribute_choices[0][1] if attribute_choices else []
    in_stock = product.in_stock()

    context = {
        'product': product,
        'images': product.images.all(),
        'attributes': attributes,
        'attribute_choices': attribute_choices,
        'first_options': first_options,
        'price': resolve(product),
        'in_stock': in_stock,
        'form': AddToCartForm(initial={'quantity': 1}) if in_stock else None,
        'title': product.title,
    }
    return render(request, 'products/product.html', context)


@require_http_methods(["GET"])
def product_detail(request, slug):
    """Display a product with its add to cart form."""
    product = _published_product(slug)
    if product.get_parent_type() != Product.PARENT_EXEMPT:
        return redirect(product.get_absolute_url(), permanent=True)
    return _render_product(request, product)


@require_http_methods(["GET"])
def product_in_tree(request, path):
    """
    Products placed in the site tree, at /<slug>/ or below their parent
    category at /<category>/<subcategory>/<slug>/.
    """
    slug = path.rstrip('/').rsplit('/', 1)[-1]
    product = _published_product(slug)
    if product.get_absolute_url() != f"/{path}/":
        raise Http404("No product at this address.")
    return _render_product(request, product)


# =============================================================================
# AJAX
# =============================================================================

@require_http_methods(["POST"])
def product_options(request, slug):
    """
    Options for the next attribute, restricted to the variations matching the
    options chosen so far.
    """
    product = _published_product(slug)
    try:
        payload = _parse_payload(request)
    except json.JSONDecodeError:
        return _invalid_json()

    try:
        selection = Selection.from_mapping(payload.get('options'))
        next_attribute_id = int(payload.get('next_attribute_id'))
    except CatalogError as e:
        return _error_response(e)
    except (TypeError, ValueError):
        return JsonResponse({
            'status': 'error',
            'code': 'InvalidSelection',
            'message': 'next_attribute_id is required',
        }, status=400)

    variations = product.variations.prefetch_related('options')
    filtered = filter_by_selection(variations, selection, product.attribute_ids())
    options = options_for_next_attribute(filtered, next_attribute_id)

    data = {}
    if options:
        data['options'] = {option.pk: option.title for option in options}
        data['count'] = len(options)
        data['nextAttributeID'] = next_attribute_id
    return JsonResponse(data)


@require_http_methods(["POST"])
def variation_price(request, slug):
    """Total price for the chosen options, with the variation price difference."""
    product = _published_product(slug)
    try:
        payload = _parse_payload(request)
    except json.JSONDecodeError:
        return _invalid_json()

    try:
        selection = Selection.from_mapping(payload.get('options'))
    except CatalogError as e:
        return _error_response(e)

    variation = None
    if selection:
        variation = find_exact_match(
            product.variations.prefetch_related('options'), selection, product.attribute_ids()
        )

    data = {'totalPrice': resolve(product, variation).nice()}
    if variation is not None:
        data['priceDifference'] = price_difference(variation)
    return JsonResponse(data)


# =============================================================================
# CART
# =============================================================================

@require_http_methods(["POST"])
def add_to_cart(request, slug):
    """Add a product, or the variation matching the chosen options, to the cart."""
    product = _published_product(slug)
    as_json = _is_json(request)
    try:
        payload = _parse_payload(request)
    except json.JSONDecodeError:
        return _invalid_json()

    form = AddToCartForm(data={
        'quantity': payload.get('quantity') or 1,
        'order_reference': payload.get('order_reference', ''),
        'redirect': payload.get('redirect', ''),
    })
    if not form.is_valid():
        if as_json:
            return JsonResponse({'status': 'error', 'errors': form.errors.get_json_data()}, status=400)
        messages.error(request, 'Please enter a valid quantity.')
        return redirect(product.get_absolute_url())

    try:
        line = build_line(
            product,
            quantity=form.cleaned_data['quantity'],
            selection=payload.get('options'),
            order_reference=_cart_reference(request, form.cleaned_data),
        )
    except CatalogError as e:
        logger.warning("Add to cart rejected for product %s: %s", product.pk, e.code)
        if as_json:
            return _error_response(e)
        messages.error(request, e.message)
        return redirect(product.get_absolute_url())

    if as_json:
        return JsonResponse({
            'status': 'ok',
            'line_item': {
                'id': line.pk,
                'product': product.pk,
                'variation': line.variation_id,
                'quantity': line.quantity,
                'unit_price': str(line.unit_price),
                'currency': line.currency,
                'total_price': str(line.total_price),
            },
        })

    redirect_url = form.cleaned_data.get('redirect')
    if redirect_url and url_has_allowed_host_and_scheme(redirect_url, allowed_hosts={request.get_host()}):
        return redirect(redirect_url)
    messages.success(request, 'The product was added to your cart.')
    return redirect(product.get_absolute_url())
