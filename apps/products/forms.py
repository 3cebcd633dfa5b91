from django import forms

from .models import Product, Variation


class AddToCartForm(forms.Form):
    quantity = forms.IntegerField(
        min_value=1,
        initial=1,
        required=False,
        widget=forms.NumberInput(attrs={'class': 'form-control', 'style': 'width:90px'})
    )
    order_reference = forms.CharField(max_length=100, required=False, widget=forms.HiddenInput)
    redirect = forms.CharField(max_length=255, required=False, widget=forms.HiddenInput)

    def clean_quantity(self):
        return self.cleaned_data.get('quantity') or 1


def stock_field():
    return forms.IntegerField(
        required=False,
        min_value=-1,
        label='Stock',
        help_text='Leave empty to keep the current level, -1 for unlimited stock'
    )


class StockFieldMixin:
    """Writes the ``stock`` field of an admin form through to the stock level."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance.pk and self.instance.stock_level_id:
            self.fields['stock'].initial = self.instance.stock_level.level

    def save(self, commit=True):
        stock = self.cleaned_data.get('stock')
        if stock is not None:
            self.instance.initial_stock = stock
        return super().save(commit=commit)


class ProductAdminForm(StockFieldMixin, forms.ModelForm):
    stock = stock_field()

    class Meta:
        model = Product
        fields = [
            'title', 'slug', 'description', 'price',
            'in_site_tree', 'parent_category', 'categories', 'is_published',
        ]


class VariationAdminForm(StockFieldMixin, forms.ModelForm):
    stock = stock_field()

    class Meta:
        model = Variation
        fields = ['product', 'price', 'status']
