from django import forms
from django.core.exceptions import ValidationError
from django.db.models import Q
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Row, Column, Submit

from .models import Product


class ProductForm(forms.ModelForm):
    class Meta:
        model = Product
        fields = [
            'title', 'description', 'product_type', 'price', 'location',
            'bedrooms', 'bathrooms', 'area', 'image', 'status',
        ]
        widgets = {
            'description': forms.Textarea(attrs={'rows': 4}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.form_enctype = 'multipart/form-data'
        self.helper.layout = Layout(
            'title',
            'description',
            Row(
                Column('product_type', css_class='col-md-4'),
                Column('price', css_class='col-md-4'),
                Column('status', css_class='col-md-4'),
            ),
            'location',
            Row(
                Column('bedrooms', css_class='col-md-4'),
                Column('bathrooms', css_class='col-md-4'),
                Column('area', css_class='col-md-4'),
            ),
            'image',
            Submit('submit', 'Save', css_class='btn btn-primary'),
        )

    def clean(self):
        cleaned_data = super().clean()

        # Rooms and area only make sense for real estate
        if cleaned_data.get('product_type') and cleaned_data['product_type'] not in Product.REAL_ESTATE_TYPES:
            for field in ('bedrooms', 'bathrooms', 'area'):
                if cleaned_data.get(field):
                    raise ValidationError(f'{self.fields[field].label} only applies to real-estate products')

        return cleaned_data


class ProductFilterForm(forms.Form):
    search = forms.CharField(required=False, widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Title, description or location...'}))
    product_type = forms.ChoiceField(choices=[('', 'All Types')] + Product.PRODUCT_TYPE_CHOICES, required=False, widget=forms.Select(attrs={'class': 'form-select'}))
    status = forms.ChoiceField(choices=[('', 'All Statuses')] + Product.STATUS_CHOICES, required=False, widget=forms.Select(attrs={'class': 'form-select'}))
    price_min = forms.DecimalField(required=False, min_value=0, widget=forms.NumberInput(attrs={'class': 'form-control', 'placeholder': 'Min price'}))
    price_max = forms.DecimalField(required=False, min_value=0, widget=forms.NumberInput(attrs={'class': 'form-control', 'placeholder': 'Max price'}))

    def filter_queryset(self, products):
        if not self.is_valid():
            return products

        data = self.cleaned_data
        search = (data.get('search') or '').strip()
        if search:
            products = products.filter(
                Q(title__icontains=search) |
                Q(description__icontains=search) |
                Q(location__icontains=search)
            )
        if data.get('product_type'):
            products = products.filter(product_type=data['product_type'])
        if data.get('status'):
            products = products.filter(status=data['status'])
        if data.get('price_min') is not None:
            products = products.filter(price__gte=data['price_min'])
        if data.get('price_max') is not None:
            products = products.filter(price__lte=data['price_max'])

        return products
