from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db.models import Q
from django.utils import timezone
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Row, Column, Submit

from apps.products.models import Product


class SaleFinalizeForm(forms.Form):
    product = forms.ModelChoiceField(
        queryset=Product.objects.none(),
        label='Product',
        empty_label='Select a product',
        error_messages={'required': 'Please select a product'},
    )
    sale_value = forms.DecimalField(
        label='Sale value',
        min_value=0,
        max_digits=14,
        decimal_places=2,
        error_messages={'required': 'Sale value is required'},
    )
    completion_date = forms.DateField(
        label='Completion date',
        widget=forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        error_messages={'required': 'Completion date is required'},
    )
    contract = forms.FileField(label='Signed contract', required=False)
    notes = forms.CharField(label='Notes', required=False, widget=forms.Textarea(attrs={'rows': 3}))

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        # Only what can still be sold
        self.fields['product'].queryset = Product.objects.filter(status='available').order_by('title')
        self.fields['completion_date'].initial = timezone.localdate()

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.form_enctype = 'multipart/form-data'
        self.helper.layout = Layout(
            'product',
            Row(
                Column('sale_value', css_class='col-md-6'),
                Column('completion_date', css_class='col-md-6'),
            ),
            'contract',
            'notes',
            Submit('submit', 'Finalize sale', css_class='btn btn-success'),
        )

    def clean_contract(self):
        contract = self.cleaned_data.get('contract')
        if contract and contract.size > settings.CRM_CONTRACT_MAX_FILE_SIZE:
            max_mb = settings.CRM_CONTRACT_MAX_FILE_SIZE // (1024 * 1024)
            raise ValidationError(f'Contract file too large (max {max_mb}MB)')
        return contract


class SaleFilterForm(forms.Form):
    date_from = forms.DateField(required=False, widget=forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}))
    date_to = forms.DateField(required=False, widget=forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}))
    search = forms.CharField(required=False, widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Client or product...'}))

    def filter_queryset(self, sales):
        if not self.is_valid():
            return sales

        data = self.cleaned_data
        if data.get('date_from'):
            sales = sales.filter(completion_date__gte=data['date_from'])
        if data.get('date_to'):
            sales = sales.filter(completion_date__lte=data['date_to'])

        search = (data.get('search') or '').strip()
        if search:
            sales = sales.filter(Q(lead__name__icontains=search) | Q(product_name__icontains=search))

        return sales
