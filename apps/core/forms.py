from django import forms
from django.contrib.auth import get_user_model

from apps.products.models import Product

User = get_user_model()


class ManagerDashboardFilterForm(forms.Form):
    PERIOD_CHOICES = [
        ('7', 'Last 7 days'),
        ('30', 'Last 30 days'),
        ('90', 'Last 90 days'),
        ('365', 'Last 12 months'),
        ('all', 'All time'),
    ]

    period = forms.ChoiceField(choices=PERIOD_CHOICES, required=False, initial='30', widget=forms.Select(attrs={'class': 'form-select'}))
    agent = forms.ModelChoiceField(queryset=User.objects.none(), required=False, empty_label='All agents', widget=forms.Select(attrs={'class': 'form-select'}))
    product_type = forms.ChoiceField(choices=[('', 'All products')] + Product.PRODUCT_TYPE_CHOICES, required=False, widget=forms.Select(attrs={'class': 'form-select'}))

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['agent'].queryset = User.objects.agents().order_by('first_name', 'last_name')

    def get_filters(self):
        """
        Keyword arguments for metrics.agent_performance.
        Defaults to the last 30 days when nothing (or garbage) is submitted.
        """
        if not self.is_bound or not self.is_valid():
            return {'period_days': 30, 'agent': None, 'product_type': None}

        period = self.cleaned_data.get('period') or '30'
        return {
            'period_days': None if period == 'all' else int(period),
            'agent': self.cleaned_data.get('agent'),
            'product_type': self.cleaned_data.get('product_type') or None,
        }
