import re

from django import forms
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db.models import Q

from .models import Lead

User = get_user_model()


def normalize_phone(phone):
    """
    Strip spaces, dashes, dots and parentheses, keeping a leading "+".

    Raises:
        ValidationError: non-digits left over, or not 8-15 digits long
    """
    phone = (phone or '').strip()
    if not phone:
        return ''

    digits = re.sub(r'[\s\-().]', '', phone)
    prefix = ''
    if digits.startswith('+'):
        digits = digits[1:]
        prefix = '+'

    if not digits.isdigit():
        raise ValidationError('Phone number must contain only digits')

    if len(digits) < 8 or len(digits) > 15:
        raise ValidationError('Phone number must be between 8 and 15 digits')

    return prefix + digits


class LeadCreateForm(forms.ModelForm):
    class Meta:
        model = Lead
        fields = [
            'name', 'email', 'phone', 'status', 'source',
            'monthly_income', 'profession', 'desired_property_type', 'interest_location',
            'notes', 'tags',
        ]

        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'e.g. Maria Silva', 'autofocus': True}),
            'email': forms.EmailInput(attrs={'class': 'form-control', 'placeholder': 'example@email.com'}),
            'phone': forms.TextInput(attrs={'class': 'form-control', 'placeholder': '+55 11 99999-9999'}),
            'status': forms.Select(attrs={'class': 'form-select'}),
            'source': forms.Select(attrs={'class': 'form-select'}),
            'monthly_income': forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01', 'min': '0'}),
            'profession': forms.TextInput(attrs={'class': 'form-control'}),
            'desired_property_type': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'e.g. 2-bedroom apartment'}),
            'interest_location': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Neighbourhood or city'}),
            'notes': forms.Textarea(attrs={'class': 'form-control', 'rows': 4, 'placeholder': 'Add any notes here...'}),
        }

        help_texts = {
            'name': 'Leave blank to register as "Unnamed lead"',
            'tags': 'Comma-separated tags',
        }

    def __init__(self, *args, **kwargs):
        self.user = kwargs.pop('user', None)
        super().__init__(*args, **kwargs)

        self.fields['name'].required = False
        self.fields['tags'].required = False
        self.fields['tags'].widget.attrs.update({'class': 'form-control'})

    def clean_name(self):
        name = (self.cleaned_data.get('name') or '').strip()
        return name or Lead.DEFAULT_NAME

    def clean_email(self):
        email = self.cleaned_data.get('email')
        if email:
            return email.strip().lower()
        return None

    def clean_phone(self):
        return normalize_phone(self.cleaned_data.get('phone'))

    def clean(self):
        cleaned_data = super().clean()

        duplicate = Lead.find_duplicate(
            email=cleaned_data.get('email'),
            phone=cleaned_data.get('phone'),
            exclude_pk=self.instance.pk,
        )
        if duplicate:
            raise ValidationError(f'Lead already registered: {duplicate.name}')

        return cleaned_data


class LeadEditForm(LeadCreateForm):
    class Meta(LeadCreateForm.Meta):
        fields = LeadCreateForm.Meta.fields + ['negotiation_status', 'agent']
        widgets = dict(
            LeadCreateForm.Meta.widgets,
            negotiation_status=forms.Select(attrs={'class': 'form-select'}),
            agent=forms.Select(attrs={'class': 'form-select'}),
        )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        # Only managers reassign leads
        if self.user is not None and self.user.is_manager():
            self.fields['agent'].queryset = User.objects.filter(is_active=True).order_by('first_name', 'last_name')
            self.fields['agent'].empty_label = 'Unassigned'
        else:
            self.fields.pop('agent', None)


class DisqualifyForm(forms.Form):
    reason = forms.ChoiceField(choices=[('', 'Select a reason')] + Lead.DISQUALIFICATION_REASONS, label='Reason', widget=forms.Select(attrs={'class': 'form-select'}), error_messages={'required': 'A disqualification reason is required.'})
    notes = forms.CharField(required=False, label='Notes', widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 3, 'placeholder': 'Additional details...'}))


class NegotiationStatusForm(forms.Form):
    negotiation_status = forms.ChoiceField(choices=Lead.NEGOTIATION_STATUS_CHOICES, label='New Status', widget=forms.Select(attrs={'class': 'form-select'}))


class CallForm(forms.Form):
    summary = forms.CharField(label='Call summary', widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 4, 'placeholder': 'What was discussed?'}), error_messages={'required': 'Please describe the call'})


class EmailForm(forms.Form):
    subject = forms.CharField(max_length=200, label='Subject', widget=forms.TextInput(attrs={'class': 'form-control'}))
    message = forms.CharField(label='Message', widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 8}))


class LeadFilterForm(forms.Form):
    QUALIFICATION_CHOICES = [
        ('all', 'All'),
        ('qualified', 'Qualified'),
        ('unqualified', 'Unqualified'),
        ('disqualified', 'Disqualified'),
    ]

    search = forms.CharField(required=False, label='Search', widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Search by name, phone, or email...'}))
    qualification = forms.ChoiceField(choices=QUALIFICATION_CHOICES, required=False, label='Qualification', widget=forms.Select(attrs={'class': 'form-select'}))
    negotiation_status = forms.ChoiceField(choices=[('', 'All Statuses')] + Lead.NEGOTIATION_STATUS_CHOICES, required=False, label='Status', widget=forms.Select(attrs={'class': 'form-select'}))
    agent = forms.ModelChoiceField(queryset=User.objects.none(), required=False, label='Agent', empty_label='All', widget=forms.Select(attrs={'class': 'form-select'}))

    def __init__(self, *args, **kwargs):
        user = kwargs.pop('user', None)
        super().__init__(*args, **kwargs)
        if user is not None and user.is_manager():
            self.fields['agent'].queryset = User.objects.filter(is_active=True).order_by('first_name', 'last_name')
        else:
            self.fields.pop('agent')

    def filter_queryset(self, leads):
        """Apply the cleaned filters to an already role-scoped queryset"""
        if not self.is_valid():
            return leads

        data = self.cleaned_data

        search = (data.get('search') or '').strip()
        if search:
            leads = leads.filter(
                Q(name__icontains=search) |
                Q(phone__icontains=search) |
                Q(email__icontains=search)
            )

        qualification = data.get('qualification') or 'all'
        if qualification == 'qualified':
            leads = leads.filter(qualified=True, disqualified=False)
        elif qualification == 'unqualified':
            leads = leads.filter(qualified=False, disqualified=False)
        elif qualification == 'disqualified':
            leads = leads.filter(disqualified=True)

        if data.get('negotiation_status'):
            leads = leads.filter(negotiation_status=data['negotiation_status'])

        if data.get('agent'):
            leads = leads.filter(agent=data['agent'])

        return leads
