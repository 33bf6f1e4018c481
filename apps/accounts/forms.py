from django import forms
from django.contrib.auth.forms import UserCreationForm
from django.contrib.auth import get_user_model
from django.utils.translation import gettext_lazy as _
from django.core.exceptions import ValidationError
from django.db.models import Q
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Fieldset, Submit, Row, Column, Field, HTML
from crispy_forms.bootstrap import FormActions

User = get_user_model()

PERSONAL_WIDGETS = {
    'first_name': forms.TextInput(attrs={'class': 'form-control'}),
    'last_name': forms.TextInput(attrs={'class': 'form-control'}),
    'phone': forms.TextInput(attrs={'class': 'form-control', 'placeholder': '+5511999999999'}),
    'role': forms.Select(attrs={'class': 'form-select'}),
}


def _personal_fieldset():
    return Fieldset(
        _('Personal Information'),
        Row(
            Column('first_name', css_class='col-md-6'),
            Column('last_name', css_class='col-md-6'),
        ),
        'phone',
    )


class LoginForm(forms.Form):
    email = forms.EmailField(label=_('Email Address'), max_length=255, widget=forms.EmailInput(attrs={'class': 'form-control', 'placeholder': 'agent@realty.com', 'autofocus': True}))
    password = forms.CharField(label=_('Password'), widget=forms.PasswordInput(attrs={'class': 'form-control', 'placeholder': _('Enter your password')}))
    remember = forms.BooleanField(label=_('Remember me'), required=False, widget=forms.CheckboxInput(attrs={'class': 'form-check-input'}))

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            Field('email', css_class='mb-3'),
            Field('password', css_class='mb-3'),
            'remember',
            FormActions(Submit('submit', _('Login'), css_class='btn btn-primary w-100')),
        )

    def clean_email(self):
        return self.cleaned_data.get('email', '').lower().strip()


# Managers only
class UserCreateForm(UserCreationForm):

    class Meta:
        model = User
        fields = ['email', 'first_name', 'last_name', 'phone', 'role']
        widgets = dict(PERSONAL_WIDGETS, email=forms.EmailInput(attrs={'class': 'form-control', 'placeholder': 'agent@realty.com'}))

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.fields['first_name'].required = True
        self.fields['last_name'].required = True
        for name in ('password1', 'password2'):
            self.fields[name].widget.attrs['class'] = 'form-control'

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            Fieldset(
                _('Login Information'),
                'email',
                Row(
                    Column('password1', css_class='col-md-6'),
                    Column('password2', css_class='col-md-6'),
                ),
            ),
            _personal_fieldset(),
            Fieldset(_('Role'), 'role'),
            FormActions(
                Submit('submit', _('Create User'), css_class='btn btn-primary'),
                HTML('<a href="{% url \'accounts:user_list\' %}" class="btn btn-secondary">Cancel</a>'),
            )
        )

    def clean_email(self):
        email = self.cleaned_data.get('email', '').lower().strip()

        if User.objects.filter(email__iexact=email).exists():
            raise ValidationError(_('A user with this email already exists.'))

        return email


class UserEditForm(forms.ModelForm):
    """
    Managers may also change role and the active flag; everyone else
    edits personal info only.
    """

    class Meta:
        model = User
        fields = ['first_name', 'last_name', 'phone', 'role', 'is_active']
        widgets = PERSONAL_WIDGETS

    def __init__(self, *args, **kwargs):
        can_edit_all_fields = kwargs.pop('can_edit_all_fields', False)
        super().__init__(*args, **kwargs)

        layout = [_personal_fieldset()]
        if can_edit_all_fields:
            layout.append(Fieldset(
                _('Role & Status'),
                Row(
                    Column('role', css_class='col-md-6'),
                    Column('is_active', css_class='col-md-6'),
                ),
            ))
        else:
            self.fields.pop('role', None)
            self.fields.pop('is_active', None)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(*layout, FormActions(Submit('submit', _('Update'), css_class='btn btn-primary')))


class UserFilterForm(forms.Form):
    STATUS_CHOICES = [
        ('', _('Any status')),
        ('active', _('Active')),
        ('inactive', _('Inactive')),
    ]

    q = forms.CharField(required=False, label=_('Search'), widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': _('Name, email or phone...')}))
    role = forms.ChoiceField(choices=[('', _('All roles'))] + User.ROLE_CHOICES, required=False, widget=forms.Select(attrs={'class': 'form-select'}))
    status = forms.ChoiceField(choices=STATUS_CHOICES, required=False, widget=forms.Select(attrs={'class': 'form-select'}))

    def filter_queryset(self, users):
        if not self.is_valid():
            return users

        data = self.cleaned_data

        search = (data.get('q') or '').strip()
        if search:
            users = users.filter(
                Q(first_name__icontains=search) |
                Q(last_name__icontains=search) |
                Q(email__icontains=search) |
                Q(phone__icontains=search)
            )

        if data.get('role'):
            users = users.filter(role=data['role'])

        if data.get('status'):
            users = users.filter(is_active=data['status'] == 'active')

        return users
