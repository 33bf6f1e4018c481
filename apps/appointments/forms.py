from django import forms
from django.db.models import Q

from apps.core.utils import scope_to_user
from apps.leads.models import Lead
from .models import Appointment


class AppointmentForm(forms.ModelForm):
    class Meta:
        model = Appointment
        fields = ['lead', 'title', 'date_time', 'location', 'notes']

        widgets = {
            'lead': forms.Select(attrs={'class': 'form-select'}),
            'title': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'e.g. Property visit'}),
            'date_time': forms.DateTimeInput(attrs={'class': 'form-control', 'type': 'datetime-local'}, format='%Y-%m-%dT%H:%M'),
            'location': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Address or meeting link'}),
            'notes': forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
        }

        error_messages = {
            'lead': {'required': 'Please select a client'},
            'date_time': {'required': 'Date and time are required'},
        }

    def __init__(self, *args, **kwargs):
        user = kwargs.pop('user', None)
        super().__init__(*args, **kwargs)

        self.fields['date_time'].input_formats = ['%Y-%m-%dT%H:%M', '%Y-%m-%d %H:%M', '%Y-%m-%d %H:%M:%S']
        self.fields['title'].required = False

        # Only clients the user can see; an edited appointment keeps its own client
        visible = Q(disqualified=False)
        if self.instance.pk:
            visible |= Q(pk=self.instance.lead_id)
        self.fields['lead'].queryset = scope_to_user(Lead.objects.filter(visible), user).order_by('name')

    def clean_title(self):
        title = (self.cleaned_data.get('title') or '').strip()
        return title or Appointment.DEFAULT_TITLE


class AppointmentFilterForm(forms.Form):
    date = forms.DateField(required=False, widget=forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}))
    status = forms.ChoiceField(choices=[('', 'All')] + Appointment.STATUS_CHOICES, required=False, widget=forms.Select(attrs={'class': 'form-select'}))

    def filter_queryset(self, appointments):
        if not self.is_valid():
            return appointments

        if self.cleaned_data.get('date'):
            appointments = appointments.filter(date_time__date=self.cleaned_data['date'])
        if self.cleaned_data.get('status'):
            appointments = appointments.filter(status=self.cleaned_data['status'])

        return appointments
