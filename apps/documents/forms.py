from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db.models import Q

from .models import ClientDocument


class DocumentForm(forms.ModelForm):
    """Checklist entry without a file (created as pending)"""

    class Meta:
        model = ClientDocument
        fields = ['name', 'document_type', 'due_date', 'notes']

        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'e.g. Last 3 payslips'}),
            'document_type': forms.Select(attrs={'class': 'form-select'}),
            'due_date': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}, format='%Y-%m-%d'),
            'notes': forms.Textarea(attrs={'class': 'form-control', 'rows': 2}),
        }


class DocumentUploadForm(forms.ModelForm):
    """Document arriving with its file (created as received)"""

    class Meta:
        model = ClientDocument
        fields = ['name', 'document_type', 'file', 'notes']

        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control'}),
            'document_type': forms.Select(attrs={'class': 'form-select'}),
            'file': forms.ClearableFileInput(attrs={'class': 'form-control'}),
            'notes': forms.Textarea(attrs={'class': 'form-control', 'rows': 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['file'].required = True
        self.fields['name'].required = False

    def clean_file(self):
        upload = self.cleaned_data.get('file')
        if upload and upload.size > settings.CRM_DOCUMENT_MAX_FILE_SIZE:
            max_mb = settings.CRM_DOCUMENT_MAX_FILE_SIZE // (1024 * 1024)
            raise ValidationError(f'File too large (max {max_mb}MB)')
        return upload

    def clean(self):
        cleaned_data = super().clean()
        if not cleaned_data.get('name') and cleaned_data.get('file'):
            cleaned_data['name'] = cleaned_data['file'].name
        return cleaned_data


class DocumentStatusForm(forms.Form):
    status = forms.ChoiceField(choices=ClientDocument.STATUS_CHOICES, widget=forms.Select(attrs={'class': 'form-select form-select-sm'}))


class DocumentFilterForm(forms.Form):
    search = forms.CharField(required=False, widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Document or client name...'}))
    status = forms.ChoiceField(choices=[('', 'All Statuses')] + ClientDocument.STATUS_CHOICES, required=False, widget=forms.Select(attrs={'class': 'form-select'}))
    document_type = forms.ChoiceField(choices=[('', 'All Types')] + ClientDocument.DOCUMENT_TYPE_CHOICES, required=False, widget=forms.Select(attrs={'class': 'form-select'}))
    overdue = forms.BooleanField(required=False, label='Overdue only')

    def filter_queryset(self, documents):
        if not self.is_valid():
            return documents

        data = self.cleaned_data
        search = (data.get('search') or '').strip()
        if search:
            documents = documents.filter(Q(name__icontains=search) | Q(lead__name__icontains=search))
        if data.get('status'):
            documents = documents.filter(status=data['status'])
        if data.get('document_type'):
            documents = documents.filter(document_type=data['document_type'])
        if data.get('overdue'):
            documents = documents.filter(ClientDocument.overdue_q())

        return documents
