import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_POST

from apps.core.utils import scope_to_user, is_ajax
from apps.leads.models import Lead, Activity
from .forms import DocumentForm, DocumentUploadForm, DocumentStatusForm, DocumentFilterForm
from .models import ClientDocument

logger = logging.getLogger(__name__)


def _visible_documents(user):
    return scope_to_user(ClientDocument.objects.select_related('lead', 'lead__agent'), user, field='lead__agent')


def _get_lead(request, lead_pk):
    return get_object_or_404(scope_to_user(Lead.objects.all(), request.user), pk=lead_pk)


@login_required
def document_list_view(request):
    documents = _visible_documents(request.user)

    filter_form = DocumentFilterForm(request.GET or None)
    documents = filter_form.filter_queryset(documents)

    context = {
        'documents': documents,
        'counts': ClientDocument.checklist_counts(documents),
        'filter_form': filter_form,
        'watch_tables': 'client_documents',
        'active_page': 'documents',
    }
    return render(request, 'documents/document_list.html', context)


@login_required
def lead_checklist_view(request, lead_pk):
    """All documents of one client with approved / pending / overdue counts"""
    lead = _get_lead(request, lead_pk)
    documents = lead.documents.all()

    context = {
        'lead': lead,
        'documents': documents,
        'counts': ClientDocument.checklist_counts(documents),
        'add_form': DocumentForm(),
        'upload_form': DocumentUploadForm(),
        'status_choices': ClientDocument.STATUS_CHOICES,
        'watch_tables': 'client_documents',
        'active_page': 'documents',
    }
    return render(request, 'documents/lead_checklist.html', context)


@login_required
@require_POST
def document_add_view(request, lead_pk):
    lead = _get_lead(request, lead_pk)
    form = DocumentForm(request.POST)

    if form.is_valid():
        try:
            document = form.save(commit=False)
            document.lead = lead
            document.status = 'pending'
            document.save()
            Activity.log(lead, request.user, 'document', f'Document requested: {document.name}')
        except Exception:
            logger.exception("Could not add document to lead %s", lead_pk)
            messages.error(request, 'Could not save document.')
        else:
            messages.success(request, f'Document "{document.name}" added to the checklist')
    else:
        messages.error(request, 'Please correct the errors in the form')

    return redirect('documents:lead_checklist', lead_pk=lead.pk)


@login_required
@require_POST
def document_upload_view(request, lead_pk):
    lead = _get_lead(request, lead_pk)
    form = DocumentUploadForm(request.POST, request.FILES)

    if form.is_valid():
        try:
            document = form.save(commit=False)
            document.lead = lead
            document.status = 'received'
            document.received_at = timezone.now()
            document.save()
            Activity.log(lead, request.user, 'document', f'Document received: {document.name}')
        except Exception:
            logger.exception("Could not upload document for lead %s", lead_pk)
            messages.error(request, 'Could not upload document.')
        else:
            messages.success(request, f'Document "{document.name}" uploaded')
    else:
        for errors in form.errors.values():
            for error in errors:
                messages.error(request, error)

    return redirect('documents:lead_checklist', lead_pk=lead.pk)


@login_required
@require_POST
def document_set_status_view(request, pk):
    document = get_object_or_404(_visible_documents(request.user), pk=pk)
    form = DocumentStatusForm(request.POST)

    if not form.is_valid():
        if is_ajax(request):
            return JsonResponse({'success': False, 'error': 'Invalid status'}, status=400)
        messages.error(request, 'Invalid status')
        return redirect('documents:lead_checklist', lead_pk=document.lead_id)

    try:
        document.set_status(form.cleaned_data['status'])
        Activity.log(
            document.lead, request.user, 'document',
            f'Document "{document.name}" marked as {document.get_status_display().lower()}'
        )
    except Exception:
        logger.exception("Could not update status of document %s", pk)
        if is_ajax(request):
            return JsonResponse({'success': False, 'error': 'Could not update document'}, status=500)
        messages.error(request, 'Could not update document.')
    else:
        if is_ajax(request):
            return JsonResponse({
                'success': True,
                'status': document.status,
                'received_at': document.received_at.isoformat() if document.received_at else None,
                'approved_at': document.approved_at.isoformat() if document.approved_at else None,
            })
        messages.success(request, 'Document status updated')

    return redirect('documents:lead_checklist', lead_pk=document.lead_id)


@login_required
@require_POST
def document_delete_view(request, pk):
    document = get_object_or_404(_visible_documents(request.user), pk=pk)
    lead_pk = document.lead_id

    try:
        if document.file:
            document.file.delete(save=False)
        document.delete()
    except Exception:
        logger.exception("Could not delete document %s", pk)
        messages.error(request, 'Could not delete document.')
    else:
        if is_ajax(request):
            return JsonResponse({'success': True})
        messages.success(request, 'Document deleted')

    return redirect('documents:lead_checklist', lead_pk=lead_pk)
