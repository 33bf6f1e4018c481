import csv
import json
import logging

import openpyxl
from openpyxl.styles import Font, PatternFill
from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.core.mail import send_mail
from django.core.paginator import Paginator
from django.db.models import Count
from django.http import HttpResponse, JsonResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_POST

from apps.accounts.decorators import owner_or_manager_required
from apps.core.utils import scope_to_user, is_ajax
from . import pipeline
from .forms import (
    LeadCreateForm,
    LeadEditForm,
    LeadFilterForm,
    DisqualifyForm,
    NegotiationStatusForm,
    CallForm,
    EmailForm,
)
from .models import Lead, Activity

logger = logging.getLogger(__name__)

EXPORT_HEADERS = [
    'ID', 'Name', 'Email', 'Phone', 'Temperature', 'Negotiation Status',
    'Source', 'Qualified', 'Disqualified', 'Agent', 'Created Date',
]


def _visible_leads(user):
    return scope_to_user(Lead.objects.select_related('agent'), user)


def _get_lead(request, pk):
    """Lead by pk, 404 when it is outside the user's scope"""
    return get_object_or_404(_visible_leads(request.user), pk=pk)


def _lead_to_dict(lead):
    return {
        'id': lead.id,
        'name': lead.name,
        'email': lead.email,
        'phone': lead.phone,
        'status': lead.status,
        'status_display': lead.get_status_display(),
        'negotiation_status': lead.negotiation_status,
        'negotiation_status_display': lead.get_negotiation_status_display(),
        'pipeline_phase': pipeline.phase_for_status(lead.negotiation_status),
        'source': lead.source,
        'qualified': lead.qualified,
        'disqualified': lead.disqualified,
        'disqualification_reason': lead.disqualification_reason,
        'agent': {
            'id': lead.agent.id,
            'name': lead.agent.get_full_name(),
        } if lead.agent else None,
        'notes': lead.notes,
        'tags': list(lead.tags.names()),
        'created_at': lead.created_at.isoformat(),
        'updated_at': lead.updated_at.isoformat(),
    }


@login_required
def lead_list_view(request):
    leads = _visible_leads(request.user)

    filter_form = LeadFilterForm(request.GET or None, user=request.user)
    leads = filter_form.filter_queryset(leads)

    status_counts = dict(
        leads.values_list('negotiation_status').annotate(count=Count('id')).order_by()
    )

    paginator = Paginator(leads, 50)
    page_obj = paginator.get_page(request.GET.get('page', 1))

    context = {
        'leads': page_obj,
        'page_obj': page_obj,
        'filter_form': filter_form,
        'total_count': paginator.count,
        'status_counts': [
            {'status': status, 'label': label, 'count': status_counts.get(status, 0)}
            for status, label in Lead.FUNNEL_STATUSES
        ],
        'search_query': request.GET.get('search', '').strip(),
        'watch_tables': 'clients',
        'active_page': 'leads',
    }

    return render(request, 'leads/lead_list.html', context)


@login_required
def lead_create_view(request):
    if request.method == 'POST':
        form = LeadCreateForm(request.POST, user=request.user)

        if form.is_valid():
            try:
                lead = form.save(commit=False)
                lead.agent = request.user
                lead.negotiation_status = 'new_lead'
                lead.save()
                form.save_m2m()

                messages.success(request, f'Lead "{lead.name}" created successfully')
                return redirect('leads:lead_detail', pk=lead.pk)

            except Exception:
                logger.exception("Could not create lead for user %s", request.user.pk)
                messages.error(request, 'Could not save lead. Please try again.')
        else:
            for error in form.non_field_errors():
                messages.error(request, error)

    else:
        form = LeadCreateForm(user=request.user)

    context = {
        'form': form,
        'form_title': 'New Lead',
        'submit_text': 'Create',
        'active_page': 'leads',
    }
    return render(request, 'leads/lead_form.html', context)


@login_required
def lead_detail_view(request, pk):
    lead = _get_lead(request, pk)

    context = {
        'lead': lead,
        'activities': lead.activities.select_related('user')[:50],
        'appointments': lead.appointments.order_by('date_time'),
        'documents': lead.documents.all(),
        'sales': lead.sales.all(),
        'disqualify_form': DisqualifyForm(),
        'status_form': NegotiationStatusForm(initial={'negotiation_status': lead.negotiation_status}),
        'can_edit': request.user.is_manager() or lead.agent_id == request.user.pk,
        'watch_tables': 'clients,activities,appointments,client_documents,sales_finalized',
        'active_page': 'leads',
    }

    return render(request, 'leads/lead_detail.html', context)


@login_required
def lead_json_view(request, pk):
    try:
        lead = _visible_leads(request.user).get(pk=pk)
    except Lead.DoesNotExist:
        return JsonResponse({'error': 'Lead not found'}, status=404)

    return JsonResponse(_lead_to_dict(lead))


@login_required
def lead_activities_view(request, pk):
    lead = _get_lead(request, pk)

    paginator = Paginator(lead.activities.select_related('user'), 20)
    page_obj = paginator.get_page(request.GET.get('page', 1))

    activities_data = [
        {
            'id': activity.id,
            'type': activity.activity_type,
            'type_display': activity.get_activity_type_display(),
            'description': activity.description,
            'user': {
                'id': activity.user.id,
                'name': activity.user.get_full_name(),
                'initials': activity.user.get_initials(),
            } if activity.user else None,
            'created_at': activity.created_at.isoformat(),
        }
        for activity in page_obj
    ]

    return JsonResponse({
        'activities': activities_data,
        'has_next': page_obj.has_next(),
        'total_count': paginator.count,
        'page': page_obj.number,
    })


@login_required
@owner_or_manager_required(Lead, field_name='agent')
def lead_edit_view(request, pk):
    lead = _get_lead(request, pk)

    if request.method == 'POST':
        form = LeadEditForm(request.POST, instance=lead, user=request.user)

        if form.is_valid():
            try:
                changed_fields = [
                    str(form.fields[field].label or field) for field in form.changed_data
                ]
                lead = form.save()

                if changed_fields:
                    Activity.log(lead, request.user, 'lead_updated', f'Updated: {", ".join(changed_fields)}')

                messages.success(request, f'Lead "{lead.name}" updated successfully')
                return redirect('leads:lead_detail', pk=lead.pk)

            except Exception:
                logger.exception("Could not update lead %s", pk)
                messages.error(request, 'Could not save lead. Please try again.')
        else:
            messages.error(request, 'Please correct the errors in the form')

    else:
        form = LeadEditForm(instance=lead, user=request.user)

    context = {
        'form': form,
        'lead': lead,
        'form_title': f'Edit Lead: {lead.name}',
        'submit_text': 'Save Changes',
        'active_page': 'leads',
    }

    return render(request, 'leads/lead_form.html', context)


@login_required
@owner_or_manager_required(Lead, field_name='agent')
@require_POST
def lead_delete_view(request, pk):
    lead = _get_lead(request, pk)
    lead_name = lead.name

    try:
        lead.delete()
    except Exception:
        logger.exception("Could not delete lead %s", pk)
        if is_ajax(request):
            return JsonResponse({'success': False, 'error': 'Could not delete lead'}, status=500)
        messages.error(request, 'Could not delete lead. Please try again.')
        return redirect('leads:lead_detail', pk=pk)

    Activity.log(None, request.user, 'lead_deleted', f'Lead "{lead_name}" deleted')

    if is_ajax(request):
        return JsonResponse({'success': True})

    messages.success(request, f'Lead "{lead_name}" deleted successfully')
    return redirect('leads:lead_list')


# QUALIFICATION
@login_required
@require_POST
def lead_qualify_view(request, pk):
    lead = _get_lead(request, pk)

    try:
        lead.qualify(user=request.user)
    except Exception:
        logger.exception("Could not qualify lead %s", pk)
        messages.error(request, 'Could not qualify lead.')
    else:
        messages.success(request, f'Lead "{lead.name}" qualified')

    if is_ajax(request):
        return JsonResponse({'success': lead.qualified, 'qualified': lead.qualified, 'disqualified': lead.disqualified})

    return redirect(lead.get_absolute_url())


@login_required
def lead_disqualify_view(request, pk):
    lead = _get_lead(request, pk)

    if request.method == 'POST':
        form = DisqualifyForm(request.POST)

        if form.is_valid():
            try:
                lead.disqualify(
                    form.cleaned_data['reason'],
                    form.cleaned_data.get('notes', ''),
                    user=request.user,
                )
            except ValidationError as e:
                messages.error(request, e.messages[0])
            except Exception:
                logger.exception("Could not disqualify lead %s", pk)
                messages.error(request, 'Could not disqualify lead.')
            else:
                if is_ajax(request):
                    return JsonResponse({'success': True, 'disqualified': True})
                messages.success(request, f'Lead "{lead.name}" disqualified')
                return redirect(lead.get_absolute_url())
        else:
            if is_ajax(request):
                return JsonResponse({'success': False, 'errors': form.errors}, status=400)
            messages.error(request, 'A disqualification reason is required.')

    else:
        form = DisqualifyForm()

    context = {
        'form': form,
        'lead': lead,
        'active_page': 'leads',
    }
    return render(request, 'leads/lead_disqualify.html', context)


@login_required
@require_POST
def lead_requalify_view(request, pk):
    lead = _get_lead(request, pk)

    try:
        lead.requalify(user=request.user)
    except Exception:
        logger.exception("Could not requalify lead %s", pk)
        messages.error(request, 'Could not requalify lead.')
    else:
        messages.success(request, f'Lead "{lead.name}" requalified')

    if is_ajax(request):
        return JsonResponse({'success': not lead.disqualified, 'disqualified': lead.disqualified})

    return redirect(lead.get_absolute_url())


@login_required
@require_POST
def lead_change_status_view(request, pk):
    lead = _get_lead(request, pk)
    form = NegotiationStatusForm(request.POST)

    if form.is_valid():
        try:
            lead.change_negotiation_status(form.cleaned_data['negotiation_status'], user=request.user)
        except Exception:
            logger.exception("Could not change status of lead %s", pk)
            messages.error(request, 'Could not update lead status.')
            if is_ajax(request):
                return JsonResponse({'success': False, 'error': 'Could not update lead status'}, status=500)
        else:
            messages.success(request, f'Status changed to "{lead.get_negotiation_status_display()}"')
            if is_ajax(request):
                return JsonResponse({
                    'success': True,
                    'negotiation_status': lead.negotiation_status,
                    'negotiation_status_display': lead.get_negotiation_status_display(),
                })
    else:
        messages.error(request, 'Invalid status')
        if is_ajax(request):
            return JsonResponse({'success': False, 'error': 'Invalid status'}, status=400)

    return redirect(lead.get_absolute_url())


# CONTACT (call / email)
@login_required
def lead_call_view(request, pk):
    lead = _get_lead(request, pk)

    if request.method == 'POST':
        form = CallForm(request.POST)

        if form.is_valid():
            try:
                lead.register_contact('call', form.cleaned_data['summary'], user=request.user)
            except Exception:
                logger.exception("Could not register call for lead %s", pk)
                messages.error(request, 'Could not register call.')
            else:
                messages.success(request, 'Call registered')
                return redirect(lead.get_absolute_url())
    else:
        form = CallForm()

    context = {
        'form': form,
        'lead': lead,
        'form_title': f'Call {lead.name}',
        'submit_text': 'Register call',
        'active_page': 'leads',
    }
    return render(request, 'leads/lead_contact.html', context)


@login_required
def lead_email_view(request, pk):
    lead = _get_lead(request, pk)

    if not lead.email:
        messages.error(request, 'This lead has no email address.')
        return redirect(lead.get_absolute_url())

    if request.method == 'POST':
        form = EmailForm(request.POST)

        if form.is_valid():
            subject = form.cleaned_data['subject']
            try:
                send_mail(
                    subject,
                    form.cleaned_data['message'],
                    settings.DEFAULT_FROM_EMAIL,
                    [lead.email],
                    fail_silently=False,
                )
                lead.register_contact('email', subject, user=request.user)
            except Exception:
                logger.exception("Could not send email to lead %s", pk)
                messages.error(request, 'Could not send email.')
            else:
                messages.success(request, f'Email sent to {lead.email}')
                return redirect(lead.get_absolute_url())
    else:
        form = EmailForm()

    context = {
        'form': form,
        'lead': lead,
        'form_title': f'Email {lead.name}',
        'submit_text': 'Send email',
        'active_page': 'leads',
    }
    return render(request, 'leads/lead_contact.html', context)


# QUALIFIED PIPELINE (Kanban)
@login_required
def lead_pipeline_view(request):
    leads = _visible_leads(request.user).filter(qualified=True, disqualified=False)

    columns = pipeline.group_by_phase(leads)

    context = {
        'columns': columns,
        'total_count': sum(column['count'] for column in columns),
        'watch_tables': 'clients',
        'active_page': 'pipeline',
    }

    return render(request, 'leads/lead_pipeline.html', context)


@login_required
@require_POST
def lead_move_view(request, pk):
    """Drag-and-drop target: body {"phase": "..."} (JSON) or form field `phase`"""
    lead = _get_lead(request, pk)

    if request.content_type == 'application/json':
        try:
            phase = json.loads(request.body).get('phase')
        except (json.JSONDecodeError, AttributeError):
            return JsonResponse({'success': False, 'error': 'Invalid JSON format'}, status=400)
    else:
        phase = request.POST.get('phase')

    try:
        new_status = pipeline.status_for_phase(phase)
    except KeyError:
        if is_ajax(request):
            return JsonResponse({'success': False, 'error': 'Invalid phase'}, status=400)
        messages.error(request, 'Invalid phase')
        return redirect('leads:lead_pipeline')

    try:
        lead.change_negotiation_status(new_status, user=request.user)
    except Exception:
        logger.exception("Could not move lead %s to phase %s", pk, phase)
        if is_ajax(request):
            return JsonResponse({'success': False, 'error': 'Could not update lead phase'}, status=500)
        messages.error(request, 'Could not update lead phase.')
        return redirect('leads:lead_pipeline')

    if is_ajax(request):
        return JsonResponse({
            'success': True,
            'phase': phase,
            'negotiation_status': lead.negotiation_status,
        })

    messages.success(request, f'"{lead.name}" moved')
    return redirect('leads:lead_pipeline')


@login_required
def lead_export_view(request):
    export_format = request.GET.get('format', 'excel')

    filter_form = LeadFilterForm(request.GET or None, user=request.user)
    leads = filter_form.filter_queryset(_visible_leads(request.user))

    rows = [
        [
            lead.id,
            lead.name,
            lead.email or '',
            lead.phone,
            lead.get_status_display(),
            lead.get_negotiation_status_display(),
            lead.get_source_display(),
            'Yes' if lead.qualified else 'No',
            'Yes' if lead.disqualified else 'No',
            lead.agent.get_full_name() if lead.agent else '',
            timezone.localtime(lead.created_at).strftime('%Y-%m-%d %H:%M'),
        ]
        for lead in leads
    ]
    filename = f'leads_{timezone.now().strftime("%Y%m%d_%H%M%S")}'

    if export_format == 'excel':
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Leads"

        for col, header in enumerate(EXPORT_HEADERS, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = Font(bold=True, color="FFFFFF")
            cell.fill = PatternFill(start_color="667eea", end_color="667eea", fill_type="solid")

        for row in rows:
            ws.append(row)

        for col in ws.columns:
            max_length = max(len(str(cell.value or '')) for cell in col)
            ws.column_dimensions[col[0].column_letter].width = min(max_length + 2, 50)

        response = HttpResponse(
            content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        response['Content-Disposition'] = f'attachment; filename="{filename}.xlsx"'
        wb.save(response)
        return response

    elif export_format == 'csv':
        response = HttpResponse(content_type='text/csv; charset=utf-8')
        response['Content-Disposition'] = f'attachment; filename="{filename}.csv"'

        # BOM for Excel UTF-8 compatibility
        response.write('\ufeff')

        writer = csv.writer(response)
        writer.writerow(EXPORT_HEADERS)
        writer.writerows(rows)
        return response

    messages.error(request, 'Invalid export format')
    return redirect('leads:lead_list')
