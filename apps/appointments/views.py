import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_POST

from apps.core.utils import scope_to_user, is_ajax
from apps.leads.models import Activity
from .forms import AppointmentForm, AppointmentFilterForm
from .models import Appointment

logger = logging.getLogger(__name__)


def _visible_appointments(user):
    return scope_to_user(Appointment.objects.select_related('lead', 'agent'), user)


def _appointment_to_dict(appointment):
    return {
        'id': appointment.id,
        'title': appointment.title,
        'lead': {'id': appointment.lead_id, 'name': appointment.lead.name},
        'agent_id': appointment.agent_id,
        'date_time': appointment.date_time.isoformat(),
        'location': appointment.location,
        'notes': appointment.notes,
        'status': appointment.status,
        'status_display': appointment.get_status_display(),
    }


@login_required
def appointment_list_view(request):
    appointments = _visible_appointments(request.user)

    filter_form = AppointmentFilterForm(request.GET or None)
    filtered = filter_form.filter_queryset(appointments)

    upcoming = appointments.filter(status='scheduled', date_time__gte=timezone.now())[:10]

    context = {
        'appointments': filtered,
        'upcoming': upcoming,
        'filter_form': filter_form,
        'watch_tables': 'appointments',
        'active_page': 'appointments',
    }
    return render(request, 'appointments/appointment_list.html', context)


@login_required
def appointment_json_view(request):
    """Role-scoped list, same filters as the page"""
    filter_form = AppointmentFilterForm(request.GET or None)
    appointments = filter_form.filter_queryset(_visible_appointments(request.user))

    return JsonResponse({
        'appointments': [_appointment_to_dict(a) for a in appointments],
    })


@login_required
def appointment_create_view(request):
    initial = {}
    if request.GET.get('lead'):
        initial['lead'] = request.GET['lead']

    if request.method == 'POST':
        form = AppointmentForm(request.POST, user=request.user)

        if form.is_valid():
            try:
                appointment = form.save(commit=False)
                appointment.agent = request.user
                appointment.save()

                when = timezone.localtime(appointment.date_time).strftime('%Y-%m-%d %H:%M')
                Activity.log(appointment.lead, request.user, 'appointment', f'Appointment scheduled: {appointment.title} on {when}')

                messages.success(request, 'Appointment scheduled')
                return redirect('appointments:appointment_list')

            except Exception:
                logger.exception("Could not create appointment for user %s", request.user.pk)
                messages.error(request, 'Could not save appointment. Please try again.')
    else:
        form = AppointmentForm(initial=initial, user=request.user)

    context = {
        'form': form,
        'form_title': 'New Appointment',
        'submit_text': 'Schedule',
        'active_page': 'appointments',
    }
    return render(request, 'appointments/appointment_form.html', context)


@login_required
def appointment_edit_view(request, pk):
    appointment = get_object_or_404(_visible_appointments(request.user), pk=pk)

    if request.method == 'POST':
        form = AppointmentForm(request.POST, instance=appointment, user=request.user)

        if form.is_valid():
            try:
                form.save()
                messages.success(request, 'Appointment updated')
                return redirect('appointments:appointment_list')
            except Exception:
                logger.exception("Could not update appointment %s", pk)
                messages.error(request, 'Could not save appointment. Please try again.')
    else:
        form = AppointmentForm(instance=appointment, user=request.user)

    context = {
        'form': form,
        'appointment': appointment,
        'form_title': f'Edit: {appointment.title}',
        'submit_text': 'Save Changes',
        'active_page': 'appointments',
    }
    return render(request, 'appointments/appointment_form.html', context)


def _set_status(request, pk, action):
    appointment = get_object_or_404(_visible_appointments(request.user), pk=pk)

    try:
        getattr(appointment, action)()
    except Exception:
        logger.exception("Could not %s appointment %s", action, pk)
        if is_ajax(request):
            return JsonResponse({'success': False, 'error': 'Could not update appointment'}, status=500)
        messages.error(request, 'Could not update appointment.')
    else:
        if is_ajax(request):
            return JsonResponse({'success': True, 'status': appointment.status})
        messages.success(request, f'Appointment {appointment.get_status_display().lower()}')

    return redirect('appointments:appointment_list')


@login_required
@require_POST
def appointment_cancel_view(request, pk):
    return _set_status(request, pk, 'cancel')


@login_required
@require_POST
def appointment_complete_view(request, pk):
    return _set_status(request, pk, 'complete')
