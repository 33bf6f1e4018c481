import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

from .models import Appointment

logger = logging.getLogger(__name__)


@shared_task
def send_reminders():
    """
    Periodic task to send appointment reminders.
    Scheduled in config/celery.py

    Emails the agent of every scheduled appointment starting within
    CRM_REMINDER_WINDOW_HOURS and flags it so it is reminded only once.
    """
    logger.info("Checking for appointments needing reminders...")

    reminders_sent = 0

    for appointment in Appointment.due_for_reminder():
        agent = appointment.agent
        if agent is None or not agent.email:
            continue

        when = timezone.localtime(appointment.date_time).strftime('%Y-%m-%d %H:%M')
        try:
            send_mail(
                f'Reminder: {appointment.title} with {appointment.lead.name}',
                f'You have "{appointment.title}" with {appointment.lead.name} on {when}.\n'
                f'Location: {appointment.location or "-"}\n\n{appointment.notes}',
                settings.DEFAULT_FROM_EMAIL,
                [agent.email],
                fail_silently=False,
            )
        except Exception:
            logger.exception("Could not send reminder for appointment %s", appointment.pk)
            continue

        appointment.reminder_sent = True
        appointment.save(update_fields=['reminder_sent', 'updated_at'])
        reminders_sent += 1

    return f'{reminders_sent} appointment reminders sent.'
