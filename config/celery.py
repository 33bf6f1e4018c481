# Celery is a distributed task queue for running background jobs

# - Email appointment reminders to agents
# - Expire client documents past their due date
#
# Start worker: celery -A config worker -l info
# Start beat: celery -A config beat -l info
# ==============================================================================

import logging
import os
from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module for Celery
# This ensures Celery uses the same settings as Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

logger = logging.getLogger(__name__)

# 'salescrm' is the app name (appears in logs and monitoring)
app = Celery('salescrm')

# All settings prefixed with 'CELERY_' will be used
# Example: CELERY_BROKER_URL, CELERY_RESULT_BACKEND
app.config_from_object('django.conf:settings', namespace='CELERY')

# Looks for tasks.py in each installed app
# apps/appointments/tasks.py, apps/documents/tasks.py
app.autodiscover_tasks()


# CELERY BEAT SCHEDULE (Periodic Tasks)
app.conf.beat_schedule = {
    # Reminder emails for appointments starting within CRM_REMINDER_WINDOW_HOURS
    'send-appointment-reminders': {
        'task': 'apps.appointments.tasks.send_reminders',
        'schedule': crontab(minute='*/15'),  # Every 15 minutes
    },

    # Pending / received documents past their due date -> expired
    'expire-overdue-documents': {
        'task': 'apps.documents.tasks.expire_overdue_documents',
        'schedule': crontab(hour=1, minute=0),  # Every day at 1:00 AM
    },
}


@app.task(bind=True, ignore_result=True)
def debug_task(self):
    """
    Debug task to test Celery is working

    Usage:
        from config.celery import debug_task
        debug_task.delay()
    """
    logger.info('Request: %r', self.request)
