import logging

from celery import shared_task
from django.utils import timezone

from .models import ClientDocument

logger = logging.getLogger(__name__)


@shared_task
def expire_overdue_documents():
    """
    Daily task: pending documents past their due date become expired.
    Scheduled in config/celery.py
    """
    expired = ClientDocument.objects.filter(
        status='pending',
        due_date__lt=timezone.localdate(),
    ).update(status='expired', updated_at=timezone.now())

    logger.info("Expired %s overdue documents", expired)
    return f'{expired} documents expired.'
