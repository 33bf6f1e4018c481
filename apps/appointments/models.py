from datetime import timedelta

from django.conf import settings
from django.db import models
from django.urls import reverse
from django.utils import timezone


class Appointment(models.Model):

    STATUS_CHOICES = [
        ('scheduled', 'Scheduled'),
        ('completed', 'Completed'),
        ('canceled', 'Canceled'),
    ]

    DEFAULT_TITLE = 'Appointment'

    lead = models.ForeignKey('leads.Lead', on_delete=models.CASCADE, related_name='appointments')
    agent = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='appointments')

    title = models.CharField(max_length=200, default=DEFAULT_TITLE)
    date_time = models.DateTimeField(db_index=True)
    location = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='scheduled', db_index=True)
    reminder_sent = models.BooleanField(default=False, help_text='Reminder email already sent to the agent')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'appointments'
        verbose_name = 'Appointment'
        verbose_name_plural = 'Appointments'
        ordering = ['date_time']
        indexes = [
            models.Index(fields=['agent', 'date_time'], name='appointments_agent_date_idx'),
            models.Index(fields=['status', 'reminder_sent'], name='appointments_reminder_idx'),
        ]

    def __str__(self):
        return f"{self.title} - {self.lead.name} ({timezone.localtime(self.date_time):%Y-%m-%d %H:%M})"

    def get_absolute_url(self):
        return reverse('appointments:appointment_edit', kwargs={'pk': self.pk})

    def is_upcoming(self):
        return self.status == 'scheduled' and self.date_time >= timezone.now()

    def cancel(self):
        self.status = 'canceled'
        self.save(update_fields=['status', 'updated_at'])

    def complete(self):
        self.status = 'completed'
        self.save(update_fields=['status', 'updated_at'])

    @classmethod
    def due_for_reminder(cls, window_hours=None):
        """Scheduled, not yet reminded, starting within the next `window_hours`"""
        if window_hours is None:
            window_hours = settings.CRM_REMINDER_WINDOW_HOURS
        now = timezone.now()
        return cls.objects.filter(
            status='scheduled',
            reminder_sent=False,
            date_time__gte=now,
            date_time__lte=now + timedelta(hours=window_hours),
        ).select_related('lead', 'agent')
