from django.db import models
from django.db.models import Q
from django.utils import timezone


class ClientDocument(models.Model):
    """
    One entry of a client's document checklist.

    Status transitions are manual; any status may follow any other.
    """

    DOCUMENT_TYPE_CHOICES = [
        ('id_document', 'ID document'),
        ('tax_id', 'Tax ID'),
        ('proof_of_address', 'Proof of address'),
        ('proof_of_income', 'Proof of income'),
        ('civil_status_certificate', 'Civil status certificate'),
        ('bank_statement', 'Bank statement'),
        ('income_tax_return', 'Income tax return'),
        ('other', 'Other'),
    ]

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('received', 'Received'),
        ('approved', 'Approved'),
        ('expired', 'Expired'),
        ('rejected', 'Rejected'),
    ]

    # Statuses that still count against a due date
    OPEN_STATUSES = ['pending', 'received']

    lead = models.ForeignKey('leads.Lead', on_delete=models.CASCADE, related_name='documents')
    name = models.CharField(max_length=200)
    document_type = models.CharField(max_length=30, choices=DOCUMENT_TYPE_CHOICES, default='other')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)

    due_date = models.DateField(null=True, blank=True)
    received_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)

    file = models.FileField(upload_to='documents/%Y/%m/', blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'client_documents'
        verbose_name = 'Client document'
        verbose_name_plural = 'Client documents'
        ordering = ['due_date', 'created_at']
        indexes = [
            models.Index(fields=['lead', 'status'], name='client_docs_lead_status_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_status_display()})"

    @property
    def is_overdue(self):
        return (
            self.status in self.OPEN_STATUSES
            and self.due_date is not None
            and self.due_date < timezone.localdate()
        )

    def set_status(self, status):
        """
        Manual transition. Stamps received_at the first time a document is
        received and approved_at on every approval.
        """
        if status not in dict(self.STATUS_CHOICES):
            raise ValueError(f'Invalid document status: {status}')

        self.status = status
        update_fields = ['status', 'updated_at']

        if status == 'received' and self.received_at is None:
            self.received_at = timezone.now()
            update_fields.append('received_at')
        elif status == 'approved':
            self.approved_at = timezone.now()
            update_fields.append('approved_at')

        self.save(update_fields=update_fields)

    @classmethod
    def overdue_q(cls):
        return Q(status__in=cls.OPEN_STATUSES, due_date__lt=timezone.localdate())

    @classmethod
    def checklist_counts(cls, documents):
        """{'total', 'approved', 'pending', 'overdue'} for a document queryset"""
        return {
            'total': documents.count(),
            'approved': documents.filter(status='approved').count(),
            'pending': documents.filter(status='pending').count(),
            'overdue': documents.filter(cls.overdue_q()).count(),
        }
