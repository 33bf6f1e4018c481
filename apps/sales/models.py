import os

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.text import get_valid_filename


def contract_path(user_id, filename):
    """contracts/<user_id>/<timestamp>-<filename>"""
    timestamp = int(timezone.now().timestamp() * 1000)
    return f'contracts/{user_id}/{timestamp}-{get_valid_filename(os.path.basename(filename))}'


def contract_upload_to(instance, filename):
    return contract_path(instance.agent_id, filename)


class SaleFinalized(models.Model):

    CLIENT_FALLBACK_NAME = 'Client not found'

    lead = models.ForeignKey('leads.Lead', on_delete=models.SET_NULL, null=True, blank=True, related_name='sales')
    agent = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='sales')
    product = models.ForeignKey('products.Product', on_delete=models.SET_NULL, null=True, blank=True, related_name='sales')

    # Kept even if the product row goes away
    product_name = models.CharField(max_length=200)
    sale_value = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(0)])
    completion_date = models.DateField(db_index=True)

    contract = models.FileField(upload_to=contract_upload_to, blank=True, max_length=255)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'sales_finalized'
        verbose_name = 'Finalized sale'
        verbose_name_plural = 'Finalized sales'
        ordering = ['-completion_date', '-created_at']
        indexes = [
            models.Index(fields=['agent', '-completion_date'], name='sales_agent_date_idx'),
        ]

    def __str__(self):
        return f"{self.client_name} - {self.product_name} ({self.sale_value})"

    @property
    def client_name(self):
        return self.lead.name if self.lead else self.CLIENT_FALLBACK_NAME
