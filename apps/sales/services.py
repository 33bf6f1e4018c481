"""
Sale finalization and cancellation.

Both operations are a sequence of independent writes with no wrapping
transaction: a failure part-way leaves the earlier writes in place.
The only hard stop is the contract upload, which runs first.
"""

import logging

from django.core.files.storage import default_storage

from apps.leads.models import Activity
from .models import SaleFinalized, contract_path

logger = logging.getLogger(__name__)


class ContractUploadError(Exception):
    """Contract file could not be stored; nothing was written"""


def finalize_sale(lead, user, product_name, sale_value, completion_date,
                  product=None, contract_file=None, notes=''):
    """
    Record a finalized sale for `lead`.

    Steps:
        1. store the contract file (abort on failure)
        2. insert the sale
        3. move the lead to "sale_completed"
        4. log a "sale_finalized" activity

    Raises:
        ContractUploadError: storage rejected the contract file
    """
    contract_name = ''
    if contract_file:
        try:
            contract_name = default_storage.save(contract_path(user.pk, contract_file.name), contract_file)
        except Exception as e:
            logger.exception("Contract upload failed for lead %s", lead.pk)
            raise ContractUploadError('Could not upload the contract') from e

    sale = SaleFinalized.objects.create(
        lead=lead,
        agent=user,
        product=product,
        product_name=product_name or (product.title if product else ''),
        sale_value=sale_value,
        completion_date=completion_date,
        contract=contract_name,
        notes=notes or '',
    )

    lead.negotiation_status = 'sale_completed'
    lead.save(update_fields=['negotiation_status', 'updated_at'])

    Activity.log(lead, user, 'sale_finalized', f'Sale finalized: {sale.product_name} ({sale.sale_value})')

    logger.info("Sale %s finalized by user %s for lead %s", sale.pk, user.pk, lead.pk)
    return sale


def cancel_sale(sale, user):
    """
    Undo a finalized sale.

    Steps:
        1. delete the sale
        2. move the lead back to "in_negotiation"
        3. remove the contract file (failures are only logged)
        4. log a "sale_canceled" activity
    """
    lead = sale.lead
    contract_name = sale.contract.name if sale.contract else ''
    description = f'Sale canceled: {sale.product_name} ({sale.sale_value})'
    sale_pk = sale.pk

    sale.delete()

    if lead is not None:
        lead.negotiation_status = 'in_negotiation'
        lead.save(update_fields=['negotiation_status', 'updated_at'])

    if contract_name:
        try:
            default_storage.delete(contract_name)
        except Exception:
            logger.exception("Could not remove contract %s of canceled sale %s", contract_name, sale_pk)

    Activity.log(lead, user, 'sale_canceled', description)

    logger.info("Sale %s canceled by user %s", sale_pk, user.pk)
