"""
Finalized Sale Tests
====================

Test Coverage:
1. contract_path - storage key layout
2. finalize_sale service - sale insert, lead -> sale_completed, activity, upload failure aborts
3. cancel_sale service - sale removed, lead -> in_negotiation, contract removed, activity
4. Views - product choices, role scoping, list total and fallback name, export

Run tests:
    python manage.py test apps.sales.tests
"""

import shutil
import tempfile
from datetime import date
from decimal import Decimal
from unittest import mock

from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, Client, override_settings
from django.urls import reverse

from apps.accounts.models import User
from apps.leads.models import Lead, Activity
from apps.products.models import Product
from apps.sales.forms import SaleFinalizeForm
from apps.sales.models import SaleFinalized, contract_path
from apps.sales.services import finalize_sale, cancel_sale, ContractUploadError

MEDIA_ROOT = tempfile.mkdtemp()


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class SaleTestCase(TestCase):

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.client = Client()

        self.manager = User.objects.create_user(email='manager@test.com', password='testpass123', role='manager')
        self.agent = User.objects.create_user(email='agent@test.com', password='testpass123', role='agent')
        self.other_agent = User.objects.create_user(email='other@test.com', password='testpass123', role='agent')

        self.lead = Lead.objects.create(name='Maria Silva', agent=self.agent, negotiation_status='in_negotiation')
        self.other_lead = Lead.objects.create(name='Pedro Alves', agent=self.other_agent)

        self.product = Product.objects.create(
            title='Garden house', product_type='house', price=Decimal('650000'), agent=self.agent
        )
        self.sold_product = Product.objects.create(
            title='Old flat', product_type='apartment', price=Decimal('200000'), status='sold', agent=self.agent
        )


class ContractPathTest(SaleTestCase):

    def test_layout(self):
        path = contract_path(7, 'signed contract.pdf')

        self.assertTrue(path.startswith('contracts/7/'))
        self.assertTrue(path.endswith('-signed_contract.pdf'))


class FinalizeSaleServiceTest(SaleTestCase):

    def test_finalize_without_contract(self):
        """
        Test: Finalize a sale

        Expected: Sale stored, lead sale_completed, "sale_finalized" activity
        """
        sale = finalize_sale(
            self.lead, self.agent, 'Garden house', Decimal('640000'), date(2026, 10, 1), product=self.product
        )

        self.assertEqual(sale.agent, self.agent)
        self.assertEqual(sale.product, self.product)
        self.lead.refresh_from_db()
        self.assertEqual(self.lead.negotiation_status, 'sale_completed')
        self.assertTrue(Activity.objects.filter(lead=self.lead, activity_type='sale_finalized').exists())

    def test_finalize_stores_contract(self):
        upload = SimpleUploadedFile('contract.pdf', b'%PDF-1.4 signed', content_type='application/pdf')

        sale = finalize_sale(
            self.lead, self.agent, 'Garden house', Decimal('640000'), date(2026, 10, 1), contract_file=upload
        )

        self.assertTrue(sale.contract.name.startswith(f'contracts/{self.agent.pk}/'))
        self.assertTrue(default_storage.exists(sale.contract.name))

    def test_upload_failure_writes_nothing(self):
        """
        Test: Storage fails while saving the contract

        Expected: ContractUploadError, no sale, lead untouched, no activity
        """
        upload = SimpleUploadedFile('contract.pdf', b'data')

        with mock.patch('apps.sales.services.default_storage.save', side_effect=OSError('disk full')):
            with self.assertRaises(ContractUploadError):
                finalize_sale(self.lead, self.agent, 'Garden house', Decimal('1'), date(2026, 10, 1), contract_file=upload)

        self.assertFalse(SaleFinalized.objects.exists())
        self.lead.refresh_from_db()
        self.assertEqual(self.lead.negotiation_status, 'in_negotiation')
        self.assertFalse(Activity.objects.filter(activity_type='sale_finalized').exists())


class CancelSaleServiceTest(SaleTestCase):

    def test_cancel(self):
        """
        Test: Cancel a finalized sale with a contract

        Expected: Sale deleted, lead in_negotiation, file removed, "sale_canceled" logged
        """
        upload = SimpleUploadedFile('contract.pdf', b'%PDF-1.4 signed')
        sale = finalize_sale(self.lead, self.agent, 'Garden house', Decimal('640000'), date(2026, 10, 1), contract_file=upload)
        contract_name = sale.contract.name

        cancel_sale(sale, self.agent)

        self.assertFalse(SaleFinalized.objects.exists())
        self.lead.refresh_from_db()
        self.assertEqual(self.lead.negotiation_status, 'in_negotiation')
        self.assertFalse(default_storage.exists(contract_name))
        self.assertTrue(Activity.objects.filter(lead=self.lead, activity_type='sale_canceled').exists())

    def test_storage_error_on_cancel_is_only_logged(self):
        sale = SaleFinalized.objects.create(
            lead=self.lead, agent=self.agent, product_name='X', sale_value=Decimal('10'),
            completion_date=date(2026, 10, 1), contract='contracts/1/missing.pdf'
        )

        with mock.patch('apps.sales.services.default_storage.delete', side_effect=OSError('gone')):
            cancel_sale(sale, self.agent)

        self.assertFalse(SaleFinalized.objects.exists())
        self.assertTrue(Activity.objects.filter(activity_type='sale_canceled').exists())


class SaleFinalizeFormTest(SaleTestCase):

    def test_only_available_products(self):
        form = SaleFinalizeForm()
        self.assertEqual(list(form.fields['product'].queryset), [self.product])

    def test_required_fields(self):
        form = SaleFinalizeForm(data={})
        self.assertFalse(form.is_valid())
        for field in ('product', 'sale_value', 'completion_date'):
            self.assertIn(field, form.errors)


class SaleViewTest(SaleTestCase):

    def test_finalize_view(self):
        self.client.login(email='agent@test.com', password='testpass123')
        response = self.client.post(reverse('sales:sale_finalize', kwargs={'lead_pk': self.lead.pk}), {
            'product': self.product.pk,
            'sale_value': '645000.00',
            'completion_date': '2026-10-05',
            'notes': 'Paid in cash',
        })

        self.assertRedirects(response, reverse('sales:sale_list'))
        sale = SaleFinalized.objects.get()
        self.assertEqual(sale.product_name, 'Garden house')
        self.assertEqual(sale.sale_value, Decimal('645000.00'))

    def test_agent_cannot_finalize_other_agents_lead(self):
        self.client.login(email='agent@test.com', password='testpass123')
        response = self.client.get(reverse('sales:sale_finalize', kwargs={'lead_pk': self.other_lead.pk}))

        self.assertEqual(response.status_code, 404)

    def test_list_total_and_fallback_name(self):
        """
        Test: Manager lists sales, one of them for a deleted lead

        Expected: Total of all values; orphan sale shows "Client not found"
        """
        finalize_sale(self.lead, self.agent, 'Garden house', Decimal('100'), date(2026, 10, 1))
        finalize_sale(self.other_lead, self.other_agent, 'Flat', Decimal('50'), date(2026, 10, 2))
        self.other_lead.delete()

        self.client.login(email='manager@test.com', password='testpass123')
        response = self.client.get(reverse('sales:sale_list'))

        self.assertEqual(response.context['total_value'], Decimal('150'))
        sales = list(response.context['sales'])
        self.assertEqual(sales[0].client_name, 'Client not found')
        self.assertContains(response, 'Client not found')

    def test_agent_list_scoped(self):
        finalize_sale(self.lead, self.agent, 'Garden house', Decimal('100'), date(2026, 10, 1))
        finalize_sale(self.other_lead, self.other_agent, 'Flat', Decimal('50'), date(2026, 10, 2))

        self.client.login(email='agent@test.com', password='testpass123')
        response = self.client.get(reverse('sales:sale_list'))

        self.assertEqual(response.context['total_value'], Decimal('100'))

    def test_cancel_view(self):
        sale = finalize_sale(self.lead, self.agent, 'Garden house', Decimal('100'), date(2026, 10, 1))

        self.client.login(email='agent@test.com', password='testpass123')
        response = self.client.post(reverse('sales:sale_cancel', kwargs={'pk': sale.pk}))

        self.assertRedirects(response, reverse('sales:sale_list'))
        self.assertFalse(SaleFinalized.objects.exists())

    def test_export_excel(self):
        finalize_sale(self.lead, self.agent, 'Garden house', Decimal('100'), date(2026, 10, 1))

        self.client.login(email='agent@test.com', password='testpass123')
        response = self.client.get(reverse('sales:sale_export'), {'format': 'excel'})

        self.assertEqual(response.status_code, 200)
        self.assertIn('.xlsx', response['Content-Disposition'])
