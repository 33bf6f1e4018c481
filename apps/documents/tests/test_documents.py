"""
Client Document Tests
=====================

Test Coverage:
1. ClientDocument Model - set_status timestamps, overdue rule, checklist counts
2. Views - checklist scoping, add (pending), upload (received), status change, delete
3. expire_overdue_documents task

Run tests:
    python manage.py test apps.documents.tests
"""

import shutil
import tempfile
from datetime import timedelta

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, Client, override_settings
from django.urls import reverse
from django.utils import timezone

from apps.accounts.models import User
from apps.documents.models import ClientDocument
from apps.documents.tasks import expire_overdue_documents
from apps.leads.models import Lead, Activity

MEDIA_ROOT = tempfile.mkdtemp()


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class DocumentTestCase(TestCase):

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.client = Client()

        self.agent = User.objects.create_user(email='agent@test.com', password='testpass123', role='agent')
        self.other_agent = User.objects.create_user(email='other@test.com', password='testpass123', role='agent')

        self.lead = Lead.objects.create(name='Maria Silva', agent=self.agent)
        self.other_lead = Lead.objects.create(name='Pedro Alves', agent=self.other_agent)

        self.yesterday = timezone.localdate() - timedelta(days=1)
        self.next_week = timezone.localdate() + timedelta(days=7)


class ClientDocumentModelTest(DocumentTestCase):

    def test_received_sets_received_at_once(self):
        """
        Test: Marking a document received twice

        Expected: received_at set the first time and kept afterwards
        """
        document = ClientDocument.objects.create(lead=self.lead, name='ID')

        document.set_status('received')
        first_stamp = document.received_at
        self.assertIsNotNone(first_stamp)

        document.set_status('pending')
        document.set_status('received')
        self.assertEqual(document.received_at, first_stamp)

    def test_approved_sets_approved_at(self):
        document = ClientDocument.objects.create(lead=self.lead, name='Payslip')
        document.set_status('approved')
        document.refresh_from_db()

        self.assertEqual(document.status, 'approved')
        self.assertIsNotNone(document.approved_at)

    def test_any_transition_allowed(self):
        """
        Test: Jump from approved straight back to pending

        Expected: No workflow validation
        """
        document = ClientDocument.objects.create(lead=self.lead, name='Tax ID', status='approved')
        document.set_status('pending')
        self.assertEqual(document.status, 'pending')

    def test_invalid_status(self):
        document = ClientDocument.objects.create(lead=self.lead, name='Tax ID')
        with self.assertRaises(ValueError):
            document.set_status('lost')

    def test_overdue_rule_and_counts(self):
        """
        Test: Overdue = pending or received with a past due date

        Expected: Approved or future documents are never overdue
        """
        late_pending = ClientDocument.objects.create(lead=self.lead, name='A', due_date=self.yesterday)
        late_received = ClientDocument.objects.create(lead=self.lead, name='B', due_date=self.yesterday, status='received')
        late_approved = ClientDocument.objects.create(lead=self.lead, name='C', due_date=self.yesterday, status='approved')
        future = ClientDocument.objects.create(lead=self.lead, name='D', due_date=self.next_week)

        self.assertTrue(late_pending.is_overdue)
        self.assertTrue(late_received.is_overdue)
        self.assertFalse(late_approved.is_overdue)
        self.assertFalse(future.is_overdue)

        counts = ClientDocument.checklist_counts(self.lead.documents.all())
        self.assertEqual(counts, {'total': 4, 'approved': 1, 'pending': 2, 'overdue': 2})


class DocumentViewTest(DocumentTestCase):

    def setUp(self):
        super().setUp()
        self.client.login(email='agent@test.com', password='testpass123')

    def test_checklist_scoped_to_agent(self):
        response = self.client.get(reverse('documents:lead_checklist', kwargs={'lead_pk': self.lead.pk}))
        self.assertEqual(response.status_code, 200)

        response = self.client.get(reverse('documents:lead_checklist', kwargs={'lead_pk': self.other_lead.pk}))
        self.assertEqual(response.status_code, 404)

    def test_add_creates_pending(self):
        self.client.post(reverse('documents:document_add', kwargs={'lead_pk': self.lead.pk}), {
            'name': 'Proof of address',
            'document_type': 'proof_of_address',
            'due_date': self.next_week.isoformat(),
        })

        document = ClientDocument.objects.get(lead=self.lead)
        self.assertEqual(document.status, 'pending')
        self.assertTrue(Activity.objects.filter(lead=self.lead, activity_type='document').exists())

    def test_upload_creates_received(self):
        """
        Test: Upload a file for a client

        Expected: Document received, file stored, received_at set, name from file
        """
        upload = SimpleUploadedFile('payslip.pdf', b'%PDF-1.4 test', content_type='application/pdf')
        self.client.post(reverse('documents:document_upload', kwargs={'lead_pk': self.lead.pk}), {
            'document_type': 'proof_of_income',
            'file': upload,
        })

        document = ClientDocument.objects.get(lead=self.lead)
        self.assertEqual(document.status, 'received')
        self.assertEqual(document.name, 'payslip.pdf')
        self.assertIsNotNone(document.received_at)
        self.assertTrue(document.file.name.startswith('documents/'))

    @override_settings(CRM_DOCUMENT_MAX_FILE_SIZE=10)
    def test_upload_too_large(self):
        upload = SimpleUploadedFile('big.pdf', b'x' * 100, content_type='application/pdf')
        self.client.post(reverse('documents:document_upload', kwargs={'lead_pk': self.lead.pk}), {
            'document_type': 'other',
            'file': upload,
        })

        self.assertFalse(ClientDocument.objects.exists())

    def test_set_status_ajax(self):
        document = ClientDocument.objects.create(lead=self.lead, name='ID')
        response = self.client.post(
            reverse('documents:document_set_status', kwargs={'pk': document.pk}),
            {'status': 'approved'},
            HTTP_X_REQUESTED_WITH='XMLHttpRequest'
        )

        data = response.json()
        self.assertTrue(data['success'])
        self.assertEqual(data['status'], 'approved')
        self.assertIsNotNone(data['approved_at'])

    def test_cannot_touch_other_agents_document(self):
        document = ClientDocument.objects.create(lead=self.other_lead, name='ID')

        response = self.client.post(reverse('documents:document_delete', kwargs={'pk': document.pk}))

        self.assertEqual(response.status_code, 404)
        self.assertTrue(ClientDocument.objects.filter(pk=document.pk).exists())

    def test_delete(self):
        document = ClientDocument.objects.create(lead=self.lead, name='ID')
        response = self.client.post(reverse('documents:document_delete', kwargs={'pk': document.pk}))

        self.assertRedirects(response, reverse('documents:lead_checklist', kwargs={'lead_pk': self.lead.pk}))
        self.assertFalse(ClientDocument.objects.filter(pk=document.pk).exists())

    def test_list_only_own_documents(self):
        ClientDocument.objects.create(lead=self.lead, name='Mine')
        ClientDocument.objects.create(lead=self.other_lead, name='Theirs')

        response = self.client.get(reverse('documents:document_list'))

        self.assertEqual([d.name for d in response.context['documents']], ['Mine'])


class ExpireOverdueDocumentsTaskTest(DocumentTestCase):

    def test_only_pending_past_due_expire(self):
        late = ClientDocument.objects.create(lead=self.lead, name='Late', due_date=self.yesterday)
        received = ClientDocument.objects.create(lead=self.lead, name='Received', due_date=self.yesterday, status='received')
        future = ClientDocument.objects.create(lead=self.lead, name='Future', due_date=self.next_week)

        result = expire_overdue_documents()

        self.assertEqual(result, '1 documents expired.')
        late.refresh_from_db()
        received.refresh_from_db()
        future.refresh_from_db()
        self.assertEqual(late.status, 'expired')
        self.assertEqual(received.status, 'received')
        self.assertEqual(future.status, 'pending')
