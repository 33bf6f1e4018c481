"""
Lead Views Tests
================

Tests for the lead views.

Test Coverage:
1. List View - role scoping, search and qualification filter
2. Detail View - 404 outside the agent's scope
3. Create View - agent assignment, duplicate rejection, single "new_lead" entry
4. Edit / Delete Views - owner-or-manager access, activity logging
5. Qualification Views - qualify, disqualify (reason required), requalify
6. Status / Pipeline Views - change status, Kanban columns, drag-and-drop move
7. Contact Views - call registration, email sending
8. Export View - Excel and CSV

Run tests:
    python manage.py test apps.leads.tests.test_views
"""

import json
from unittest import mock

from django.core import mail
from django.db import DatabaseError
from django.test import TestCase, Client
from django.urls import reverse
from django.contrib.auth import get_user_model

from apps.leads.models import Lead, Activity

User = get_user_model()


class LeadViewTestCase(TestCase):
    """Shared fixtures: one manager, two agents, a lead per agent"""

    def setUp(self):
        self.client = Client()

        self.manager = User.objects.create_user(
            email='manager@test.com',
            password='testpass123',
            first_name='Marta',
            last_name='Gomes',
            role='manager'
        )
        self.agent = User.objects.create_user(
            email='agent@test.com',
            password='testpass123',
            first_name='Ana',
            last_name='Souza',
            role='agent'
        )
        self.other_agent = User.objects.create_user(
            email='other@test.com',
            password='testpass123',
            first_name='Bruno',
            last_name='Costa',
            role='agent'
        )

        self.lead = Lead.objects.create(
            name='Maria Silva',
            phone='11999990000',
            email='maria@example.com',
            agent=self.agent
        )
        self.other_lead = Lead.objects.create(
            name='Pedro Alves',
            phone='11999991111',
            agent=self.other_agent
        )

    def login_agent(self):
        self.client.login(email='agent@test.com', password='testpass123')

    def login_manager(self):
        self.client.login(email='manager@test.com', password='testpass123')


class LeadListViewTest(LeadViewTestCase):

    def test_list_view_requires_login(self):
        """
        Test: List view requires authentication

        Expected: Redirect to login
        """
        response = self.client.get(reverse('leads:lead_list'))

        self.assertEqual(response.status_code, 302)
        self.assertIn('login', response.url)

    def test_agent_sees_only_own_leads(self):
        """
        Test: Agent opens the lead list

        Expected: Only leads assigned to the agent
        """
        self.login_agent()
        response = self.client.get(reverse('leads:lead_list'))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, 'leads/lead_list.html')
        self.assertEqual(list(response.context['leads']), [self.lead])

    def test_manager_sees_all_leads(self):
        self.login_manager()
        response = self.client.get(reverse('leads:lead_list'))

        self.assertEqual(response.context['total_count'], 2)

    def test_search_and_qualification_filter(self):
        """
        Test: Search plus qualification filter

        Expected: Only matching qualified leads returned
        """
        self.lead.qualify(user=self.agent)
        self.login_manager()

        response = self.client.get(reverse('leads:lead_list'), {'qualification': 'qualified'})
        self.assertEqual(list(response.context['leads']), [self.lead])

        response = self.client.get(reverse('leads:lead_list'), {'search': 'Pedro'})
        self.assertEqual(list(response.context['leads']), [self.other_lead])


class LeadDetailViewTest(LeadViewTestCase):

    def test_detail_view_shows_lead(self):
        self.login_agent()
        response = self.client.get(reverse('leads:lead_detail', kwargs={'pk': self.lead.pk}))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, 'leads/lead_detail.html')
        self.assertEqual(response.context['lead'], self.lead)
        self.assertIn('activities', response.context)

    def test_agent_cannot_view_other_agents_lead(self):
        """
        Test: Agent opens another agent's lead

        Expected: 404
        """
        self.login_agent()
        response = self.client.get(reverse('leads:lead_detail', kwargs={'pk': self.other_lead.pk}))

        self.assertEqual(response.status_code, 404)

    def test_json_view(self):
        self.login_agent()
        response = self.client.get(reverse('leads:lead_json', kwargs={'pk': self.lead.pk}))

        data = response.json()
        self.assertEqual(data['name'], 'Maria Silva')
        self.assertEqual(data['agent']['id'], self.agent.pk)

        response = self.client.get(reverse('leads:lead_json', kwargs={'pk': self.other_lead.pk}))
        self.assertEqual(response.status_code, 404)


class LeadCreateViewTest(LeadViewTestCase):

    def test_create_view_get_shows_form(self):
        self.login_agent()
        response = self.client.get(reverse('leads:lead_create'))

        self.assertEqual(response.status_code, 200)
        self.assertIn('form', response.context)

    def test_create_assigns_current_agent(self):
        """
        Test: Agent creates a lead

        Expected: Lead owned by the agent, status new_lead, one "new_lead" activity
        """
        self.login_agent()
        response = self.client.post(reverse('leads:lead_create'), {
            'name': 'Carla Dias',
            'phone': '(11) 97777-6666',
            'status': 'interested',
            'source': 'referral',
        })

        lead = Lead.objects.get(name='Carla Dias')
        self.assertRedirects(response, reverse('leads:lead_detail', kwargs={'pk': lead.pk}))
        self.assertEqual(lead.agent, self.agent)
        self.assertEqual(lead.negotiation_status, 'new_lead')
        self.assertEqual(lead.phone, '11977776666')
        self.assertEqual(Activity.objects.filter(lead=lead, activity_type='new_lead').count(), 1)

    def test_create_duplicate_rejected(self):
        """
        Test: Lead with an email that already exists

        Expected: Form re-rendered, no new lead
        """
        self.login_agent()
        response = self.client.post(reverse('leads:lead_create'), {
            'name': 'Another Maria',
            'email': 'maria@example.com',
            'status': 'prospect',
            'source': 'manual',
        })

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Lead.objects.filter(name='Another Maria').exists())


class LeadEditDeleteViewTest(LeadViewTestCase):

    def test_edit_logs_changed_fields(self):
        """
        Test: Owner edits profession

        Expected: Saved and a "lead_updated" activity
        """
        self.login_agent()
        response = self.client.post(reverse('leads:lead_edit', kwargs={'pk': self.lead.pk}), {
            'name': 'Maria Silva',
            'phone': '11999990000',
            'email': 'maria@example.com',
            'status': 'prospect',
            'source': 'manual',
            'negotiation_status': 'new_lead',
            'profession': 'Engineer',
        })

        self.assertEqual(response.status_code, 302)
        self.lead.refresh_from_db()
        self.assertEqual(self.lead.profession, 'Engineer')
        self.assertTrue(Activity.objects.filter(lead=self.lead, activity_type='lead_updated').exists())

    def test_agent_cannot_edit_other_agents_lead(self):
        self.login_agent()
        response = self.client.get(reverse('leads:lead_edit', kwargs={'pk': self.other_lead.pk}))

        self.assertEqual(response.status_code, 404)

    def test_delete_keeps_activity(self):
        """
        Test: Manager deletes a lead

        Expected: Lead gone, "lead_deleted" activity kept without a lead
        """
        self.login_manager()
        response = self.client.post(reverse('leads:lead_delete', kwargs={'pk': self.other_lead.pk}))

        self.assertRedirects(response, reverse('leads:lead_list'))
        self.assertFalse(Lead.objects.filter(pk=self.other_lead.pk).exists())

        entry = Activity.objects.get(activity_type='lead_deleted')
        self.assertIsNone(entry.lead)
        self.assertIn('Pedro Alves', entry.description)

    def test_failed_delete_logs_nothing(self):
        """
        Test: The database refuses the delete of an AJAX request

        Expected: JSON 500, lead still there, no "lead_deleted" entry
        """
        self.login_manager()

        with mock.patch.object(Lead, 'delete', side_effect=DatabaseError('locked')):
            with self.assertLogs('apps.leads.views', 'ERROR'):
                response = self.client.post(
                    reverse('leads:lead_delete', kwargs={'pk': self.other_lead.pk}),
                    HTTP_X_REQUESTED_WITH='XMLHttpRequest',
                )

        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.json()['success'])
        self.assertTrue(Lead.objects.filter(pk=self.other_lead.pk).exists())
        self.assertFalse(Activity.objects.filter(activity_type='lead_deleted').exists())

    def test_delete_requires_post(self):
        self.login_manager()
        response = self.client.get(reverse('leads:lead_delete', kwargs={'pk': self.lead.pk}))

        self.assertEqual(response.status_code, 405)


class LeadQualificationViewTest(LeadViewTestCase):

    def test_qualify(self):
        self.login_agent()
        self.client.post(reverse('leads:lead_qualify', kwargs={'pk': self.lead.pk}))

        self.lead.refresh_from_db()
        self.assertTrue(self.lead.qualified)

    def test_disqualify_requires_reason(self):
        """
        Test: Disqualify without a reason

        Expected: Lead unchanged, no disqualification activity
        """
        self.login_agent()
        response = self.client.post(
            reverse('leads:lead_disqualify', kwargs={'pk': self.lead.pk}),
            {'reason': '', 'notes': 'n/a'}
        )

        self.assertEqual(response.status_code, 200)
        self.lead.refresh_from_db()
        self.assertFalse(self.lead.disqualified)
        self.assertFalse(Activity.objects.filter(activity_type='disqualification').exists())

    def test_disqualify_then_requalify(self):
        self.login_agent()
        response = self.client.post(
            reverse('leads:lead_disqualify', kwargs={'pk': self.lead.pk}),
            {'reason': 'no_interest', 'notes': 'Bought elsewhere'}
        )
        self.assertEqual(response.status_code, 302)

        self.lead.refresh_from_db()
        self.assertTrue(self.lead.disqualified)
        self.assertEqual(self.lead.disqualification_reason, 'no_interest')

        self.client.post(reverse('leads:lead_requalify', kwargs={'pk': self.lead.pk}))
        self.lead.refresh_from_db()
        self.assertFalse(self.lead.disqualified)
        self.assertEqual(self.lead.disqualification_reason, '')

    def test_disqualify_ajax(self):
        self.login_agent()
        response = self.client.post(
            reverse('leads:lead_disqualify', kwargs={'pk': self.lead.pk}),
            {'reason': 'duplicate'},
            HTTP_X_REQUESTED_WITH='XMLHttpRequest'
        )

        self.assertEqual(response.json(), {'success': True, 'disqualified': True})


class LeadStatusViewTest(LeadViewTestCase):

    def test_change_status_ajax(self):
        """
        Test: Change negotiation status over AJAX

        Expected: JSON success and new status persisted
        """
        self.login_agent()
        response = self.client.post(
            reverse('leads:lead_change_status', kwargs={'pk': self.lead.pk}),
            {'negotiation_status': 'visit_scheduled'},
            HTTP_X_REQUESTED_WITH='XMLHttpRequest'
        )

        self.assertTrue(response.json()['success'])
        self.lead.refresh_from_db()
        self.assertEqual(self.lead.negotiation_status, 'visit_scheduled')

    def test_change_status_invalid(self):
        self.login_agent()
        response = self.client.post(
            reverse('leads:lead_change_status', kwargs={'pk': self.lead.pk}),
            {'negotiation_status': 'won'},
            HTTP_X_REQUESTED_WITH='XMLHttpRequest'
        )

        self.assertEqual(response.status_code, 400)

    def test_pipeline_shows_only_qualified_active_leads(self):
        """
        Test: Kanban board

        Expected: Only qualified, non-disqualified leads in the columns
        """
        self.lead.qualify(user=self.agent)
        self.lead.change_negotiation_status('visit_done', user=self.agent)

        self.login_manager()
        response = self.client.get(reverse('leads:lead_pipeline'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['total_count'], 1)
        columns = {c['phase']: c for c in response.context['columns']}
        self.assertEqual(columns['visit_scheduled']['leads'], [self.lead])

    def test_move_card_json(self):
        """
        Test: Drop a card on the "closing" column

        Expected: negotiation_status becomes documents_pending
        """
        self.lead.qualify(user=self.agent)
        self.login_agent()

        response = self.client.post(
            reverse('leads:lead_move', kwargs={'pk': self.lead.pk}),
            data=json.dumps({'phase': 'closing'}),
            content_type='application/json',
            HTTP_X_REQUESTED_WITH='XMLHttpRequest'
        )

        self.assertTrue(response.json()['success'])
        self.lead.refresh_from_db()
        self.assertEqual(self.lead.negotiation_status, 'documents_pending')

    def test_move_card_invalid_phase(self):
        self.login_agent()
        response = self.client.post(
            reverse('leads:lead_move', kwargs={'pk': self.lead.pk}),
            data=json.dumps({'phase': 'nowhere'}),
            content_type='application/json',
            HTTP_X_REQUESTED_WITH='XMLHttpRequest'
        )

        self.assertEqual(response.status_code, 400)


class LeadContactViewTest(LeadViewTestCase):

    def test_register_call(self):
        self.login_agent()
        response = self.client.post(
            reverse('leads:lead_call', kwargs={'pk': self.lead.pk}),
            {'summary': 'Talked about financing'}
        )

        self.assertEqual(response.status_code, 302)
        self.lead.refresh_from_db()
        self.assertIn('Call: Talked about financing', self.lead.notes)
        self.assertEqual(self.lead.negotiation_status, 'contact_made')

    def test_send_email(self):
        """
        Test: Email a lead

        Expected: Message in the outbox and an "email" activity
        """
        self.login_agent()
        self.client.post(
            reverse('leads:lead_email', kwargs={'pk': self.lead.pk}),
            {'subject': 'Your visit', 'message': 'See you tomorrow'}
        )

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['maria@example.com'])
        self.assertTrue(Activity.objects.filter(lead=self.lead, activity_type='email').exists())

    def test_email_without_address_redirects(self):
        self.login_manager()
        response = self.client.get(reverse('leads:lead_email', kwargs={'pk': self.other_lead.pk}))

        self.assertEqual(response.status_code, 302)


class LeadExportViewTest(LeadViewTestCase):

    def test_export_excel(self):
        self.login_manager()
        response = self.client.get(reverse('leads:lead_export'), {'format': 'excel'})

        self.assertEqual(response.status_code, 200)
        self.assertIn('spreadsheetml', response['Content-Type'])
        self.assertIn('.xlsx', response['Content-Disposition'])

    def test_export_csv_scoped_to_agent(self):
        """
        Test: Agent exports CSV

        Expected: BOM-prefixed CSV with only the agent's leads
        """
        self.login_agent()
        response = self.client.get(reverse('leads:lead_export'), {'format': 'csv'})

        content = response.content.decode('utf-8')
        self.assertTrue(content.startswith('\ufeff'))
        self.assertIn('Maria Silva', content)
        self.assertNotIn('Pedro Alves', content)
