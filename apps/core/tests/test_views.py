"""
Dashboard View Tests
====================

Test Coverage:
1. Agent dashboard - page, JSON endpoints, login redirect
2. Manager dashboard - manager only, filters, alerts
3. Team report export (.xlsx)

Run tests:
    python manage.py test apps.core.tests.test_views
"""

from decimal import Decimal

from django.test import TestCase, Client
from django.urls import reverse
from django.utils import timezone

from apps.accounts.models import User
from apps.leads.models import Lead
from apps.sales.models import SaleFinalized


class DashboardViewTestCase(TestCase):

    def setUp(self):
        self.client = Client()

        self.manager = User.objects.create_user(
            email='manager@test.com', password='testpass123', first_name='Mia', last_name='Lopes', role='manager'
        )
        self.agent = User.objects.create_user(
            email='agent@test.com', password='testpass123', first_name='Ana', last_name='Souza', role='agent'
        )
        self.other_agent = User.objects.create_user(
            email='other@test.com', password='testpass123', first_name='Bruno', last_name='Costa', role='agent'
        )

        lead = Lead.objects.create(name='Maria Silva', agent=self.agent, negotiation_status='sale_completed')
        Lead.objects.create(name='João Souza', agent=self.agent, negotiation_status='proposal_sent')
        Lead.objects.create(name='Pedro Alves', agent=self.other_agent)

        SaleFinalized.objects.create(
            lead=lead, agent=self.agent, product_name='Garden house',
            sale_value=Decimal('250000'), completion_date=timezone.localdate(),
        )


class AgentDashboardTest(DashboardViewTestCase):

    def test_login_required(self):
        response = self.client.get(reverse('core:dashboard'))

        self.assertEqual(response.status_code, 302)
        self.assertIn(reverse('accounts:login'), response.url)

    def test_agent_dashboard(self):
        """
        Test: Agent opens the dashboard

        Expected: Own numbers only (2 leads, 1 proposal)
        """
        self.client.login(email='agent@test.com', password='testpass123')
        response = self.client.get(reverse('core:dashboard'))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, 'core/dashboard.html')
        self.assertEqual(response.context['kpis']['total_leads'], 2)
        self.assertEqual(response.context['kpis']['proposals'], 1)
        self.assertEqual(response.context['stats_label'], 'My')

    def test_manager_sees_company_numbers(self):
        self.client.login(email='manager@test.com', password='testpass123')
        response = self.client.get(reverse('core:dashboard'))

        self.assertEqual(response.context['kpis']['total_leads'], 3)
        self.assertEqual(response.context['stats_label'], 'Company')

    def test_kpis_json(self):
        self.client.login(email='agent@test.com', password='testpass123')
        data = self.client.get(reverse('core:kpis_json')).json()

        self.assertEqual(data['total_sales'], 250000.0)
        self.assertEqual(data['conversion_rate'], 50.0)

    def test_funnel_json(self):
        self.client.login(email='agent@test.com', password='testpass123')
        funnel = self.client.get(reverse('core:funnel_json')).json()['funnel']

        by_status = {step['status']: step['percentage'] for step in funnel}
        self.assertEqual(by_status['proposal_sent'], 50)
        self.assertEqual(by_status['sale_completed'], 50)

    def test_activities_json_scoped(self):
        self.client.login(email='agent@test.com', password='testpass123')
        activities = self.client.get(reverse('core:activities_json')).json()['activities']

        self.assertEqual(len(activities), 2)
        self.assertTrue(all(a['user'] == 'Ana Souza' for a in activities))


class ManagerDashboardTest(DashboardViewTestCase):

    def test_agent_redirected(self):
        """
        Test: Agent opens the manager dashboard

        Expected: Redirect to own dashboard
        """
        self.client.login(email='agent@test.com', password='testpass123')
        response = self.client.get(reverse('core:manager_dashboard'))

        self.assertRedirects(response, reverse('core:dashboard'))

    def test_agent_ajax_forbidden(self):
        self.client.login(email='agent@test.com', password='testpass123')
        response = self.client.get(
            reverse('core:manager_dashboard'), HTTP_X_REQUESTED_WITH='XMLHttpRequest'
        )

        self.assertEqual(response.status_code, 403)

    def test_manager_dashboard(self):
        """
        Test: Manager opens the team dashboard

        Expected: One row per agent, Bruno (0%) alerted
        """
        self.client.login(email='manager@test.com', password='testpass123')
        response = self.client.get(reverse('core:manager_dashboard'))

        self.assertEqual(response.status_code, 200)
        rows = response.context['rows']
        self.assertEqual([row['agent'] for row in rows], [self.agent, self.other_agent])
        self.assertEqual(rows[0]['conversion_rate'], 50.0)
        self.assertEqual([row['agent'] for row in response.context['alerts']], [self.other_agent])
        self.assertEqual(response.context['totals']['total_sales'], Decimal('250000'))

    def test_agent_filter(self):
        self.client.login(email='manager@test.com', password='testpass123')
        response = self.client.get(reverse('core:manager_dashboard'), {
            'period': 'all',
            'agent': self.other_agent.pk,
        })

        self.assertEqual([row['agent'] for row in response.context['rows']], [self.other_agent])

    def test_report_export(self):
        self.client.login(email='manager@test.com', password='testpass123')
        response = self.client.get(reverse('core:manager_report'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response['Content-Type'],
            'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        self.assertIn('team_performance_', response['Content-Disposition'])

    def test_report_export_manager_only(self):
        self.client.login(email='agent@test.com', password='testpass123')
        response = self.client.get(reverse('core:manager_report'))

        self.assertEqual(response.status_code, 302)
