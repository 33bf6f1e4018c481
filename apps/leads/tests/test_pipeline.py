"""
Pipeline Mapping Tests
======================

Test Coverage:
1. phase_for_status - status folding into Kanban phases
2. status_for_phase - status written when a card is dropped
3. group_by_phase - column bucketing and ordering

Run tests:
    python manage.py test apps.leads.tests.test_pipeline
"""

from django.test import SimpleTestCase

from apps.leads import pipeline
from apps.leads.models import Lead


class PipelineMappingTest(SimpleTestCase):

    def test_phase_for_status(self):
        self.assertEqual(pipeline.phase_for_status('interest_shown'), 'initial_interest')
        self.assertEqual(pipeline.phase_for_status('post_visit_follow_up'), 'visit_scheduled')
        self.assertEqual(pipeline.phase_for_status('proposal_sent'), 'negotiation')
        self.assertEqual(pipeline.phase_for_status('contract_signed'), 'closing')

    def test_unknown_status_falls_back_to_first_phase(self):
        """
        Test: Funnel-only statuses (e.g. new_lead)

        Expected: Shown in the initial interest column
        """
        self.assertEqual(pipeline.phase_for_status('new_lead'), 'initial_interest')
        self.assertEqual(pipeline.phase_for_status(''), 'initial_interest')

    def test_status_for_phase(self):
        self.assertEqual(pipeline.status_for_phase('pre_qualification'), 'financially_qualified')
        self.assertEqual(pipeline.status_for_phase('closing'), 'documents_pending')

        with self.assertRaises(KeyError):
            pipeline.status_for_phase('won')

    def test_drop_status_is_a_valid_negotiation_status(self):
        valid = dict(Lead.NEGOTIATION_STATUS_CHOICES)
        for _phase, _label, status in pipeline.PHASES:
            self.assertIn(status, valid)

    def test_group_by_phase(self):
        """
        Test: Bucketing unsaved leads

        Expected: Five columns in pipeline order with matching counts
        """
        leads = [
            Lead(name='A', negotiation_status='visit_done'),
            Lead(name='B', negotiation_status='post_visit_follow_up'),
            Lead(name='C', negotiation_status='documents_pending'),
        ]

        columns = pipeline.group_by_phase(leads)

        self.assertEqual([c['phase'] for c in columns], [p for p, _l, _s in pipeline.PHASES])
        by_phase = {c['phase']: c for c in columns}
        self.assertEqual(by_phase['visit_scheduled']['count'], 2)
        self.assertEqual([lead.name for lead in by_phase['visit_scheduled']['leads']], ['A', 'B'])
        self.assertEqual(by_phase['closing']['count'], 1)
        self.assertEqual(by_phase['initial_interest']['count'], 0)
