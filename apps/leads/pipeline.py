"""
Qualified-leads pipeline (Kanban)

Five phases; several negotiation statuses fold into each phase and a
card dropped on a phase is written back with that phase's status.
"""

PHASES = [
    # (phase, label, status written on drop)
    ('initial_interest', 'Initial interest', 'interest_shown'),
    ('pre_qualification', 'Pre-qualification', 'financially_qualified'),
    ('visit_scheduled', 'Visit scheduled', 'visit_done'),
    ('negotiation', 'Negotiation', 'negotiation_in_progress'),
    ('closing', 'Closing', 'documents_pending'),
]

DEFAULT_PHASE = 'initial_interest'

STATUS_TO_PHASE = {
    'interest_shown': 'initial_interest',
    'financially_qualified': 'pre_qualification',
    'visit_done': 'visit_scheduled',
    'post_visit_follow_up': 'visit_scheduled',
    'negotiation_in_progress': 'negotiation',
    'proposal_sent': 'negotiation',
    'documents_pending': 'closing',
    'contract_signed': 'closing',
}

PHASE_TO_STATUS = {phase: status for phase, _label, status in PHASES}


def phase_for_status(negotiation_status):
    return STATUS_TO_PHASE.get(negotiation_status, DEFAULT_PHASE)


def status_for_phase(phase):
    """Status to store when a card lands on `phase`; KeyError for unknown phases"""
    return PHASE_TO_STATUS[phase]


def group_by_phase(leads):
    """
    Bucket leads into the five columns, preserving the incoming order.

    Returns:
        list of {'phase', 'label', 'leads', 'count'} in pipeline order
    """
    buckets = {phase: [] for phase, _label, _status in PHASES}
    for lead in leads:
        buckets[phase_for_status(lead.negotiation_status)].append(lead)

    return [
        {
            'phase': phase,
            'label': label,
            'leads': buckets[phase],
            'count': len(buckets[phase]),
        }
        for phase, label, _status in PHASES
    ]
