"""
Dashboard metrics
=================

Agent dashboard (role scoped):
    agent_kpis, sales_funnel, recent_activities

Manager dashboard (team wide):
    agent_performance, team_totals, underperforming_agents
"""

from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Count, Sum
from django.utils import timezone

from apps.documents.models import ClientDocument
from apps.leads.models import Lead, Activity
from apps.sales.models import SaleFinalized
from .utils import scope_to_user

User = get_user_model()

ALERT_THRESHOLD = 20
EXCELLENT_THRESHOLD = 25


def _rate(part, whole):
    return round(part / whole * 100, 1) if whole else 0.0


# AGENT DASHBOARD
def agent_kpis(user):
    """
    Headline numbers for the dashboard cards.

    Returns:
        dict with active_leads, proposals, total_sales (Decimal),
        pending_documents, conversion_rate and performance_score
    """
    leads = scope_to_user(Lead.objects.all(), user)

    total_leads = leads.count()
    completed = leads.filter(negotiation_status='sale_completed').count()
    active_leads = leads.exclude(negotiation_status='sale_completed').filter(disqualified=False).count()
    proposals = leads.filter(negotiation_status='proposal_sent').count()

    total_sales = scope_to_user(SaleFinalized.objects.all(), user).aggregate(
        total=Sum('sale_value')
    )['total'] or Decimal('0')

    pending_documents = scope_to_user(
        ClientDocument.objects.filter(status='pending'), user, field='lead__agent'
    ).count()

    conversion_rate = _rate(completed, total_leads)
    performance_score = round(
        min(10, conversion_rate / 10 + float(total_sales) / 100000 + active_leads / 50), 1
    )

    return {
        'total_leads': total_leads,
        'active_leads': active_leads,
        'proposals': proposals,
        'total_sales': total_sales,
        'pending_documents': pending_documents,
        'conversion_rate': conversion_rate,
        'performance_score': performance_score,
    }


def sales_funnel(user):
    """One entry per funnel status, in funnel order, with count and whole-number percentage"""
    leads = scope_to_user(Lead.objects.all(), user)
    total = leads.count()

    counts = dict(
        leads.values_list('negotiation_status').annotate(count=Count('id')).order_by()
    )

    return [
        {
            'status': status,
            'label': label,
            'count': counts.get(status, 0),
            'percentage': round(counts.get(status, 0) / total * 100) if total else 0,
        }
        for status, label in Lead.FUNNEL_STATUSES
    ]


def recent_activities(user, limit=None):
    if limit is None:
        limit = settings.CRM_RECENT_ACTIVITY_LIMIT

    activities = Activity.objects.select_related('lead', 'user')
    if not user.is_manager():
        activities = activities.filter(user=user)

    return list(activities[:limit])


# MANAGER DASHBOARD
def performance_label(conversion_rate):
    if conversion_rate >= EXCELLENT_THRESHOLD:
        return 'Excellent'
    if conversion_rate >= ALERT_THRESHOLD:
        return 'Good'
    return 'Below average'


def _average(values):
    values = [v for v in values if v is not None]
    return round(sum(values) / len(values), 1) if values else None


def agent_performance(period_days=None, agent=None, product_type=None):
    """
    Per-agent rows for the manager dashboard.

    Args:
        period_days: only leads created / sales completed in the last N days (None = all time)
        agent: restrict to one agent
        product_type: only sales of products of this type

    Returns:
        list of dicts, best conversion rate first
    """
    agents = User.objects.agents()
    if agent is not None:
        agents = agents.filter(pk=agent.pk)

    since = timezone.now() - timedelta(days=period_days) if period_days else None

    rows = []
    for member in agents.order_by('first_name', 'last_name', 'email'):
        leads = Lead.objects.filter(agent=member)
        sales = SaleFinalized.objects.filter(agent=member).select_related('lead')

        if since is not None:
            leads = leads.filter(created_at__gte=since)
            sales = sales.filter(completion_date__gte=timezone.localdate(since))
        if product_type:
            sales = sales.filter(product__product_type=product_type)

        leads_count = leads.count()
        conversions_count = sales.count()
        total_sales = sales.aggregate(total=Sum('sale_value'))['total'] or Decimal('0')
        conversion_rate = _rate(conversions_count, leads_count)

        closing_days = [
            (sale.completion_date - timezone.localdate(sale.lead.created_at)).days
            for sale in sales if sale.lead is not None
        ]

        top_product = (
            sales.values('product_name')
            .annotate(count=Count('id'))
            .order_by('-count', 'product_name')
            .first()
        )

        rows.append({
            'agent': member,
            'agent_name': member.get_full_name(),
            'leads_count': leads_count,
            'conversions_count': conversions_count,
            'total_sales': total_sales,
            'conversion_rate': conversion_rate,
            'avg_closing_days': _average(closing_days),
            'most_sold_product': top_product['product_name'] if top_product else None,
            'label': performance_label(conversion_rate),
        })

    rows.sort(key=lambda row: row['conversion_rate'], reverse=True)
    return rows


def team_totals(rows):
    return {
        'total_sales': sum((row['total_sales'] for row in rows), Decimal('0')),
        'total_conversions': sum(row['conversions_count'] for row in rows),
        'total_leads': sum(row['leads_count'] for row in rows),
        'avg_conversion_rate': _average([row['conversion_rate'] for row in rows]) or 0.0,
        'avg_closing_days': _average([row['avg_closing_days'] for row in rows]),
    }


def underperforming_agents(rows):
    """Agents under the alert threshold"""
    return [row for row in rows if row['conversion_rate'] < ALERT_THRESHOLD]
