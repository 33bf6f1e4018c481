import logging

import openpyxl
from openpyxl.styles import Font, PatternFill
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.shortcuts import render
from django.utils import timezone

from apps.accounts.decorators import manager_required
from . import metrics
from .forms import ManagerDashboardFilterForm

logger = logging.getLogger(__name__)

REPORT_HEADERS = [
    'Agent', 'Leads', 'Conversions', 'Total Sales', 'Conversion Rate (%)',
    'Avg Closing (days)', 'Most Sold Product', 'Status',
]


def _activity_to_dict(activity):
    return {
        'id': activity.id,
        'type': activity.activity_type,
        'type_display': activity.get_activity_type_display(),
        'description': activity.description,
        'lead': {'id': activity.lead_id, 'name': activity.lead.name} if activity.lead else None,
        'user': activity.user.get_full_name() if activity.user else None,
        'created_at': activity.created_at.isoformat(),
    }


@login_required
def dashboard_view(request):
    """
    Main dashboard
    - Agent: own KPIs, funnel and activity
    - Manager: the same numbers company-wide
    """
    try:
        kpis = metrics.agent_kpis(request.user)
        funnel = metrics.sales_funnel(request.user)
        activities = metrics.recent_activities(request.user)
    except Exception:
        logger.exception("Could not load dashboard for user %s", request.user.pk)
        messages.error(request, 'Could not load dashboard data.')
        kpis, funnel, activities = {}, [], []

    context = {
        'kpis': kpis,
        'funnel': funnel,
        'activities': activities,
        'stats_label': 'Company' if request.user.is_manager() else 'My',
        'watch_tables': 'clients,sales_finalized,client_documents,activities',
        'active_page': 'dashboard',
    }
    return render(request, 'core/dashboard.html', context)


@login_required
def kpis_json_view(request):
    kpis = metrics.agent_kpis(request.user)
    kpis['total_sales'] = float(kpis['total_sales'])
    return JsonResponse(kpis)


@login_required
def funnel_json_view(request):
    return JsonResponse({'funnel': metrics.sales_funnel(request.user)})


@login_required
def activities_json_view(request):
    return JsonResponse({
        'activities': [_activity_to_dict(a) for a in metrics.recent_activities(request.user)],
    })


@login_required
@manager_required
def manager_dashboard_view(request):
    filter_form = ManagerDashboardFilterForm(request.GET or None)
    filters = filter_form.get_filters()

    rows = metrics.agent_performance(**filters)

    context = {
        'filter_form': filter_form,
        'rows': rows,
        'totals': metrics.team_totals(rows),
        'alerts': metrics.underperforming_agents(rows),
        'watch_tables': 'clients,sales_finalized',
        'active_page': 'manager_dashboard',
    }
    return render(request, 'core/manager_dashboard.html', context)


@login_required
@manager_required
def manager_report_export_view(request):
    """Team performance report as .xlsx, same filters as the dashboard"""
    filter_form = ManagerDashboardFilterForm(request.GET or None)
    rows = metrics.agent_performance(**filter_form.get_filters())
    totals = metrics.team_totals(rows)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Team Performance"

    for col, header in enumerate(REPORT_HEADERS, start=1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = PatternFill(start_color="667eea", end_color="667eea", fill_type="solid")

    for row in rows:
        ws.append([
            row['agent_name'],
            row['leads_count'],
            row['conversions_count'],
            float(row['total_sales']),
            row['conversion_rate'],
            row['avg_closing_days'],
            row['most_sold_product'] or '',
            row['label'],
        ])

    ws.append([])
    ws.append([
        'Team',
        totals['total_leads'],
        totals['total_conversions'],
        float(totals['total_sales']),
        totals['avg_conversion_rate'],
        totals['avg_closing_days'],
    ])
    ws.cell(row=ws.max_row, column=1).font = Font(bold=True)

    for col in ws.columns:
        max_length = max(len(str(cell.value or '')) for cell in col)
        ws.column_dimensions[col[0].column_letter].width = min(max_length + 2, 50)

    response = HttpResponse(
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    filename = f'team_performance_{timezone.now().strftime("%Y%m%d_%H%M%S")}.xlsx'
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    wb.save(response)
    return response
