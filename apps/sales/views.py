import csv
import logging

import openpyxl
from openpyxl.styles import Font, PatternFill
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.db.models import Sum
from django.http import HttpResponse, JsonResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_POST

from apps.core.utils import scope_to_user, is_ajax
from apps.leads.models import Lead
from .forms import SaleFinalizeForm, SaleFilterForm
from .models import SaleFinalized
from .services import finalize_sale, cancel_sale, ContractUploadError

logger = logging.getLogger(__name__)

EXPORT_HEADERS = ['ID', 'Client', 'Product', 'Sale Value', 'Completion Date', 'Agent', 'Contract', 'Notes']


def _visible_sales(user):
    return scope_to_user(SaleFinalized.objects.select_related('lead', 'agent', 'product'), user)


@login_required
def sale_list_view(request):
    filter_form = SaleFilterForm(request.GET or None)
    sales = filter_form.filter_queryset(_visible_sales(request.user))

    context = {
        'sales': sales,
        'total_value': sales.aggregate(total=Sum('sale_value'))['total'] or 0,
        'filter_form': filter_form,
        'watch_tables': 'sales_finalized',
        'active_page': 'sales',
    }
    return render(request, 'sales/sale_list.html', context)


@login_required
def sale_finalize_view(request, lead_pk):
    lead = get_object_or_404(scope_to_user(Lead.objects.all(), request.user), pk=lead_pk)

    if request.method == 'POST':
        form = SaleFinalizeForm(request.POST, request.FILES)

        if form.is_valid():
            data = form.cleaned_data
            try:
                finalize_sale(
                    lead,
                    request.user,
                    product_name=data['product'].title,
                    sale_value=data['sale_value'],
                    completion_date=data['completion_date'],
                    product=data['product'],
                    contract_file=data.get('contract'),
                    notes=data.get('notes', ''),
                )
            except ContractUploadError:
                messages.error(request, 'Could not upload the contract. The sale was not saved.')
            except Exception:
                logger.exception("Could not finalize sale for lead %s", lead_pk)
                messages.error(request, 'Could not finalize sale. Please try again.')
            else:
                messages.success(request, f'Sale for "{lead.name}" finalized')
                return redirect('sales:sale_list')
    else:
        initial = {}
        if request.GET.get('product'):
            initial['product'] = request.GET['product']
        form = SaleFinalizeForm(initial=initial)

    context = {
        'form': form,
        'lead': lead,
        'active_page': 'sales',
    }
    return render(request, 'sales/sale_finalize.html', context)


@login_required
@require_POST
def sale_cancel_view(request, pk):
    sale = get_object_or_404(_visible_sales(request.user), pk=pk)

    try:
        cancel_sale(sale, request.user)
    except Exception:
        logger.exception("Could not cancel sale %s", pk)
        if is_ajax(request):
            return JsonResponse({'success': False, 'error': 'Could not cancel sale'}, status=500)
        messages.error(request, 'Could not cancel sale.')
    else:
        if is_ajax(request):
            return JsonResponse({'success': True})
        messages.success(request, 'Sale canceled. The client is back in negotiation.')

    return redirect('sales:sale_list')


@login_required
def sale_export_view(request):
    export_format = request.GET.get('format', 'excel')

    filter_form = SaleFilterForm(request.GET or None)
    sales = filter_form.filter_queryset(_visible_sales(request.user))

    rows = [
        [
            sale.id,
            sale.client_name,
            sale.product_name,
            float(sale.sale_value),
            sale.completion_date.strftime('%Y-%m-%d'),
            sale.agent.get_full_name() if sale.agent else '',
            'Yes' if sale.contract else 'No',
            sale.notes,
        ]
        for sale in sales
    ]
    filename = f'sales_{timezone.now().strftime("%Y%m%d_%H%M%S")}'

    if export_format == 'excel':
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Sales"

        for col, header in enumerate(EXPORT_HEADERS, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = Font(bold=True, color="FFFFFF")
            cell.fill = PatternFill(start_color="667eea", end_color="667eea", fill_type="solid")

        for row in rows:
            ws.append(row)

        for col in ws.columns:
            max_length = max(len(str(cell.value or '')) for cell in col)
            ws.column_dimensions[col[0].column_letter].width = min(max_length + 2, 50)

        response = HttpResponse(
            content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        response['Content-Disposition'] = f'attachment; filename="{filename}.xlsx"'
        wb.save(response)
        return response

    elif export_format == 'csv':
        response = HttpResponse(content_type='text/csv; charset=utf-8')
        response['Content-Disposition'] = f'attachment; filename="{filename}.csv"'
        response.write('\ufeff')

        writer = csv.writer(response)
        writer.writerow(EXPORT_HEADERS)
        writer.writerows(rows)
        return response

    messages.error(request, 'Invalid export format')
    return redirect('sales:sale_list')
