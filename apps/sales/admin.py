from django.contrib import admin

from .models import SaleFinalized


@admin.register(SaleFinalized)
class SaleFinalizedAdmin(admin.ModelAdmin):
    list_display = ['id', 'client_name', 'product_name', 'sale_value', 'completion_date', 'agent']
    list_filter = ['completion_date', 'agent']
    search_fields = ['product_name', 'lead__name', 'notes']
    ordering = ['-completion_date']
    date_hierarchy = 'completion_date'
    list_per_page = 50
    readonly_fields = ['created_at']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('lead', 'agent')
