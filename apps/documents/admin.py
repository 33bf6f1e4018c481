from django.contrib import admin

from .models import ClientDocument


@admin.register(ClientDocument)
class ClientDocumentAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'lead', 'document_type', 'status', 'due_date', 'received_at', 'approved_at']
    list_filter = ['status', 'document_type', 'due_date']
    search_fields = ['name', 'lead__name', 'notes']
    ordering = ['due_date']
    list_per_page = 50
    readonly_fields = ['received_at', 'approved_at', 'created_at', 'updated_at']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('lead')
