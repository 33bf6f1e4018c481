from django.contrib import admin

from .models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'lead', 'agent', 'date_time', 'status', 'reminder_sent']
    list_filter = ['status', 'reminder_sent', 'agent', 'date_time']
    search_fields = ['title', 'location', 'lead__name']
    ordering = ['-date_time']
    date_hierarchy = 'date_time'
    list_per_page = 50
    readonly_fields = ['created_at', 'updated_at']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('lead', 'agent')
