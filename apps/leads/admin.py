from django.contrib import admin
from django.utils.html import format_html

from .models import Lead, Activity


NEGOTIATION_COLORS = {
    'new_lead': '#17a2b8',
    'contact_made': '#6f42c1',
    'visit_scheduled': '#fd7e14',
    'proposal_sent': '#ffc107',
    'in_negotiation': '#667eea',
    'contract_signed': '#20c997',
    'sale_completed': '#28a745',
}


class ActivityInline(admin.TabularInline):

    model = Activity
    extra = 0  # entries are written by the application
    readonly_fields = ['user', 'activity_type', 'description', 'created_at']
    fields = ['created_at', 'user', 'activity_type', 'description']
    classes = ['collapse']
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('user')


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):

    list_display = [
        'id',
        'name',
        'phone',
        'email',
        'negotiation_badge',
        'status',
        'qualification_display',
        'agent_display',
        'created_at_display',
    ]

    list_filter = [
        'negotiation_status',
        'status',
        'source',
        'qualified',
        'disqualified',
        'agent',
        'created_at',
    ]

    search_fields = ['name', 'phone', 'email', 'notes']

    ordering = ['-created_at']
    list_per_page = 50
    date_hierarchy = 'created_at'

    fieldsets = [
        ('Basic Information', {
            'fields': ['name', 'phone', 'email']
        }),
        ('Classification', {
            'fields': ['status', 'negotiation_status', 'source', 'agent']
        }),
        ('Qualification', {
            'fields': ['qualified', 'disqualified', 'disqualification_reason', 'disqualification_notes']
        }),
        ('Profile', {
            'fields': ['monthly_income', 'profession', 'desired_property_type', 'interest_location'],
            'classes': ['collapse'],
        }),
        ('Additional Info', {
            'fields': ['notes', 'tags'],
            'classes': ['collapse'],
        }),
        ('Timestamps', {
            'fields': ['created_at', 'updated_at'],
            'classes': ['collapse'],
        }),
    ]

    readonly_fields = ['created_at', 'updated_at']
    inlines = [ActivityInline]

    def negotiation_badge(self, obj):
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            NEGOTIATION_COLORS.get(obj.negotiation_status, '#6c757d'),
            obj.get_negotiation_status_display()
        )
    negotiation_badge.short_description = 'Negotiation'

    def qualification_display(self, obj):
        if obj.disqualified:
            return format_html('<span style="color: #dc3545;">Disqualified</span>')
        if obj.qualified:
            return format_html('<span style="color: #28a745;">Qualified</span>')
        return format_html('<span style="color: #999;">Unqualified</span>')
    qualification_display.short_description = 'Qualification'

    def agent_display(self, obj):
        if obj.agent:
            return format_html(
                '<span style="background-color: #667eea; color: white; '
                'padding: 2px 6px; border-radius: 50%; font-size: 10px; '
                'margin-right: 5px;">{}</span> {}',
                obj.agent.get_initials(),
                obj.agent.get_full_name()
            )
        return format_html('<span style="color: #999;">Unassigned</span>')
    agent_display.short_description = 'Agent'

    def created_at_display(self, obj):
        return format_html(
            '<span title="{}">{}</span>',
            obj.created_at.strftime('%Y-%m-%d %H:%M:%S'),
            obj.time_since_created()
        )
    created_at_display.short_description = 'Created'

    actions = ['mark_as_qualified']

    def mark_as_qualified(self, request, queryset):
        leads = list(queryset)
        for lead in leads:
            lead.qualify(user=request.user)
        self.message_user(request, f'Qualified {len(leads)} leads')
    mark_as_qualified.short_description = 'Mark as qualified'

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('agent')


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ['id', 'lead', 'user', 'activity_type', 'description', 'created_at']
    list_filter = ['activity_type', 'created_at', 'user']
    search_fields = ['description', 'lead__name', 'lead__phone']
    ordering = ['-created_at']
    list_per_page = 100
    readonly_fields = ['lead', 'user', 'activity_type', 'description', 'created_at']

    # Append-only log
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('lead', 'user')
