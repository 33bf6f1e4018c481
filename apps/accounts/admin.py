from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _
from django.utils.html import format_html
from django.db.models import Count
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = (
        'email',
        'get_full_name_display',
        'role_badge',
        'leads_count',
        'sales_count',
        'is_active',
        'date_joined',
    )
    list_display_links = ('email', 'get_full_name_display')
    list_filter = ('role', 'is_active', 'is_staff', 'is_superuser', 'date_joined')
    search_fields = ('email', 'first_name', 'last_name', 'phone')
    ordering = ('-date_joined',)
    list_per_page = 25

    fieldsets = (
        (_('Login Credentials'), {
            'fields': ('email', 'password'),
            'description': _('Email is used for login. Password is stored encrypted.')
        }),
        (_('Personal Information'), {
            'fields': ('first_name', 'last_name', 'phone'),
        }),
        (_('Role'), {
            'fields': ('role',),
            'description': _('Managers see every record, agents only their own')
        }),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'first_name', 'last_name', 'role', 'password1', 'password2'),
        }),
    )

    readonly_fields = ('date_joined', 'last_login')

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(
            _leads_count=Count('leads', distinct=True),
            _sales_count=Count('sales', distinct=True),
        )

    @admin.display(description=_('Leads'), ordering='_leads_count')
    def leads_count(self, obj):
        return obj._leads_count

    @admin.display(description=_('Sales'), ordering='_sales_count')
    def sales_count(self, obj):
        return obj._sales_count

    def get_full_name_display(self, obj):
        return obj.get_full_name()
    get_full_name_display.short_description = _('Name')

    def role_badge(self, obj):
        colors = {
            User.ROLE_MANAGER: '#667eea',
            User.ROLE_AGENT: '#28a745',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            colors.get(obj.role, '#6c757d'),
            obj.get_role_display()
        )
    role_badge.short_description = _('Role')
