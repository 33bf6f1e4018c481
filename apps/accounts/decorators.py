# Access control for function views:
# 1. manager_required - managers (and superusers) only
# 2. owner_or_manager_required - the record's agent or a manager
# ==============================================================================

from functools import wraps
from django.shortcuts import redirect
from django.contrib import messages
from django.http import Http404, JsonResponse
from django.utils.translation import gettext_lazy as _

from apps.core.utils import is_ajax


def _deny(request, message):
    """AJAX -> JSON 403, regular request -> message + redirect to dashboard"""
    if is_ajax(request):
        return JsonResponse({'success': False, 'error': str(message)}, status=403)
    messages.error(request, message)
    return redirect('core:dashboard')


def manager_required(view_func):
    """
    Team-wide pages (manager dashboard, user management, reports).

    Anonymous users go to the login page; agents are sent back to their
    own dashboard.
    """

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            messages.error(request, _('Please login to continue.'))
            return redirect('accounts:login')

        if not request.user.is_manager():
            return _deny(request, _('Manager access required.'))

        return view_func(request, *args, **kwargs)

    return wrapper


def owner_or_manager_required(model_class, pk_param='pk', field_name='agent'):
    """
    Manager OR record owner can access

    User Type | Own Record | Other's Record
    ----------|------------|---------------
    Manager   | yes        | yes
    Agent     | yes        | 404

    Usage:
        @login_required
        @owner_or_manager_required(Lead, field_name='agent')
        def lead_edit_view(request, pk):
            ...
    """

    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return redirect('accounts:login')

            if not request.user.is_manager():
                owned = model_class.objects.filter(
                    pk=kwargs.get(pk_param), **{field_name: request.user}
                ).exists()
                if not owned:
                    raise Http404(f"{model_class.__name__} not found.")

            return view_func(request, *args, **kwargs)

        return wrapper

    return decorator
