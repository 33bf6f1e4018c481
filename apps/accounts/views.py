import logging

from django.shortcuts import render, redirect, get_object_or_404
from django.contrib.auth import authenticate, login, logout, update_session_auth_hash
from django.contrib.auth.decorators import login_required
from django.contrib import messages
from django.contrib.auth.forms import PasswordChangeForm
from django.core.paginator import Paginator
from django.db.models import Count, DecimalField, OuterRef, Subquery, Sum, Value
from django.db.models.functions import Coalesce
from django.http import JsonResponse, HttpResponseForbidden
from django.utils.http import url_has_allowed_host_and_scheme
from django.utils.translation import gettext_lazy as _
from django.views.decorators.http import require_POST
from django.views.decorators.cache import never_cache

from apps.sales.models import SaleFinalized
from .models import User
from .forms import LoginForm, UserEditForm, UserCreateForm, UserFilterForm
from .decorators import manager_required

logger = logging.getLogger(__name__)

REMEMBER_ME_SECONDS = 30 * 24 * 60 * 60


def _safe_next(request):
    next_url = request.GET.get('next')
    if next_url and url_has_allowed_host_and_scheme(
        next_url, allowed_hosts={request.get_host()}, require_https=request.is_secure()
    ):
        return next_url
    return None


def _render_user_form(request, form, title, **extra):
    context = {'form': form, 'form_title': title, 'page_title': title, **extra}
    return render(request, 'accounts/user_form.html', context)


# AUTHENTICATION
@never_cache
def login_view(request):
    if request.user.is_authenticated:
        return redirect('core:dashboard')

    form = LoginForm(request.POST or None)

    if request.method == 'POST':
        if not form.is_valid():
            messages.error(request, _('Please correct the errors below.'))
        else:
            user = authenticate(request, username=form.cleaned_data['email'], password=form.cleaned_data['password'])

            if user is None:
                logger.warning("Failed login for %s", form.cleaned_data['email'])
                messages.error(request, _('Invalid email or password. Please try again.'))
            else:
                login(request, user)
                # 0 = until the browser closes
                request.session.set_expiry(REMEMBER_ME_SECONDS if form.cleaned_data.get('remember') else 0)

                logger.info("User %s logged in", user.email)
                messages.success(request, _('Welcome back, {}!').format(user.get_full_name()))
                return redirect(_safe_next(request) or 'core:dashboard')

    return render(request, 'accounts/login.html', {'form': form, 'page_title': _('Login')})


@login_required
def logout_view(request):
    user_name = request.user.get_full_name()
    logout(request)
    messages.success(request, _('You have been logged out. See you soon, {}!').format(user_name))
    return redirect('accounts:login')


# PROFILE
@login_required
def profile_view(request):
    user = request.user

    context = {
        'user': user,
        'leads_count': user.leads.count(),
        'sales_count': user.sales.count(),
        'sales_value': user.sales.aggregate(total=Sum('sale_value'))['total'] or 0,
        'recent_activities': user.activities.select_related('lead')[:5],
        'page_title': _('My Profile'),
    }

    return render(request, 'accounts/profile.html', context)


@login_required
def profile_edit_view(request):
    form = UserEditForm(request.POST or None, instance=request.user)

    if request.method == 'POST':
        if form.is_valid():
            form.save()
            messages.success(request, _('Your profile has been updated.'))
            return redirect('accounts:profile')
        messages.error(request, _('Please correct the errors below.'))

    return _render_user_form(request, form, _('Edit Profile'))


@login_required
def password_change_view(request):
    form = PasswordChangeForm(user=request.user, data=request.POST or None)

    if request.method == 'POST':
        if form.is_valid():
            user = form.save()
            update_session_auth_hash(request, user)
            messages.success(request, _('Your password has been changed.'))
            return redirect('accounts:profile')
        messages.error(request, _('Please correct the errors below.'))

    return _render_user_form(request, form, _('Change Password'))


# TEAM MANAGEMENT (managers)
@login_required
@manager_required
def user_list_view(request):
    sales_value = SaleFinalized.objects.filter(agent=OuterRef('pk')).values('agent').annotate(
        total=Sum('sale_value')
    ).values('total')

    users = User.objects.annotate(
        leads_total=Count('leads', distinct=True),
        sales_total=Count('sales', distinct=True),
        sales_value=Coalesce(
            Subquery(sales_value, output_field=DecimalField(max_digits=14, decimal_places=2)),
            Value(0, output_field=DecimalField(max_digits=14, decimal_places=2)),
        ),
    )

    filter_form = UserFilterForm(request.GET or None)
    users = filter_form.filter_queryset(users)

    page_obj = Paginator(users, 25).get_page(request.GET.get('page', 1))

    context = {
        'filter_form': filter_form,
        'users': page_obj,
        'page_obj': page_obj,
        'total_users': page_obj.paginator.count,
        'page_title': _('Users'),
    }

    return render(request, 'accounts/user_list.html', context)


@login_required
@manager_required
def user_create_view(request):
    form = UserCreateForm(request.POST or None)

    if request.method == 'POST':
        if form.is_valid():
            user = form.save()
            logger.info("User %s (%s) created by %s", user.email, user.role, request.user.email)
            messages.success(request, _('User {} created.').format(user.get_full_name()))
            return redirect('accounts:user_list')
        messages.error(request, _('Please correct the errors below.'))

    return _render_user_form(request, form, _('Create User'))


@login_required
def user_edit_view(request, pk):
    edited_user = get_object_or_404(User, pk=pk)

    is_manager = request.user.is_manager()
    if not (is_manager or edited_user == request.user):
        return HttpResponseForbidden(_('You do not have permission to edit this user.'))

    form = UserEditForm(request.POST or None, instance=edited_user, can_edit_all_fields=is_manager)

    if request.method == 'POST':
        if form.is_valid():
            form.save()
            messages.success(request, _('User updated.'))
            return redirect('accounts:user_list' if is_manager else 'accounts:profile')
        messages.error(request, _('Please correct the errors below.'))

    return _render_user_form(
        request, form, _('Edit {}').format(edited_user.get_full_name()), edited_user=edited_user
    )


@login_required
@manager_required
@require_POST
def toggle_user_status(request, pk):
    """Activate / deactivate an account; inactive agents drop out of the team dashboard"""
    target = get_object_or_404(User, pk=pk)

    if target == request.user:
        return JsonResponse({'success': False, 'error': 'Cannot deactivate yourself'}, status=400)

    if target.is_superuser and not request.user.is_superuser:
        return JsonResponse({'success': False, 'error': 'Cannot deactivate superuser'}, status=403)

    target.is_active = not target.is_active
    target.save(update_fields=['is_active', 'updated_at'])
    logger.info("User %s %s by %s", target.email, 'activated' if target.is_active else 'deactivated', request.user.email)

    return JsonResponse({
        'success': True,
        'is_active': target.is_active,
        'message': str(_('User activated') if target.is_active else _('User deactivated')),
    })
