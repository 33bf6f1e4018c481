import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.paginator import Paginator
from django.http import JsonResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.views.decorators.http import require_POST

from apps.accounts.decorators import owner_or_manager_required
from apps.core.utils import scope_to_user, is_ajax
from .forms import ProductForm, ProductFilterForm
from .models import Product

logger = logging.getLogger(__name__)


def _visible_products(user):
    return scope_to_user(Product.objects.select_related('agent'), user)


@login_required
def product_list_view(request):
    filter_form = ProductFilterForm(request.GET or None)
    products = filter_form.filter_queryset(_visible_products(request.user))

    paginator = Paginator(products, 24)
    page_obj = paginator.get_page(request.GET.get('page', 1))

    context = {
        'products': page_obj,
        'page_obj': page_obj,
        'filter_form': filter_form,
        'total_count': paginator.count,
        'watch_tables': 'products',
        'active_page': 'products',
    }
    return render(request, 'products/product_list.html', context)


@login_required
def product_create_view(request):
    if request.method == 'POST':
        form = ProductForm(request.POST, request.FILES)

        if form.is_valid():
            try:
                product = form.save(commit=False)
                product.agent = request.user
                product.save()
            except Exception:
                logger.exception("Could not create product for user %s", request.user.pk)
                messages.error(request, 'Could not save product. Please try again.')
            else:
                messages.success(request, f'Product "{product.title}" created')
                return redirect('products:product_list')
    else:
        form = ProductForm()

    return render(request, 'products/product_form.html', {
        'form': form,
        'form_title': 'New Product',
        'active_page': 'products',
    })


@login_required
@owner_or_manager_required(Product)
def product_edit_view(request, pk):
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'POST':
        form = ProductForm(request.POST, request.FILES, instance=product)

        if form.is_valid():
            try:
                form.save()
            except Exception:
                logger.exception("Could not update product %s", pk)
                messages.error(request, 'Could not save product. Please try again.')
            else:
                messages.success(request, f'Product "{product.title}" updated')
                return redirect('products:product_list')
    else:
        form = ProductForm(instance=product)

    return render(request, 'products/product_form.html', {
        'form': form,
        'product': product,
        'form_title': f'Edit: {product.title}',
        'active_page': 'products',
    })


@login_required
@owner_or_manager_required(Product)
@require_POST
def product_delete_view(request, pk):
    product = get_object_or_404(Product, pk=pk)
    title = product.title

    try:
        product.delete()
    except Exception:
        logger.exception("Could not delete product %s", pk)
        messages.error(request, 'Could not delete product.')
        return redirect('products:product_list')

    if is_ajax(request):
        return JsonResponse({'success': True})

    messages.success(request, f'Product "{title}" deleted')
    return redirect('products:product_list')
