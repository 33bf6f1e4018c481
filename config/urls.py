from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from django.shortcuts import redirect

# Main URL Configuration
# Routes all requests to appropriate apps

urlpatterns = [

    path('admin/', admin.site.urls),
    path('accounts/', include('apps.accounts.urls')),
    path('dashboard/', include('apps.core.urls')),
    path('', lambda request: redirect('core:dashboard') if request.user.is_authenticated else redirect('accounts:login')),
    path('leads/', include('apps.leads.urls')),
    path('appointments/', include('apps.appointments.urls')),
    path('documents/', include('apps.documents.urls')),
    path('sales/', include('apps.sales.urls')),
    path('products/', include('apps.products.urls')),
    path('api/', include('apps.api.urls')),

]

if settings.DEBUG:
    # Media files (contracts, client documents, product photos)
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

    # Static files (CSS, JS, images)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
