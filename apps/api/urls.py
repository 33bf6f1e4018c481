from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

app_name = 'api'

router = DefaultRouter()
router.register('clients', views.LeadViewSet, basename='clients')
router.register('appointments', views.AppointmentViewSet, basename='appointments')
router.register('client_documents', views.ClientDocumentViewSet, basename='client_documents')
router.register('sales_finalized', views.SaleFinalizedViewSet, basename='sales_finalized')
router.register('activities', views.ActivityViewSet, basename='activities')
router.register('products', views.ProductViewSet, basename='products')

urlpatterns = [
    path('', include(router.urls)),
]
