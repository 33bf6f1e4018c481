from django.urls import path
from . import views

app_name = 'sales'

urlpatterns = [
    path('', views.sale_list_view, name='sale_list'),
    path('export/', views.sale_export_view, name='sale_export'),
    path('finalize/<int:lead_pk>/', views.sale_finalize_view, name='sale_finalize'),
    path('<int:pk>/cancel/', views.sale_cancel_view, name='sale_cancel'),
]
