from django.urls import path
from . import views

app_name = 'documents'

urlpatterns = [
    path('', views.document_list_view, name='document_list'),
    path('lead/<int:lead_pk>/', views.lead_checklist_view, name='lead_checklist'),
    path('lead/<int:lead_pk>/add/', views.document_add_view, name='document_add'),
    path('lead/<int:lead_pk>/upload/', views.document_upload_view, name='document_upload'),
    path('<int:pk>/status/', views.document_set_status_view, name='document_set_status'),
    path('<int:pk>/delete/', views.document_delete_view, name='document_delete'),
]
