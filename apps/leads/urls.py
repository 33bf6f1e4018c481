from django.urls import path
from . import views

app_name = 'leads'

urlpatterns = [
    path('', views.lead_list_view, name='lead_list'),
    path('pipeline/', views.lead_pipeline_view, name='lead_pipeline'),
    path('create/', views.lead_create_view, name='lead_create'),
    path('export/', views.lead_export_view, name='lead_export'),
    path('<int:pk>/', views.lead_detail_view, name='lead_detail'),
    path('<int:pk>/edit/', views.lead_edit_view, name='lead_edit'),
    path('<int:pk>/delete/', views.lead_delete_view, name='lead_delete'),
    path('<int:pk>/qualify/', views.lead_qualify_view, name='lead_qualify'),
    path('<int:pk>/disqualify/', views.lead_disqualify_view, name='lead_disqualify'),
    path('<int:pk>/requalify/', views.lead_requalify_view, name='lead_requalify'),
    path('<int:pk>/change-status/', views.lead_change_status_view, name='lead_change_status'),
    path('<int:pk>/move/', views.lead_move_view, name='lead_move'),
    path('<int:pk>/call/', views.lead_call_view, name='lead_call'),
    path('<int:pk>/email/', views.lead_email_view, name='lead_email'),
    path('<int:pk>/activities/', views.lead_activities_view, name='lead_activities'),
    path('<int:pk>/json/', views.lead_json_view, name='lead_json'),
]
