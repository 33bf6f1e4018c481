from django.urls import path
from . import views


app_name = 'core'

urlpatterns = [
    path('', views.dashboard_view, name='dashboard'),
    path('kpis/', views.kpis_json_view, name='kpis_json'),
    path('funnel/', views.funnel_json_view, name='funnel_json'),
    path('activities/', views.activities_json_view, name='activities_json'),
    path('manager/', views.manager_dashboard_view, name='manager_dashboard'),
    path('manager/report/', views.manager_report_export_view, name='manager_report'),
]
