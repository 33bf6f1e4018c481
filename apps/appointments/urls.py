from django.urls import path
from . import views

app_name = 'appointments'

urlpatterns = [
    path('', views.appointment_list_view, name='appointment_list'),
    path('json/', views.appointment_json_view, name='appointment_json'),
    path('create/', views.appointment_create_view, name='appointment_create'),
    path('<int:pk>/edit/', views.appointment_edit_view, name='appointment_edit'),
    path('<int:pk>/cancel/', views.appointment_cancel_view, name='appointment_cancel'),
    path('<int:pk>/complete/', views.appointment_complete_view, name='appointment_complete'),
]
