from django.apps import AppConfig


class CoreConfig(AppConfig):
    """
    Configuration for Core application

    This app contains:
        - Role-scoping helpers shared by every app
        - Agent dashboard (KPIs, sales funnel, activity feed)
        - Manager dashboard (team performance, alerts, report export)

    It owns no models; metrics are computed from the leads, sales and
    documents apps.
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Core'
