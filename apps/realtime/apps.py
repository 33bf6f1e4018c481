from django.apps import AppConfig


class RealtimeConfig(AppConfig):
    """
    Change notifications over websockets

    Every write on a watched table is announced to the
    channels group "table.<db_table>" once the transaction commits.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.realtime'
    verbose_name = 'Realtime'

    def ready(self):
        from .signals import connect_watched_models
        connect_watched_models()
