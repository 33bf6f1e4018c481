import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.apps import apps
from django.conf import settings
from django.db import transaction
from django.db.models.signals import post_save, post_delete

logger = logging.getLogger(__name__)

GROUP_PREFIX = 'table.'


def group_name(table):
    return f'{GROUP_PREFIX}{table}'


def broadcast_change(table, event):
    """
    Announce a change on `table` after the current transaction commits.

    Only the table name and the event kind travel over the wire;
    subscribers refetch through their own role-scoped endpoints.
    """

    def send():
        try:
            channel_layer = get_channel_layer()
            if channel_layer is None:
                return
            async_to_sync(channel_layer.group_send)(group_name(table), {
                'type': 'table.change',
                'table': table,
                'event': event,
            })
        except Exception:
            # A broken channel layer must never fail the write
            logger.exception("Could not broadcast %s on %s", event, table)

    transaction.on_commit(send)


def model_saved(sender, instance, created, **kwargs):
    broadcast_change(sender._meta.db_table, 'insert' if created else 'update')


def model_deleted(sender, instance, **kwargs):
    broadcast_change(sender._meta.db_table, 'delete')


def connect_watched_models():
    """Hook post_save / post_delete on every model whose table is in CRM_WATCHED_TABLES"""
    watched = set(settings.CRM_WATCHED_TABLES)

    for model in apps.get_models():
        table = model._meta.db_table
        if table not in watched:
            continue

        post_save.connect(model_saved, sender=model, dispatch_uid=f'realtime_saved_{table}')
        post_delete.connect(model_deleted, sender=model, dispatch_uid=f'realtime_deleted_{table}')
        logger.debug("Broadcasting changes for table %s", table)
