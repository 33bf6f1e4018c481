import logging

from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.conf import settings

from .signals import group_name

logger = logging.getLogger(__name__)

# Close code for unauthenticated sockets (4000-4999 is application space)
UNAUTHORIZED = 4401


class TableChangesConsumer(AsyncJsonWebsocketConsumer):
    """
    ws/changes/

    Client frames:
        {"action": "subscribe", "table": "clients"}
        {"action": "unsubscribe", "table": "clients"}

    Server frames:
        {"type": "subscribed" | "unsubscribed", "table": ...}
        {"type": "change", "table": ..., "event": "insert" | "update" | "delete"}
        {"type": "error", "error": ...}
    """

    async def connect(self):
        user = self.scope.get('user')
        if user is None or not user.is_authenticated:
            await self.close(code=UNAUTHORIZED)
            return

        self.tables = set()
        await self.accept()

    async def disconnect(self, code):
        for table in getattr(self, 'tables', set()):
            await self.channel_layer.group_discard(group_name(table), self.channel_name)

    async def receive_json(self, content, **kwargs):
        if not isinstance(content, dict):
            await self._error('Expected a JSON object.')
            return

        action = content.get('action')
        table = content.get('table')

        if action not in ('subscribe', 'unsubscribe'):
            await self._error(f'Unknown action: {action}')
            return

        if table not in settings.CRM_WATCHED_TABLES:
            await self._error(f'Unknown table: {table}')
            return

        if action == 'subscribe':
            await self.channel_layer.group_add(group_name(table), self.channel_name)
            self.tables.add(table)
            await self.send_json({'type': 'subscribed', 'table': table})
        else:
            await self.channel_layer.group_discard(group_name(table), self.channel_name)
            self.tables.discard(table)
            await self.send_json({'type': 'unsubscribed', 'table': table})

    async def table_change(self, event):
        await self.send_json({
            'type': 'change',
            'table': event['table'],
            'event': event['event'],
        })

    async def _error(self, message):
        logger.debug("Rejected websocket frame: %s", message)
        await self.send_json({'type': 'error', 'error': message})
