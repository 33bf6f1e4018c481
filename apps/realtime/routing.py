from django.urls import path

from . import consumers

websocket_urlpatterns = [
    path('ws/changes/', consumers.TableChangesConsumer.as_asgi()),
]
