# messaging/routing.py

# Import re_path from django.urls because it's used to define URL patterns with regular expressions for WebSockets.
from django.urls import re_path
# Import consumers from . because the patterns need the ChatConsumer.
from . import consumers

"""
Builds the WebSocket addresses the messaging app listens on. The
session registry is passed in so every ChatConsumer instance shares
the same one ('/ws/chat/' is the single chat socket per tab).
RT: This is the routing configuration for real-time messaging.
"""
def websocket_urlpatterns(registry):
    return [
        re_path(r'ws/chat/$', consumers.ChatConsumer.as_asgi(registry=registry)),
    ]
