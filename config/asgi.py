# config/asgi.py

import os
from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

django_asgi_app = get_asgi_application()

from django.apps import apps
from channels.routing import ProtocolTypeRouter, URLRouter
from channels.security.websocket import AllowedHostsOriginValidator
from messaging import routing as messaging_routing

"""
This file is the main entry-point for the server. It sends all
normal (HTTP) requests to Django, and all WebSocket requests to
the 'channels' routing system.
The chat socket authenticates itself from the handshake cookie or
header, so there is no session auth middleware on this stack.
RT: The messaging app's session registry is handed to the chat
routes here, so every connection shares it.
"""
application = ProtocolTypeRouter({
    "http": django_asgi_app,
    "websocket": AllowedHostsOriginValidator(
        URLRouter(
            messaging_routing.websocket_urlpatterns(apps.get_app_config('messaging').registry)
        )
    ),
})
