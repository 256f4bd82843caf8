# messaging/apps.py

# Import AppConfig from django.apps because it's the base class for a Django app configuration.
from django.apps import AppConfig

"""
This class tells Django that an app named "messaging" exists.
This app handles direct messages, typing indicators and presence.
It also owns the single SessionRegistry for the process: the ASGI
routing hands it to every chat consumer, and the REST views use it
to push messages to live sessions.
RT: This app contains the WebSocket consumer for real-time chat.
"""
class MessagingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'messaging'

    def ready(self):
        from .registry import SessionRegistry
        self.registry = SessionRegistry()
