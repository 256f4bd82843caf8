"""
Shared fixtures for the chat test-suite.

Every test gets the in-memory channel layer and the default
messaging policy. Database fixtures use 'transactional_db' because
the delivery engine and presence tracker reach the database from
worker threads through database_sync_to_async.
"""

import pytest
from django.apps import apps

from accounts.auth import issue_token
from accounts.models import Follow, User
from messaging.registry import SessionRegistry


class RecordingChannelLayer:
    """Stands in for a channel layer and remembers every send."""

    def __init__(self):
        self.sent = []

    async def send(self, channel, message):
        self.sent.append((channel, message))

    def messages_for(self, channel):
        return [message for name, message in self.sent if name == channel]

    def types_for(self, channel):
        return [message['type'] for message in self.messages_for(channel)]


@pytest.fixture(autouse=True)
def _chat_settings(settings):
    settings.CHANNEL_LAYERS = {"default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}}
    settings.MESSAGING_REQUIRE_FOLLOW = True
    settings.MESSAGING_MAX_MESSAGE_LENGTH = 2000
    settings.MESSAGING_DEFAULT_PAGE_SIZE = 20
    settings.MESSAGING_MAX_PAGE_SIZE = 100
    settings.AUTH_TOKEN_MAX_AGE = 3600
    settings.AUTH_TOKEN_COOKIE_NAME = 'jwt'


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def app_registry():
    """The process-wide registry owned by the messaging app, emptied after the test."""
    registry = apps.get_app_config('messaging').registry
    yield registry
    for user_id in registry.online_user_ids():
        for channel_name in registry.connections_for(user_id):
            registry.deregister(user_id, channel_name)


@pytest.fixture
def channel_layer():
    return RecordingChannelLayer()


@pytest.fixture
def make_user(transactional_db):
    def _make_user(username, **extra):
        return User.objects.create_user(username=username, password='pass-12345', **extra)
    return _make_user


@pytest.fixture
def follow(transactional_db):
    def _follow(follower, following):
        return Follow.objects.create(follower=follower, following=following)
    return _follow


@pytest.fixture
def alice(make_user):
    return make_user('alice', avatar_url='https://cdn.example.com/alice.png')


@pytest.fixture
def bob(make_user):
    return make_user('bob')


@pytest.fixture
def carol(make_user):
    return make_user('carol')


@pytest.fixture
def token_for():
    return issue_token
