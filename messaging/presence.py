# messaging/presence.py

# Import logging because presence failures are logged and dropped.
import logging

# Import database_sync_to_async from channels.db because status writes use the synchronous ORM.
from channels.db import database_sync_to_async
# Import get_channel_layer from channels.layers because status changes are pushed to followers' channels.
from channels.layers import get_channel_layer

# Import Follow and User from accounts.models because followers are told when a user comes and goes.
from accounts.models import Follow, User
from . import constants
from .events import LAYER_USER_STATUS

logger = logging.getLogger(__name__)

"""
Turns registry membership changes into online/offline status.

'on_connect' runs after every successful registration and always
marks the user online, then tells each follower who is currently
connected. 'on_disconnect' only acts when the closed connection
was the user's last one, so closing one of two tabs changes
nothing.

Presence is best-effort: a failed write or follower lookup is
logged and dropped so it never blocks the socket from connecting
or closing.
RT: This powers the live online/offline dots.
"""
class PresenceTracker:
    def __init__(self, registry, channel_layer=None):
        self.registry = registry
        self.channel_layer = channel_layer or get_channel_layer()

    async def on_connect(self, user_id):
        try:
            await self.set_online(user_id, True)
            follower_ids = await self.get_follower_ids(user_id)
        except Exception:
            logger.exception('Error updating user online status', extra={'user_id': user_id})
            return
        await self.broadcast(user_id, constants.STATUS_ONLINE, follower_ids)

    async def on_disconnect(self, user_id, was_last_session):
        if not was_last_session:
            return
        try:
            # A reconnect may have landed while we were waiting on the database
            if self.registry.is_online(user_id):
                return
            await self.set_online(user_id, False)
            follower_ids = await self.get_follower_ids(user_id)
        except Exception:
            logger.exception('Error updating user offline status', extra={'user_id': user_id})
            return
        if self.registry.is_online(user_id):
            return
        await self.broadcast(user_id, constants.STATUS_OFFLINE, follower_ids)

    async def broadcast(self, user_id, status, follower_ids):
        event = {'type': LAYER_USER_STATUS, 'user_id': user_id, 'status': status}
        delivered = 0
        for follower_id in follower_ids:
            for channel_name in self.registry.connections_for(follower_id):
                try:
                    await self.channel_layer.send(channel_name, event)
                    delivered += 1
                except Exception:
                    logger.exception('Error sending presence update to %s', channel_name)
        logger.debug('User %s is %s, notified %d session(s)', user_id, status, delivered)

    @database_sync_to_async
    def set_online(self, user_id, is_online):
        User.objects.filter(pk=user_id).update(is_online=is_online)

    @database_sync_to_async
    def get_follower_ids(self, user_id):
        return list(Follow.objects.filter(following_id=user_id).values_list('follower_id', flat=True))
