# messaging/delivery.py

# Import logging because stored messages and failed pushes are logged.
import logging

# Import database_sync_to_async from channels.db because the ORM is synchronous and the engine is not.
from channels.db import database_sync_to_async
# Import get_channel_layer from channels.layers because pushes go to each live connection's channel.
from channels.layers import get_channel_layer
# Import settings from django.conf because the follow rule and length limit are configurable.
from django.conf import settings
# Import DatabaseError from django.db because storage failures are reported as internal errors.
from django.db import DatabaseError

# Import Follow and User from accounts.models because sending depends on who follows whom.
from accounts.models import Follow, User
# Import the error taxonomy from core.exceptions because each rejected request maps to one error kind.
from core.exceptions import (
    AuthorizationError, ForbiddenError, InternalError, NotFoundError, ValidationError,
)
from . import constants
from .events import LAYER_MESSAGE, LAYER_MESSAGE_DELETED, LAYER_TYPING, message_payload
from .models import Message

logger = logging.getLogger(__name__)


def clean_content(content):
    if not isinstance(content, str):
        raise ValidationError(constants.ERROR_INVALID_MESSAGE_CONTENT)
    content = content.strip()
    if not content or len(content) > settings.MESSAGING_MAX_MESSAGE_LENGTH:
        raise ValidationError(constants.ERROR_INVALID_MESSAGE_CONTENT)
    return content


"""
Validates, stores and routes direct messages.

'send_message' checks, in this order: not messaging yourself, the
sender follows the receiver (unless MESSAGING_REQUIRE_FOLLOW is
off), the receiver exists, the trimmed content is non-empty and
within MESSAGING_MAX_MESSAGE_LENGTH. The first failure wins and
nothing is stored. A stored message is pushed to every live
session of both users, including the sender's other tabs.

'delete_message' only lets the sender soft-delete their own
message. A message that is already deleted counts as not found,
so a repeated delete fails and the deletion event goes out once.

Push delivery is at-most-once. Offline users simply pick the
message up from history later.
RT: Used by the chat consumer and by the REST views.
"""
class MessageDeliveryEngine:
    def __init__(self, registry, channel_layer=None, require_follow=None):
        self.registry = registry
        self.channel_layer = channel_layer or get_channel_layer()
        if require_follow is None:
            require_follow = settings.MESSAGING_REQUIRE_FOLLOW
        self.require_follow = require_follow

    async def send_message(self, sender_id, receiver_id, content):
        if sender_id == receiver_id:
            raise ValidationError(constants.ERROR_CANNOT_MESSAGE_SELF)
        try:
            message = await self.create_message(sender_id, receiver_id, content)
        except DatabaseError as exc:
            logger.exception('Error saving message from %s to %s', sender_id, receiver_id)
            raise InternalError(constants.ERROR_SEND_FAILED) from exc

        await self.route(
            (sender_id, receiver_id),
            {'type': LAYER_MESSAGE, 'message': message_payload(message)},
        )
        logger.info('Message sent', extra={
            'message_id': message.pk, 'sender_id': sender_id, 'receiver_id': receiver_id,
        })
        return message

    async def delete_message(self, requester_id, message_id):
        try:
            message = await self.soft_delete(requester_id, message_id)
        except DatabaseError as exc:
            logger.exception('Error deleting message %s', message_id)
            raise InternalError(constants.ERROR_DELETE_FAILED) from exc

        await self.route(
            (message.sender_id, message.receiver_id),
            {'type': LAYER_MESSAGE_DELETED, 'message_id': message.pk},
        )
        logger.info('Message deleted', extra={'message_id': message.pk, 'user_id': requester_id})
        return message

    async def typing(self, sender_id, receiver_id):
        channel_names = self.registry.connections_for(receiver_id)
        if not channel_names or sender_id == receiver_id:
            return
        event = {'type': LAYER_TYPING, 'sender_id': sender_id}
        for channel_name in channel_names:
            await self.channel_layer.send(channel_name, event)

    async def route(self, user_ids, event):
        for user_id in dict.fromkeys(user_ids):
            for channel_name in self.registry.connections_for(user_id):
                try:
                    await self.channel_layer.send(channel_name, event)
                except Exception:
                    # The row is already stored, a failed push is not retried
                    logger.exception('Error pushing %s to %s', event['type'], channel_name)

    @database_sync_to_async
    def create_message(self, sender_id, receiver_id, content):
        # Ids past the largest primary key cannot match a row
        in_range = 0 < receiver_id <= constants.MAX_ID
        if self.require_follow and not (in_range and Follow.objects.filter(
            follower_id=sender_id, following_id=receiver_id,
        ).exists()):
            raise AuthorizationError(constants.ERROR_NOT_FOLLOWING)
        if not (in_range and User.objects.filter(pk=receiver_id).exists()):
            raise NotFoundError(constants.ERROR_USER_NOT_FOUND)
        content = clean_content(content)

        message = Message.objects.create(sender_id=sender_id, receiver_id=receiver_id, content=content)
        return Message.objects.select_related('sender', 'receiver').get(pk=message.pk)

    @database_sync_to_async
    def soft_delete(self, requester_id, message_id):
        if not 0 < message_id <= constants.MAX_ID:
            raise NotFoundError(constants.ERROR_MESSAGE_NOT_FOUND)
        message = Message.objects.filter(pk=message_id, is_deleted=False).first()
        if message is None:
            raise NotFoundError(constants.ERROR_MESSAGE_NOT_FOUND)
        if message.sender_id != requester_id:
            raise ForbiddenError(constants.ERROR_NOT_AUTHORIZED)

        # Only the call that flips the flag gets to announce the deletion
        updated = Message.objects.filter(pk=message_id, is_deleted=False).update(is_deleted=True)
        if not updated:
            raise NotFoundError(constants.ERROR_MESSAGE_NOT_FOUND)
        message.is_deleted = True
        return message
