# messaging/consumers.py

# Import json because WebSocket messages are sent as text in JSON format.
import json
# Import logging because handler failures are logged instead of closing the socket.
import logging
# Import AsyncWebsocketConsumer from channels.generic.websocket because this is the base class for our real-time consumer.
from channels.generic.websocket import AsyncWebsocketConsumer
# Import authenticate_scope from accounts.auth because every connection must present a valid token.
from accounts.auth import authenticate_scope
# Import the error taxonomy because handler errors are turned into 'error' events and acks.
from core.exceptions import AuthError, InternalError, ServiceError
from . import constants, events
from .delivery import MessageDeliveryEngine
from .presence import PresenceTracker

logger = logging.getLogger(__name__)

"""
This class is the real-time chat connection for one browser tab.
A user opens a single socket and can message anyone they follow
over it, so there is no per-thread URL.

Lifecycle: the token is checked before the socket is accepted
(a bad token closes the handshake with code 4401 and nothing is
registered), then the connection is registered under the user,
then the presence tracker announces the user. On close the
connection is removed and the user goes offline only if this was
their last session.

Business errors never close the socket: they come back as an
'error' event plus an error ack for sendMessage/deleteMessage.
RT: This entire class is for real-time direct messaging.
"""
class ChatConsumer(AsyncWebsocketConsumer):
    registry = None

    def __init__(self, *args, registry=None, **kwargs):
        super().__init__(*args, **kwargs)
        if registry is not None:
            self.registry = registry
        self.user_id = None

    """
    Runs when a client opens the socket. Authenticates, accepts,
    registers the session and broadcasts the user as online.
    RT: Connects the user to live messaging and presence.
    """
    async def connect(self):
        try:
            user_id = await authenticate_scope(self.scope)
        except AuthError:
            await self.close(code=constants.CLOSE_CODE_UNAUTHORIZED)
            return

        self.engine = MessageDeliveryEngine(self.registry, self.channel_layer)
        self.presence = PresenceTracker(self.registry, self.channel_layer)

        await self.accept()
        self.user_id = user_id
        self.registry.register(user_id, self.channel_name)
        logger.info('User connected via WebSocket', extra={'user_id': user_id, 'channel': self.channel_name})
        await self.presence.on_connect(user_id)

    """
    Runs when the socket closes for any reason. Only connections
    that made it past authentication were registered.
    RT: Removes the session and maybe marks the user offline.
    """
    async def disconnect(self, close_code):
        if self.user_id is None:
            return
        was_last_session = self.registry.deregister(self.user_id, self.channel_name)
        logger.info('User disconnected from WebSocket', extra={
            'user_id': self.user_id, 'channel': self.channel_name, 'close_code': close_code,
        })
        await self.presence.on_disconnect(self.user_id, was_last_session)

    """
    Runs for every frame the browser sends. The frame is parsed
    into a tagged event and handed to the matching handler.
    RT: Receives sendMessage, deleteMessage and typing events.
    """
    async def receive(self, text_data=None, bytes_data=None):
        try:
            event = events.parse_inbound(text_data)
        except events.InvalidEventError as exc:
            await self.send_json(events.error_frame(exc.message))
            if exc.ack_id is not None:
                await self.send_json(events.ack(exc.event_type, exc.ack_id, error=exc.message))
            return

        if event.type == constants.EVENT_SEND_MESSAGE:
            await self.handle_send_message(event)
        elif event.type == constants.EVENT_DELETE_MESSAGE:
            await self.handle_delete_message(event)
        elif event.type == constants.EVENT_TYPING:
            await self.handle_typing(event)

    async def handle_send_message(self, event):
        try:
            message = await self.engine.send_message(
                self.user_id, event.data['receiver_id'], event.data['content'],
            )
        except Exception as exc:
            await self.reject(event, exc)
            return
        await self.send_json(events.ack(event.type, event.ack_id, message_id=message.pk))

    async def handle_delete_message(self, event):
        try:
            message = await self.engine.delete_message(self.user_id, event.data['message_id'])
        except Exception as exc:
            await self.reject(event, exc)
            return
        await self.send_json(events.ack(event.type, event.ack_id, message_id=message.pk))

    async def handle_typing(self, event):
        # Fire-and-forget, no ack and no error event
        try:
            await self.engine.typing(self.user_id, event.data['receiver_id'])
        except Exception:
            logger.exception('Error relaying typing event', extra={'user_id': self.user_id})

    async def reject(self, event, exc):
        if not isinstance(exc, ServiceError):
            logger.exception('Error handling %s', event.type, extra={'user_id': self.user_id})
            exc = InternalError()
        else:
            logger.info('%s rejected for user %s: %s', event.type, self.user_id, exc.message)
        await self.send_json(events.error_frame(exc.message))
        await self.send_json(events.ack(event.type, event.ack_id, error=exc.message))

    async def send_json(self, content):
        await self.send(text_data=json.dumps(content))

    # --- CHANNEL LAYER HANDLERS ---

    # Pushes a stored message to this tab
    async def chat_message(self, event):
        await self.send_json({'type': constants.EVENT_MESSAGE, 'message': event['message']})

    # Pushes a deletion notice to this tab
    async def chat_message_deleted(self, event):
        await self.send_json({'type': constants.EVENT_MESSAGE_DELETED, 'messageId': event['message_id']})

    # Pushes the "is typing" notification to this tab
    async def chat_typing(self, event):
        await self.send_json({'type': constants.EVENT_TYPING, 'senderId': event['sender_id']})

    # Pushes an online/offline status change of someone this user follows
    async def presence_status(self, event):
        await self.send_json({
            'type': constants.EVENT_USER_STATUS,
            'userId': event['user_id'],
            'status': event['status'],
        })
