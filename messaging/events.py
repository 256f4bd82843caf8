# messaging/events.py

"""
Wire format helpers for the realtime chat.

Inbound frames are tagged by their 'type' and validated with the
matching form from messaging.forms. Outbound frames are built here
too, so the consumer, the delivery engine and the REST views all
produce the same shapes:

    message          full message payload with sender/receiver info
    messageDeleted   {messageId}
    typing           {senderId}
    userStatus       {userId, status}
    ack              {event, ackId, status, messageId | message}
    error            {message}

The channel-layer events ('chat.message' and friends) are what the
delivery engine and presence tracker send to a connection's
channel. The consumer has one handler per channel-layer type.
"""

# Import json because every frame on the socket is a JSON text message.
import json
# Import re because inbound keys arrive in camelCase and forms use snake_case.
import re
# Import dataclass because a parsed frame is a small immutable record.
from dataclasses import dataclass

# Import ValidationError from core.exceptions because a bad frame is a client error.
from core.exceptions import ValidationError
from . import constants
from .forms import DeleteMessageForm, SendMessageForm, TypingForm

INBOUND_FORMS = {
    constants.EVENT_SEND_MESSAGE: SendMessageForm,
    constants.EVENT_DELETE_MESSAGE: DeleteMessageForm,
    constants.EVENT_TYPING: TypingForm,
}

# Channel-layer message types
LAYER_MESSAGE = 'chat.message'
LAYER_MESSAGE_DELETED = 'chat.message_deleted'
LAYER_TYPING = 'chat.typing'
LAYER_USER_STATUS = 'presence.status'

_CAMEL_RE = re.compile(r'(?<!^)(?=[A-Z])')


def _snake_case(name):
    return _CAMEL_RE.sub('_', name).lower()


@dataclass(frozen=True)
class InboundEvent:
    type: str
    data: dict
    ack_id: str | int | None = None


MAX_ACK_ID_LENGTH = 100


# Strings and integers are echoed back as sent, anything else is ignored
def _peek_ack_id(payload):
    ack_id = payload.get('ackId')
    if isinstance(ack_id, bool):
        return None
    if isinstance(ack_id, int) or (isinstance(ack_id, str) and len(ack_id) <= MAX_ACK_ID_LENGTH):
        return ack_id
    return None


class InvalidEventError(ValidationError):
    def __init__(self, message, event_type=None, ack_id=None):
        super().__init__(message)
        self.event_type = event_type
        self.ack_id = ack_id


"""
Parses one text frame into an InboundEvent. Raises InvalidEventError
for anything that is not a JSON object with a known 'type' and a
valid body. The error carries the ack id when one could be read,
so the consumer can still answer the request.
"""
def parse_inbound(text_data):
    try:
        payload = json.loads(text_data)
    except (TypeError, ValueError):
        raise InvalidEventError(constants.ERROR_INVALID_EVENT)
    if not isinstance(payload, dict):
        raise InvalidEventError(constants.ERROR_INVALID_EVENT)

    ack_id = _peek_ack_id(payload)
    event_type = payload.get('type')
    if not isinstance(event_type, str) or event_type not in INBOUND_FORMS:
        raise InvalidEventError(constants.ERROR_UNKNOWN_EVENT, ack_id=ack_id)

    form_class = INBOUND_FORMS[event_type]
    form = form_class(data={_snake_case(key): value for key, value in payload.items() if key not in ('type', 'ackId')})
    if not form.is_valid():
        fields = ', '.join(sorted(form.errors))
        raise InvalidEventError(f'{constants.ERROR_INVALID_EVENT}: {fields}', event_type, ack_id)

    return InboundEvent(type=event_type, data=dict(form.cleaned_data), ack_id=ack_id)


def user_payload(user):
    return {
        'id': user.pk,
        'username': user.username,
        'avatarUrl': user.avatar_url or None,
    }


# 'sender' and 'receiver' must already be loaded (select_related) when called from async code
def message_payload(message):
    return {
        'id': message.pk,
        'senderId': message.sender_id,
        'receiverId': message.receiver_id,
        'content': message.content,
        'createdAt': message.created_at.isoformat(),
        'isDeleted': message.is_deleted,
        'sender': user_payload(message.sender),
        'receiver': user_payload(message.receiver),
    }


def ack(event_type, ack_id, message_id=None, error=None):
    frame = {'type': constants.EVENT_ACK, 'event': event_type, 'ackId': ack_id}
    if error is None:
        frame.update(status=constants.ACK_SUCCESS, messageId=message_id)
    else:
        frame.update(status=constants.ACK_ERROR, message=error)
    return frame


def error_frame(message):
    return {'type': constants.EVENT_ERROR, 'message': message}
