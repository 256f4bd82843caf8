# messaging/projections.py

# Import Q from django.db.models because a conversation spans both directions of a pair.
from django.db.models import Q

# Import User from accounts.models because the other side of a conversation must exist.
from accounts.models import User
# Import NotFoundError from core.exceptions because an unknown counterpart is a 404.
from core.exceptions import NotFoundError
# Import page_bounds from core.pagination because both listings are paged the same way.
from core.pagination import page_bounds
from . import constants
from .events import message_payload, user_payload
from .models import Message

"""
Read-side views over stored messages for the REST endpoints.
Deleted messages never show up here.

'list_conversations' collapses everything a user sent or received
into one row per counterpart, carrying the newest message of that
pair. Rows are ordered newest first; equal timestamps fall back to
the higher (newer) message id.

'list_messages' returns the messages between two users oldest
first, the way a conversation view reads. A page past the last one
comes back empty with the real total.
Both return (items, total_count) where items is the requested page.
"""


def list_conversations(user_id, page, page_size):
    messages = (
        Message.objects
        .filter(Q(sender_id=user_id) | Q(receiver_id=user_id), is_deleted=False)
        .select_related('sender', 'receiver')
        .order_by('-created_at', '-id')
    )

    conversations = {}
    for message in messages.iterator():
        counterpart_id = message.counterpart_id(user_id)
        if counterpart_id in conversations:
            continue
        counterpart = message.receiver if message.sender_id == user_id else message.sender
        conversations[counterpart_id] = {
            'user': user_payload(counterpart),
            'lastMessage': message.content,
            'lastMessageAt': message.created_at.isoformat(),
        }

    items = list(conversations.values())
    start, end = page_bounds(page, page_size)
    return items[start:end], len(items)


def list_messages(user_id, other_user_id, page, page_size):
    in_range = 0 < other_user_id <= constants.MAX_ID
    if not (in_range and User.objects.filter(pk=other_user_id).exists()):
        raise NotFoundError(constants.ERROR_USER_NOT_FOUND)

    messages = Message.objects.filter(
        Q(sender_id=user_id, receiver_id=other_user_id)
        | Q(sender_id=other_user_id, receiver_id=user_id),
        is_deleted=False,
    )
    total = messages.count()
    start, end = page_bounds(page, page_size)
    # A page past the end is empty, the offset never reaches the database
    if start >= total:
        return [], total
    page_items = messages.select_related('sender', 'receiver').order_by('created_at', 'id')[start:end]
    return [message_payload(message) for message in page_items], total
