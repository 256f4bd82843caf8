# messaging/constants.py

"""
Reusable text values for the 'messaging' app: the user-facing
error messages and the wire names of realtime events. Keeping
them here means the consumer, the REST views and the tests all
agree on the exact wording.
RT: The event names are what the browser listens for.
"""

# Error messages
ERROR_USER_NOT_FOUND = 'User not found'
ERROR_MESSAGE_NOT_FOUND = 'Message not found'
ERROR_INVALID_MESSAGE_CONTENT = 'Invalid message content'
ERROR_CANNOT_MESSAGE_SELF = 'Cannot send message to yourself'
ERROR_NOT_FOLLOWING = 'You can only message users you follow'
ERROR_NOT_AUTHORIZED = 'You are not authorized to delete this message'
ERROR_INVALID_EVENT = 'Invalid event payload'
ERROR_UNKNOWN_EVENT = 'Unknown event type'
ERROR_SEND_FAILED = 'Failed to send message'
ERROR_DELETE_FAILED = 'Failed to delete message'

# Inbound (client -> server) event types
EVENT_SEND_MESSAGE = 'sendMessage'
EVENT_DELETE_MESSAGE = 'deleteMessage'
EVENT_TYPING = 'typing'

# Outbound (server -> client) event types
EVENT_MESSAGE = 'message'
EVENT_MESSAGE_DELETED = 'messageDeleted'
EVENT_USER_STATUS = 'userStatus'
EVENT_ACK = 'ack'
EVENT_ERROR = 'error'

STATUS_ONLINE = 'online'
STATUS_OFFLINE = 'offline'
ACK_SUCCESS = 'success'
ACK_ERROR = 'error'

# Close code used when a handshake carries no valid credential
CLOSE_CODE_UNAUTHORIZED = 4401

# Largest primary key a BigAutoField can hold; larger ids match nothing
MAX_ID = 2**63 - 1
