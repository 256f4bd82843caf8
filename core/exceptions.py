# core/exceptions.py

"""
The shared error taxonomy. Every business rule in the 'accounts'
and 'messaging' apps fails by raising one of these. The realtime
consumer turns them into 'error' events and acks, and the REST
views turn them into JSON responses with the matching status code.
"""


class ServiceError(Exception):
    status_code = 500
    default_message = 'An unexpected error occurred'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


# Bad, missing or expired credential
class AuthError(ServiceError):
    status_code = 401
    default_message = 'Authentication required'


# Empty/over-length content, messaging yourself, malformed payloads
class ValidationError(ServiceError):
    status_code = 400
    default_message = 'Invalid input provided'


# Sender does not follow the receiver
class AuthorizationError(ServiceError):
    status_code = 403
    default_message = 'Not allowed'


class NotFoundError(ServiceError):
    status_code = 404
    default_message = 'Not found'


# Deleting somebody else's message
class ForbiddenError(ServiceError):
    status_code = 403
    default_message = 'Forbidden'


class InternalError(ServiceError):
    status_code = 500
