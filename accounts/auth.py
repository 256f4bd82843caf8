# accounts/auth.py

"""
The connection authenticator. A credential is a signed, timestamped
token produced by 'issue_token'. 'authenticate' turns a raw token
into a user id or raises AuthError, and the helpers below pull the
raw token out of a WebSocket handshake or an HTTP request.

RT: The chat consumer calls 'authenticate_scope' before it accepts
the socket, so a bad credential never reaches the session registry.
"""

# Import logging because refused handshakes are logged with the client address.
import logging
# Import parse_qs from urllib.parse because browsers may pass the token in the query string.
from urllib.parse import parse_qs

# Import database_sync_to_async from channels.db because the user lookup runs inside the async consumer.
from channels.db import database_sync_to_async
# Import settings from django.conf because the cookie name and token lifetime are configurable.
from django.conf import settings
# Import signing from django.core because tokens are signed, timestamped payloads.
from django.core import signing
# Import parse_cookie from django.http.cookie because a raw scope carries cookies as a header.
from django.http.cookie import parse_cookie

# Import AuthError from core.exceptions because every refused credential is a 401.
from core.exceptions import AuthError
from .models import User

logger = logging.getLogger(__name__)

TOKEN_SALT = 'accounts.auth.token'
BEARER_PREFIX = 'bearer '
QUERY_TOKEN_PARAM = 'token'

ERROR_MISSING_CREDENTIAL = 'Authentication credential missing'
ERROR_INVALID_CREDENTIAL = 'Invalid or expired token'


def issue_token(user):
    return signing.dumps({'id': user.pk}, salt=TOKEN_SALT, compress=True)


def decode_token(raw_credential):
    if not raw_credential or not isinstance(raw_credential, str):
        raise AuthError(ERROR_MISSING_CREDENTIAL)
    try:
        payload = signing.loads(
            raw_credential,
            salt=TOKEN_SALT,
            max_age=settings.AUTH_TOKEN_MAX_AGE,
        )
    except signing.SignatureExpired:
        raise AuthError(ERROR_INVALID_CREDENTIAL)
    except signing.BadSignature:
        raise AuthError(ERROR_INVALID_CREDENTIAL)

    user_id = payload.get('id') if isinstance(payload, dict) else None
    # bool is an int subclass, reject it explicitly
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise AuthError(ERROR_INVALID_CREDENTIAL)
    return user_id


"""
Validates a raw credential and returns the id of the user it was
issued for. The user must still exist and be active.
"""
def authenticate(raw_credential):
    user_id = decode_token(raw_credential)
    if not User.objects.filter(pk=user_id, is_active=True).exists():
        raise AuthError(ERROR_INVALID_CREDENTIAL)
    return user_id


def _credential_from_cookies(cookies):
    return cookies.get(settings.AUTH_TOKEN_COOKIE_NAME) or None


def _credential_from_authorization(value):
    if value and value.lower().startswith(BEARER_PREFIX):
        return value[len(BEARER_PREFIX):].strip() or None
    return None


"""
Finds the raw credential in an ASGI WebSocket scope. Checked in
order: the token cookie, an 'Authorization: Bearer' header, then a
'token' query-string parameter.
"""
def credential_from_scope(scope):
    headers = {}
    for name, value in scope.get('headers', []):
        headers[name.decode('latin1').lower()] = value.decode('latin1')

    cookies = scope.get('cookies')
    if cookies is None:
        cookies = parse_cookie(headers.get('cookie', ''))
    credential = _credential_from_cookies(cookies)
    if credential:
        return credential

    credential = _credential_from_authorization(headers.get('authorization'))
    if credential:
        return credential

    query = parse_qs(scope.get('query_string', b'').decode('latin1'))
    values = query.get(QUERY_TOKEN_PARAM)
    return values[0] if values else None


"""
Finds the raw credential in an HTTP request, in the same order as
the WebSocket handshake: the token cookie first, then an
'Authorization: Bearer' header. REST calls do not read the query
string.
"""
def credential_from_request(request):
    credential = _credential_from_cookies(request.COOKIES)
    if credential:
        return credential
    return _credential_from_authorization(request.headers.get('Authorization'))


"""
RT: Async entry point for the chat consumer. Raises AuthError
without side effects when the handshake carries no valid token.
"""
async def authenticate_scope(scope):
    raw_credential = credential_from_scope(scope)
    try:
        return await database_sync_to_async(authenticate)(raw_credential)
    except AuthError as exc:
        client = scope.get('client') or ('?', '?')
        logger.warning('WebSocket authentication failed for %s: %s', client[0], exc.message)
        raise
