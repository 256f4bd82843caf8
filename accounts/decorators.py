# accounts/decorators.py

# Import wraps from functools because the guarded view keeps its name and docstring.
from functools import wraps

# Import authenticate and credential_from_request because API calls use the same tokens as the socket.
from .auth import authenticate, credential_from_request

"""
Guards an API view behind the token authenticator. On success the
caller's id is stored on 'request.user_id'. On failure AuthError
propagates, so this must sit inside core.http.api_view, which
answers with a 401.
"""
def token_required(view_func):
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        request.user_id = authenticate(credential_from_request(request))
        return view_func(request, *args, **kwargs)
    return wrapper
