# core/http.py

# Import json because request bodies are JSON.
import json
# Import logging because unexpected errors are logged with their traceback.
import logging
# Import wraps from functools because the decorated view keeps its name.
from functools import wraps

# Import JsonResponse from django.http because errors are answered as JSON.
from django.http import JsonResponse

# Import the error taxonomy because each error kind carries its own status code.
from .exceptions import InternalError, ServiceError, ValidationError

logger = logging.getLogger(__name__)

"""
This decorator is the error-translation boundary for every JSON
endpoint. Views raise errors from core.exceptions and this turns
them into {'error': message} responses with the right status code
(401/400/403/404/500). Anything unexpected is logged with its
traceback and reported as a 500.
"""
def api_view(view_func):
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except ServiceError as exc:
            logger.info('%s %s rejected: %s', request.method, request.path, exc.message)
            return JsonResponse({'error': exc.message}, status=exc.status_code)
        except Exception:
            logger.exception('Unhandled error in %s %s', request.method, request.path)
            error = InternalError()
            return JsonResponse({'error': error.message}, status=error.status_code)
    return wrapper


def parse_json_body(request):
    # Empty body is treated as an empty object
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationError('Request body must be valid JSON')
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data
