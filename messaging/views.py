# messaging/views.py

# Import logging because every API read is logged.
import logging

# Import async_to_sync from asgiref.sync because these views are synchronous and the delivery engine is async.
from asgiref.sync import async_to_sync
# Import apps from django.apps because the session registry lives on the messaging app config.
from django.apps import apps
# Import JsonResponse from django.http because every endpoint answers with JSON.
from django.http import JsonResponse
# Import csrf_exempt because API clients authenticate with a token, not a session.
from django.views.decorators.csrf import csrf_exempt
# Import the method decorators because each URL accepts a fixed set of verbs.
from django.views.decorators.http import require_GET, require_http_methods

# Import token_required from accounts.decorators because every endpoint needs a valid token.
from accounts.decorators import token_required
# Import api_view and parse_json_body from core.http because errors become JSON responses there.
from core.http import api_view, parse_json_body
# Import the pagination helpers from core.pagination because both listings share one envelope.
from core.pagination import build_pagination, get_page_params
from .delivery import MessageDeliveryEngine
from .events import message_payload
from .projections import list_conversations, list_messages

logger = logging.getLogger(__name__)


def get_delivery_engine():
    # The registry belongs to the messaging app config, shared with the WebSocket routing
    registry = apps.get_app_config('messaging').registry
    return MessageDeliveryEngine(registry)


def paginated_response(items, page, limit, total):
    return JsonResponse({'data': items, 'pagination': build_pagination(page, limit, total)})


@require_GET
@api_view
@token_required
def conversations_view(request):
    page, limit = get_page_params(request.GET)
    items, total = list_conversations(request.user_id, page, limit)
    logger.info('Conversations fetched', extra={'user_id': request.user_id, 'page': page, 'limit': limit})
    return paginated_response(items, page, limit, total)


def message_history_view(request, user_id):
    page, limit = get_page_params(request.GET)
    items, total = list_messages(request.user_id, user_id, page, limit)
    logger.info('Messages fetched', extra={'user_id': request.user_id, 'other_user_id': user_id})
    return paginated_response(items, page, limit, total)


"""
Creates a message exactly like the realtime 'sendMessage' event,
including the push to both users' live sessions.
RT: Broadcasts the new message to every open tab of both users.
"""
def create_message_view(request, user_id):
    body = parse_json_body(request)
    engine = get_delivery_engine()
    message = async_to_sync(engine.send_message)(request.user_id, user_id, body.get('content'))
    return JsonResponse({'data': message_payload(message)}, status=201)


"""
Soft-deletes one of the caller's messages and pushes the
'messageDeleted' notice to both users' live sessions.
"""
def delete_message_view(request, message_id):
    engine = get_delivery_engine()
    message = async_to_sync(engine.delete_message)(request.user_id, message_id)
    return JsonResponse({'message': 'Message deleted successfully', 'data': {'messageId': message.pk}})


# GET and POST address a counterpart user, DELETE addresses a message
@csrf_exempt
@require_http_methods(['GET', 'POST', 'DELETE'])
@api_view
@token_required
def messages_view(request, pk):
    if request.method == 'GET':
        return message_history_view(request, pk)
    if request.method == 'POST':
        return create_message_view(request, pk)
    return delete_message_view(request, pk)
