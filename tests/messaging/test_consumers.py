import pytest
from channels.db import database_sync_to_async
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from accounts.models import User
from messaging import constants
from messaging.models import Message
from messaging.routing import websocket_urlpatterns

pytestmark = pytest.mark.asyncio


@pytest.fixture
def application(registry):
    return URLRouter(websocket_urlpatterns(registry))


async def open_socket(application, token=None, **kwargs):
    headers = [(b'cookie', f'jwt={token}'.encode())] if token else []
    communicator = WebsocketCommunicator(application, '/ws/chat/', headers=headers, **kwargs)
    connected, code = await communicator.connect()
    return communicator, connected, code


async def connect_as(application, user, token_for):
    communicator, connected, _ = await open_socket(application, token_for(user))
    assert connected
    return communicator


async def receive_type(communicator, event_type, timeout=2):
    # Skips unrelated frames such as presence updates
    while True:
        frame = await communicator.receive_json_from(timeout=timeout)
        if frame['type'] == event_type:
            return frame


@database_sync_to_async
def is_online(user):
    return User.objects.get(pk=user.pk).is_online


@database_sync_to_async
def stored_messages():
    return list(Message.objects.values_list('content', 'is_deleted'))


async def test_connection_without_token_is_refused(application, registry, transactional_db):
    communicator, connected, code = await open_socket(application)
    assert not connected
    assert code == constants.CLOSE_CODE_UNAUTHORIZED
    assert len(registry) == 0
    await communicator.disconnect()


async def test_connection_with_bad_token_is_refused(application, registry, alice):
    communicator, connected, code = await open_socket(application, 'forged-token')
    assert not connected
    assert code == constants.CLOSE_CODE_UNAUTHORIZED
    assert not registry.is_online(alice.pk)
    assert not await is_online(alice)
    await communicator.disconnect()


async def test_token_in_query_string(application, registry, alice, token_for):
    communicator = WebsocketCommunicator(application, f'/ws/chat/?token={token_for(alice)}')
    connected, _ = await communicator.connect()
    assert connected
    assert registry.is_online(alice.pk)
    await communicator.disconnect()


async def test_connect_registers_and_marks_online(application, registry, alice, token_for):
    communicator = await connect_as(application, alice, token_for)
    assert registry.is_online(alice.pk)
    assert await is_online(alice)

    await communicator.disconnect()
    assert not registry.is_online(alice.pk)
    assert not await is_online(alice)


async def test_send_message_reaches_all_sessions_of_both_users(
    application, alice, bob, follow, token_for,
):
    await database_sync_to_async(follow)(alice, bob)
    alice_tab = await connect_as(application, alice, token_for)
    alice_phone = await connect_as(application, alice, token_for)
    bob_tab = await connect_as(application, bob, token_for)

    await alice_tab.send_json_to({
        'type': 'sendMessage', 'ackId': 'req-1', 'receiverId': bob.pk, 'content': 'hi',
    })

    ack = await receive_type(alice_tab, 'ack')
    assert ack['status'] == 'success'
    assert ack['ackId'] == 'req-1'
    assert ack['event'] == 'sendMessage'
    for communicator in (alice_tab, alice_phone, bob_tab):
        frame = await receive_type(communicator, 'message')
        assert frame['message']['id'] == ack['messageId']
        assert frame['message']['content'] == 'hi'
        assert frame['message']['sender']['username'] == 'alice'
        assert frame['message']['receiver']['username'] == 'bob'
    assert await stored_messages() == [('hi', False)]

    for communicator in (alice_tab, alice_phone, bob_tab):
        await communicator.disconnect()


async def test_rejected_send_answers_with_error_and_keeps_socket_open(
    application, alice, bob, token_for,
):
    alice_tab = await connect_as(application, alice, token_for)

    await alice_tab.send_json_to({'type': 'sendMessage', 'ackId': 'r', 'receiverId': bob.pk, 'content': 'hi'})
    error = await receive_type(alice_tab, 'error')
    assert error['message'] == constants.ERROR_NOT_FOLLOWING
    ack = await receive_type(alice_tab, 'ack')
    assert ack == {
        'type': 'ack', 'event': 'sendMessage', 'ackId': 'r', 'status': 'error',
        'message': constants.ERROR_NOT_FOLLOWING,
    }

    await alice_tab.send_json_to({'type': 'sendMessage', 'receiverId': alice.pk, 'content': 'me'})
    error = await receive_type(alice_tab, 'error')
    assert error['message'] == constants.ERROR_CANNOT_MESSAGE_SELF

    assert await stored_messages() == []
    # Still usable after the errors
    await alice_tab.send_json_to({'type': 'typing', 'receiverId': bob.pk})
    assert await alice_tab.receive_nothing()
    await alice_tab.disconnect()


async def test_malformed_frames_get_an_error_event(application, alice, token_for):
    alice_tab = await connect_as(application, alice, token_for)

    await alice_tab.send_to(text_data='{not json')
    assert (await receive_type(alice_tab, 'error'))['message'] == constants.ERROR_INVALID_EVENT

    await alice_tab.send_json_to({'type': 'launchRockets', 'ackId': 'x'})
    assert (await receive_type(alice_tab, 'error'))['message'] == constants.ERROR_UNKNOWN_EVENT
    ack = await receive_type(alice_tab, 'ack')
    assert ack['status'] == 'error'
    assert ack['ackId'] == 'x'

    await alice_tab.disconnect()


async def test_delete_message_over_socket(application, alice, bob, follow, token_for):
    await database_sync_to_async(follow)(alice, bob)
    alice_tab = await connect_as(application, alice, token_for)
    bob_tab = await connect_as(application, bob, token_for)

    await alice_tab.send_json_to({'type': 'sendMessage', 'ackId': 's', 'receiverId': bob.pk, 'content': 'oops'})
    message_id = (await receive_type(alice_tab, 'ack'))['messageId']
    await receive_type(bob_tab, 'message')

    # bob cannot delete alice's message
    await bob_tab.send_json_to({'type': 'deleteMessage', 'ackId': 'd1', 'messageId': message_id})
    ack = await receive_type(bob_tab, 'ack')
    assert ack['status'] == 'error'
    assert ack['message'] == constants.ERROR_NOT_AUTHORIZED

    await alice_tab.send_json_to({'type': 'deleteMessage', 'ackId': 'd2', 'messageId': message_id})
    ack = await receive_type(alice_tab, 'ack')
    assert ack['status'] == 'success'
    assert ack['messageId'] == message_id
    for communicator in (alice_tab, bob_tab):
        frame = await receive_type(communicator, 'messageDeleted')
        assert frame == {'type': 'messageDeleted', 'messageId': message_id}
    assert await stored_messages() == [('oops', True)]

    await alice_tab.send_json_to({'type': 'deleteMessage', 'ackId': 'd3', 'messageId': message_id})
    ack = await receive_type(alice_tab, 'ack')
    assert ack['message'] == constants.ERROR_MESSAGE_NOT_FOUND
    assert await bob_tab.receive_nothing()

    await alice_tab.disconnect()
    await bob_tab.disconnect()


async def test_typing_is_relayed_to_receiver(application, alice, bob, token_for):
    alice_tab = await connect_as(application, alice, token_for)
    bob_tab = await connect_as(application, bob, token_for)

    await alice_tab.send_json_to({'type': 'typing', 'receiverId': bob.pk})

    assert await receive_type(bob_tab, 'typing') == {'type': 'typing', 'senderId': alice.pk}
    assert await alice_tab.receive_nothing()

    await alice_tab.disconnect()
    await bob_tab.disconnect()


async def test_presence_with_two_tabs(application, alice, bob, follow, token_for):
    # bob follows alice, so he hears about her status
    await database_sync_to_async(follow)(bob, alice)
    bob_tab = await connect_as(application, bob, token_for)

    alice_tab = await connect_as(application, alice, token_for)
    assert await receive_type(bob_tab, 'userStatus') == {
        'type': 'userStatus', 'userId': alice.pk, 'status': 'online',
    }
    alice_phone = await connect_as(application, alice, token_for)
    assert (await receive_type(bob_tab, 'userStatus'))['status'] == 'online'

    await alice_tab.disconnect()
    assert await bob_tab.receive_nothing()
    assert await is_online(alice)

    await alice_phone.disconnect()
    assert await receive_type(bob_tab, 'userStatus') == {
        'type': 'userStatus', 'userId': alice.pk, 'status': 'offline',
    }
    assert await bob_tab.receive_nothing()
    assert not await is_online(alice)

    await bob_tab.disconnect()
