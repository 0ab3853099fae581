"""
Tests for the WebSocket consumer and its JWT middleware.

The consumer runs behind JWTAuthMiddleware with the process room registry,
exactly as routed in chat.routing. Database rows are created in sync
fixtures; service calls made from the socket commit for real
(transaction=True), so their broadcasts are delivered over the in-memory
channel layer.
"""

import pytest
from channels.db import database_sync_to_async
from channels.testing import WebsocketCommunicator
from django.apps import apps

from authentication.tests.factories import UserFactory
from chat.consumers import ChatConsumer
from chat.events import EventBroadcaster
from chat.middleware import JWTAuthMiddleware
from chat.models import DirectMessage
from chat.services import DirectMessageService
from tryouts.models import ChatStatus, TryoutMessage, TryoutStatus
from tryouts.tests.factories import TryoutChatFactory

pytestmark = pytest.mark.django_db(transaction=True)


def application():
    return JWTAuthMiddleware(ChatConsumer.as_asgi(registry=apps.get_app_config("chat").rooms))


@pytest.fixture
def connect(access_token_for):
    """Return an async callable opening an authenticated socket for a user."""
    communicators = []

    async def _connect(user):
        communicator = WebsocketCommunicator(
            application(), f"/ws/chat/?token={access_token_for(user)}"
        )
        connected, _ = await communicator.connect()
        assert connected
        communicators.append(communicator)
        return communicator

    return _connect


@pytest.fixture
def captain():
    return UserFactory(display_name="Captain")


@pytest.fixture
def applicant():
    return UserFactory(display_name="Applicant")


@pytest.fixture
def tryout_chat(captain, applicant):
    return TryoutChatFactory(applicant=applicant, representatives=[captain])


class TestConnect:
    @pytest.mark.asyncio
    async def test_missing_token_is_closed_with_4001(self):
        communicator = WebsocketCommunicator(application(), "/ws/chat/")

        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4001

    @pytest.mark.asyncio
    async def test_invalid_token_is_closed_with_4001(self):
        communicator = WebsocketCommunicator(application(), "/ws/chat/?token=not-a-jwt")

        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4001

    @pytest.mark.asyncio
    async def test_token_in_subprotocol(self, user, access_token_for):
        communicator = WebsocketCommunicator(
            application(), "/ws/chat/", subprotocols=["jwt", access_token_for(user)]
        )

        connected, subprotocol = await communicator.connect()

        assert connected is True
        assert subprotocol == "jwt"
        await communicator.disconnect()

    @pytest.mark.asyncio
    async def test_inactive_user_is_rejected(self, access_token_for):
        inactive = await database_sync_to_async(UserFactory)(is_active=False)
        communicator = WebsocketCommunicator(
            application(), f"/ws/chat/?token={access_token_for(inactive)}"
        )

        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4001


class TestDirectMessages:
    @pytest.mark.asyncio
    async def test_receiver_gets_message_in_own_room(self, user, other_user, connect):
        """
        Given the receiver has a socket open
        When a direct message is sent to them through the service
        Then their socket receives a receiveMessage event
        """
        receiver_socket = await connect(other_user)

        result = await database_sync_to_async(DirectMessageService.send_direct)(
            sender=user,
            receiver_id=other_user.pk,
            text="gg",
            caller=user,
            broadcaster=EventBroadcaster.default(),
        )

        event = await receiver_socket.receive_json_from(timeout=2)
        assert event["type"] == "receiveMessage"
        assert event["id"] == result.data.id
        assert event["senderId"] == str(user.pk)
        assert event["message"] == "gg"
        await receiver_socket.disconnect()

    @pytest.mark.asyncio
    async def test_send_message_command(self, user, other_user, connect):
        sender_socket = await connect(user)
        receiver_socket = await connect(other_user)

        await sender_socket.send_json_to(
            {"type": "sendMessage", "receiverId": str(other_user.pk), "message": "see you at 8"}
        )

        ack = await sender_socket.receive_json_from(timeout=2)
        delivered = await receiver_socket.receive_json_from(timeout=2)
        assert ack["type"] == "messageSent"
        assert ack["message"]["message"] == "see you at 8"
        assert delivered["type"] == "receiveMessage"
        assert delivered["id"] == ack["message"]["id"]
        assert await database_sync_to_async(DirectMessage.objects.count)() == 1
        await sender_socket.disconnect()
        await receiver_socket.disconnect()

    @pytest.mark.asyncio
    async def test_send_message_failure_keeps_socket_open(self, user, connect):
        socket = await connect(user)

        await socket.send_json_to({"type": "sendMessage", "receiverId": "999999", "message": "hi"})
        error = await socket.receive_json_from(timeout=2)

        assert error == {"type": "error", "error_code": "NOT_FOUND", "message": "Receiver not found"}

        await socket.send_json_to({"type": "joinRoom", "userId": str(user.pk)})
        assert await socket.receive_nothing(timeout=0.2)
        await socket.disconnect()

    @pytest.mark.asyncio
    async def test_join_room_of_another_user_is_forbidden(self, user, other_user, connect):
        socket = await connect(user)

        await socket.send_json_to({"type": "joinRoom", "userId": str(other_user.pk)})
        error = await socket.receive_json_from(timeout=2)

        assert error["type"] == "error"
        assert error["error_code"] == "FORBIDDEN"
        await socket.disconnect()

    @pytest.mark.asyncio
    async def test_unknown_command(self, user, connect):
        socket = await connect(user)

        await socket.send_json_to({"type": "typing"})
        error = await socket.receive_json_from(timeout=2)

        assert error["error_code"] == "VALIDATION_ERROR"
        await socket.disconnect()


class TestTryoutChatCommands:
    @pytest.mark.asyncio
    async def test_participants_receive_tryout_messages(self, captain, applicant, tryout_chat, connect):
        """
        Given both participants joined the tryout room
        When the applicant sends a tryout message
        Then both sockets receive newTryoutMessage
        """
        captain_socket = await connect(captain)
        applicant_socket = await connect(applicant)
        for socket in (captain_socket, applicant_socket):
            await socket.send_json_to({"type": "joinTryoutChat", "chatId": str(tryout_chat.id)})
            joined = await socket.receive_json_from(timeout=2)
            assert joined == {
                "type": "tryoutChatJoined",
                "chatId": str(tryout_chat.id),
                "room": f"tryout.{tryout_chat.id}",
            }

        await applicant_socket.send_json_to(
            {
                "type": "sendTryoutMessage",
                "chatId": str(tryout_chat.id),
                "message": "Ready when you are",
                "senderId": str(applicant.pk),
            }
        )

        for socket in (captain_socket, applicant_socket):
            event = await socket.receive_json_from(timeout=2)
            assert event["type"] == "newTryoutMessage"
            assert event["chatId"] == str(tryout_chat.id)
            assert event["message"]["sender"] == str(applicant.pk)
            assert event["message"]["message"] == "Ready when you are"

        await captain_socket.disconnect()
        await applicant_socket.disconnect()

    @pytest.mark.asyncio
    async def test_non_participant_cannot_join(self, other_user, tryout_chat, connect):
        socket = await connect(other_user)

        await socket.send_json_to({"type": "joinTryoutChat", "chatId": str(tryout_chat.id)})
        error = await socket.receive_json_from(timeout=2)

        assert error["error_code"] == "FORBIDDEN"
        await socket.disconnect()

    @pytest.mark.asyncio
    async def test_left_room_receives_nothing(self, captain, applicant, tryout_chat, connect):
        captain_socket = await connect(captain)
        await captain_socket.send_json_to({"type": "joinTryoutChat", "chatId": str(tryout_chat.id)})
        await captain_socket.receive_json_from(timeout=2)
        await captain_socket.send_json_to({"type": "leaveTryoutChat", "chatId": str(tryout_chat.id)})

        applicant_socket = await connect(applicant)
        await applicant_socket.send_json_to(
            {"type": "sendTryoutMessage", "chatId": str(tryout_chat.id), "message": "anyone?"}
        )

        assert await captain_socket.receive_nothing(timeout=0.3)
        assert await database_sync_to_async(TryoutMessage.objects.filter(chat=tryout_chat).count)() == 1
        await captain_socket.disconnect()
        await applicant_socket.disconnect()

    @pytest.mark.asyncio
    async def test_leave_matches_join_whatever_the_id_spelling(self, captain, applicant, tryout_chat, connect):
        captain_socket = await connect(captain)
        await captain_socket.send_json_to({"type": "joinTryoutChat", "chatId": str(tryout_chat.id).upper()})
        joined = await captain_socket.receive_json_from(timeout=2)
        await captain_socket.send_json_to({"type": "leaveTryoutChat", "chatId": tryout_chat.id.hex})

        applicant_socket = await connect(applicant)
        await applicant_socket.send_json_to(
            {"type": "sendTryoutMessage", "chatId": str(tryout_chat.id), "message": "anyone?"}
        )

        assert joined["chatId"] == str(tryout_chat.id)
        assert await captain_socket.receive_nothing(timeout=0.3)
        await captain_socket.disconnect()
        await applicant_socket.disconnect()

    @pytest.mark.asyncio
    async def test_leave_with_malformed_id(self, captain, connect):
        socket = await connect(captain)

        await socket.send_json_to({"type": "leaveTryoutChat", "chatId": "not-a-chat"})
        error = await socket.receive_json_from(timeout=2)

        assert error["error_code"] == "VALIDATION_ERROR"
        await socket.disconnect()

    @pytest.mark.asyncio
    async def test_spoofed_sender_is_forbidden(self, captain, applicant, tryout_chat, connect):
        socket = await connect(captain)

        await socket.send_json_to(
            {
                "type": "sendTryoutMessage",
                "chatId": str(tryout_chat.id),
                "message": "I quit",
                "senderId": str(applicant.pk),
            }
        )
        error = await socket.receive_json_from(timeout=2)

        assert error["error_code"] == "FORBIDDEN"
        await socket.disconnect()

    @pytest.mark.asyncio
    async def test_locked_chat_rejects_messages(self, captain, applicant, connect):
        chat = await database_sync_to_async(TryoutChatFactory)(
            applicant=applicant,
            representatives=[captain],
            tryout_status=TryoutStatus.ENDED_BY_TEAM,
            status=ChatStatus.CANCELLED,
            locked=True,
        )
        socket = await connect(applicant)

        await socket.send_json_to(
            {"type": "sendTryoutMessage", "chatId": str(chat.id), "message": "wait!"}
        )
        error = await socket.receive_json_from(timeout=2)

        assert error["error_code"] == "CHAT_LOCKED"
        await socket.disconnect()
