"""
WebSocket consumer for direct messages and tryout chats.

Consumers:
    ChatConsumer: One socket per client session

Authentication:
    JWTAuthMiddleware attaches the user to self.scope["user"]. Sockets
    without a valid token are closed with code 4001 before accept.

Rooms:
    On connect the socket joins its own user.{id} room, where direct
    messages arrive. joinTryoutChat adds the socket to tryout.{chat_id}
    (participants only) until leaveTryoutChat or disconnect.

Commands (client -> server):
    {"type": "joinRoom", "userId": "..."}
    {"type": "joinTryoutChat", "chatId": "..."}
    {"type": "leaveTryoutChat", "chatId": "..."}
    {"type": "sendTryoutMessage", "chatId": "...", "message": "...", "senderId": "..."}
    {"type": "sendMessage", "receiverId": "...", "message": "...", "messageType": "text"}

Events (server -> client):
    {"type": <event name>, ...payload}; see chat.events for the catalogue.

A failed command is answered with an error event to this socket only; the
connection stays open.
"""

from __future__ import annotations

import logging
import uuid

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from chat.constants import SOCKET_CONFIG, ErrorCode
from chat.events import Event, EventBroadcaster
from chat.models import MessageType
from chat.rooms import RoomRegistry, tryout_room, user_room
from chat.serializers import direct_message_data
from chat.services import DirectMessageService
from tryouts.services import TryoutLifecycleService

logger = logging.getLogger(__name__)


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for real-time messaging.

    Attributes:
        registry: Room registry (the process registry when routed)
        user: Authenticated user (after connect)
        tryout_rooms: Tryout rooms this socket joined
    """

    def __init__(self, *args, registry: RoomRegistry | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.registry = registry
        self.user = None
        self.user_room: str | None = None
        self.tryout_rooms: set[str] = set()

    @property
    def broadcaster(self) -> EventBroadcaster:
        return EventBroadcaster(self.registry)

    async def connect(self):
        user = self.scope.get("user")

        if not user or not user.is_authenticated:
            logger.warning("Rejected unauthenticated socket connection")
            await self.close(code=SOCKET_CONFIG.CLOSE_UNAUTHENTICATED)
            return

        if self.registry is None:
            self.registry = RoomRegistry(self.channel_layer)

        self.user = user
        self.user_room = user_room(user.pk)
        await self.registry.join(self.user_room, self.channel_name)

        subprotocol = None
        if SOCKET_CONFIG.TOKEN_SUBPROTOCOL in self.scope.get("subprotocols", []):
            subprotocol = SOCKET_CONFIG.TOKEN_SUBPROTOCOL
        await self.accept(subprotocol=subprotocol)
        logger.info(f"User {user.pk} connected")

    async def disconnect(self, close_code):
        if self.user_room:
            await self.registry.leave(self.user_room, self.channel_name)
        for room in list(self.tryout_rooms):
            await self.registry.leave(room, self.channel_name)
        self.tryout_rooms.clear()

        if self.user is not None:
            logger.info(f"User {self.user.pk} disconnected ({close_code})")

    async def receive_json(self, content, **kwargs):
        command = content.get("type") if isinstance(content, dict) else None
        handler = self.commands.get(command)

        if handler is None:
            await self.send_error(ErrorCode.VALIDATION_ERROR, f"Unknown command: {command}")
            return

        try:
            await handler(self, content)
        except Exception:
            logger.exception(f"Socket command {command} failed for user {self.user.pk}")
            await self.send_error(
                ErrorCode.TRANSIENT_FAILURE, "Something went wrong, please try again"
            )

    async def send_error(self, error_code: str, message: str):
        await self.send_json({"type": Event.ERROR, "error_code": error_code, "message": message})

    async def send_failure(self, command: str, result):
        logger.warning(
            f"Rejected {command} from user {self.user.pk}: {result.error_code} {result.error}"
        )
        await self.send_error(result.error_code, result.error)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def join_room(self, content):
        """Re-join the caller's own user room; other users' rooms are refused."""
        if str(content.get("userId")) != str(self.user.pk):
            logger.warning(f"User {self.user.pk} tried to join room of {content.get('userId')}")
            await self.send_error(ErrorCode.FORBIDDEN, "You can only join your own room")
            return
        await self.registry.join(self.user_room, self.channel_name)

    async def join_tryout_chat(self, content):
        chat_id = content.get("chatId")
        result = await self._get_chat(chat_id)
        if not result.success:
            await self.send_failure("joinTryoutChat", result)
            return

        room = tryout_room(result.data.pk)
        await self.registry.join(room, self.channel_name)
        self.tryout_rooms.add(room)
        await self.send_json(
            {"type": Event.TRYOUT_CHAT_JOINED, "chatId": str(result.data.pk), "room": room}
        )

    async def leave_tryout_chat(self, content):
        try:
            chat_id = uuid.UUID(str(content.get("chatId")))
        except ValueError:
            await self.send_error(ErrorCode.VALIDATION_ERROR, "Malformed chat id")
            return

        room = tryout_room(chat_id)
        if room in self.tryout_rooms:
            await self.registry.leave(room, self.channel_name)
            self.tryout_rooms.discard(room)

    async def send_tryout_message(self, content):
        sender_id = content.get("senderId")
        if sender_id is not None and str(sender_id) != str(self.user.pk):
            await self.send_error(ErrorCode.FORBIDDEN, "You can only send messages as yourself")
            return

        result = await self._post_tryout_message(content.get("chatId"), content.get("message"))
        if not result.success:
            await self.send_failure("sendTryoutMessage", result)

    async def send_direct_message(self, content):
        result = await self._send_direct(content)
        if not result.success:
            await self.send_failure("sendMessage", result)
            return
        await self.send_json(
            {"type": Event.MESSAGE_SENT, "message": direct_message_data(result.data)}
        )

    commands = {
        "joinRoom": join_room,
        "joinTryoutChat": join_tryout_chat,
        "leaveTryoutChat": leave_tryout_chat,
        "sendTryoutMessage": send_tryout_message,
        "sendMessage": send_direct_message,
    }

    # -------------------------------------------------------------------------
    # Channel layer events
    # -------------------------------------------------------------------------

    async def room_event(self, event):
        """Forward a room broadcast to the client as {"type": name, ...payload}."""
        await self.send_json({"type": event["event"], **event["payload"]})

    # -------------------------------------------------------------------------
    # Database access
    # -------------------------------------------------------------------------

    @database_sync_to_async
    def _get_chat(self, chat_id):
        return TryoutLifecycleService.get_chat_for_user(chat_id, self.user)

    @database_sync_to_async
    def _post_tryout_message(self, chat_id, text):
        return TryoutLifecycleService.post_message(
            chat_id, self.user, text, broadcaster=self.broadcaster
        )

    @database_sync_to_async
    def _send_direct(self, content):
        return DirectMessageService.send_direct(
            sender=self.user,
            receiver_id=content.get("receiverId"),
            text=content.get("message"),
            message_type=content.get("messageType") or MessageType.TEXT,
            metadata=content.get("metadata"),
            invitation_id=content.get("invitationId"),
            tournament_id=content.get("tournamentId"),
            match_id=content.get("matchId"),
            caller=self.user,
            broadcaster=self.broadcaster,
        )
