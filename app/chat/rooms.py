"""
Room registry over the Channels channel layer.

A room is a channel layer group. Sockets join their own user room on connect
and a tryout room while viewing that chat; broadcasts reach every socket
currently in the room and nothing is stored for absent sockets.

Rooms:
    user.{user_id}    - direct message delivery
    tryout.{chat_id}  - tryout chat events

Group names may only contain ASCII letters, digits, hyphens, underscores and
periods, so rooms use a period separator.

Usage:
    registry = RoomRegistry(get_channel_layer())
    await registry.join(user_room(user.pk), self.channel_name)
    registry.broadcast_sync(tryout_room(chat.id), "tryoutEnded", payload)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from asgiref.sync import async_to_sync

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)

# Channel layer message type; dispatched to ChatConsumer.room_event
ROOM_EVENT_TYPE = "room.event"


def user_room(user_id) -> str:
    return f"user.{user_id}"


def tryout_room(chat_id) -> str:
    return f"tryout.{chat_id}"


class RoomRegistry:
    """
    Join, leave and fan out events to rooms.

    One instance is built per process (see ChatConfig.ready) and handed to
    the event broadcaster and the socket consumer.
    """

    def __init__(self, channel_layer):
        self.channel_layer = channel_layer

    async def join(self, room: str, channel_name: str) -> None:
        await self.channel_layer.group_add(room, channel_name)
        logger.debug(f"Channel {channel_name} joined {room}")

    async def leave(self, room: str, channel_name: str) -> None:
        await self.channel_layer.group_discard(room, channel_name)
        logger.debug(f"Channel {channel_name} left {room}")

    async def broadcast(self, room: str, event: str, payload: dict[str, Any]) -> None:
        """Send a named event to every socket in the room."""
        await self.channel_layer.group_send(
            room,
            {
                "type": ROOM_EVENT_TYPE,
                "event": event,
                "payload": payload,
            },
        )

    def broadcast_sync(self, room: str, event: str, payload: dict[str, Any]) -> None:
        """Synchronous broadcast for service code running outside the event loop."""
        async_to_sync(self.broadcast)(room, event, payload)
