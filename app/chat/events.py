"""
Event broadcaster.

Turns committed state changes into named client events and hands them to the
room registry. Every publish is deferred with transaction.on_commit, so an
event is never delivered for a change that rolled back, and a client that
refetches after an event always sees at least what the event implied.

Events (server -> client):
    newTryoutMessage   {chatId, message}
    tryoutEnded        {chatId, tryoutStatus, endedBy, endedById, reason, message}
    teamOfferSent      {chatId, tryoutStatus, offer, message}
    teamOfferAccepted  {chatId, tryoutStatus, offer, message}
    teamOfferRejected  {chatId, tryoutStatus, offer, reason, message}
    receiveMessage     {direct message fields, alert?}
    tryoutChatJoined   {chatId, room}
    messageSent        {message}
    error              {error_code, message}

Delivery is fire-and-forget: a transport failure is logged and never raised
into the mutation that triggered it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from django.apps import apps
from django.db import transaction

from chat.rooms import RoomRegistry, tryout_room, user_room

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


class Event:
    """Client-facing event names."""

    NEW_TRYOUT_MESSAGE: Final[str] = "newTryoutMessage"
    TRYOUT_ENDED: Final[str] = "tryoutEnded"
    TEAM_OFFER_SENT: Final[str] = "teamOfferSent"
    TEAM_OFFER_ACCEPTED: Final[str] = "teamOfferAccepted"
    TEAM_OFFER_REJECTED: Final[str] = "teamOfferRejected"
    RECEIVE_MESSAGE: Final[str] = "receiveMessage"
    TRYOUT_CHAT_JOINED: Final[str] = "tryoutChatJoined"
    MESSAGE_SENT: Final[str] = "messageSent"
    ERROR: Final[str] = "error"


class EventBroadcaster:
    """
    Publishes domain events to rooms after the surrounding transaction commits.

    Usage:
        broadcaster = EventBroadcaster.default()
        with transaction.atomic():
            ...
            broadcaster.new_tryout_message(chat.id, message_data)
    """

    def __init__(self, registry: RoomRegistry):
        self.registry = registry

    @classmethod
    def default(cls) -> EventBroadcaster:
        """Broadcaster over the process room registry."""
        return cls(apps.get_app_config("chat").rooms)

    def publish(self, room: str, event: str, payload: dict[str, Any]) -> None:
        """Schedule delivery of an event once the current transaction commits."""
        transaction.on_commit(lambda: self._deliver(room, event, payload))

    def _deliver(self, room: str, event: str, payload: dict[str, Any]) -> None:
        try:
            self.registry.broadcast_sync(room, event, payload)
        except Exception:
            logger.exception(f"Failed to deliver {event} to {room}")
            return
        logger.debug(f"Delivered {event} to {room}")

    # -------------------------------------------------------------------------
    # Tryout chat events
    # -------------------------------------------------------------------------

    def new_tryout_message(self, chat_id, message: dict[str, Any]) -> None:
        self.publish(
            tryout_room(chat_id),
            Event.NEW_TRYOUT_MESSAGE,
            {"chatId": str(chat_id), "message": message},
        )

    def tryout_ended(
        self,
        chat_id,
        tryout_status: str,
        ended_by: str,
        ended_by_id: str,
        reason: str,
        message: dict[str, Any],
    ) -> None:
        self.publish(
            tryout_room(chat_id),
            Event.TRYOUT_ENDED,
            {
                "chatId": str(chat_id),
                "tryoutStatus": tryout_status,
                "endedBy": ended_by,
                "endedById": ended_by_id,
                "reason": reason,
                "message": message,
            },
        )

    def team_offer_sent(
        self, chat_id, tryout_status: str, offer: dict[str, Any], message: dict[str, Any]
    ) -> None:
        self.publish(
            tryout_room(chat_id),
            Event.TEAM_OFFER_SENT,
            {
                "chatId": str(chat_id),
                "tryoutStatus": tryout_status,
                "offer": offer,
                "message": message,
            },
        )

    def team_offer_accepted(
        self, chat_id, tryout_status: str, offer: dict[str, Any], message: dict[str, Any]
    ) -> None:
        self.publish(
            tryout_room(chat_id),
            Event.TEAM_OFFER_ACCEPTED,
            {
                "chatId": str(chat_id),
                "tryoutStatus": tryout_status,
                "offer": offer,
                "message": message,
            },
        )

    def team_offer_rejected(
        self,
        chat_id,
        tryout_status: str,
        offer: dict[str, Any],
        reason: str,
        message: dict[str, Any],
    ) -> None:
        self.publish(
            tryout_room(chat_id),
            Event.TEAM_OFFER_REJECTED,
            {
                "chatId": str(chat_id),
                "tryoutStatus": tryout_status,
                "offer": offer,
                "reason": reason,
                "message": message,
            },
        )

    # -------------------------------------------------------------------------
    # Direct message events
    # -------------------------------------------------------------------------

    def direct_message(
        self, receiver_id, message: dict[str, Any], alert: dict[str, Any] | None = None
    ) -> None:
        """Deliver a direct message to the receiver's own room only."""
        payload = dict(message)
        if alert:
            payload["alert"] = alert
        self.publish(user_room(receiver_id), Event.RECEIVE_MESSAGE, payload)
