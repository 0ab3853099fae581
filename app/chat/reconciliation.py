"""
Client session reconciliation.

Pure functions describing how a client view folds server events into its
local state. A client adds its own message optimistically under a temporary
"temp_" id; when the server echo arrives carrying the persisted id, the
temporary entry is replaced in place instead of being duplicated.

State shapes:
    tryout view:  {"chatId", "tryoutStatus", "teamOffer", "endedBy",
                   "endReason", "locked", "messages": [...]}
    direct view:  {"peer", "messages": [...]}

Events are the dicts a socket receives: {"type": <event name>, ...payload}.

Nothing here touches the network or the database; inputs are never mutated.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from chat.constants import MESSAGE_CONFIG
from chat.events import Event

if TYPE_CHECKING:
    from typing import Any

Message = dict
State = dict


def is_temporary(message: Message) -> bool:
    return str(message.get("id", "")).startswith(MESSAGE_CONFIG.TEMP_ID_PREFIX)


def add_optimistic_message(
    state: State,
    sender: str,
    text: str,
    temp_id: str | None = None,
    sender_key: str = "sender",
) -> State:
    """Append a locally composed message under a temporary id."""
    temp_id = temp_id or f"{MESSAGE_CONFIG.TEMP_ID_PREFIX}{uuid.uuid4().hex}"
    message = {
        "id": temp_id,
        sender_key: sender,
        "message": text,
        "messageType": "text",
        "pending": True,
    }
    return {**state, "messages": [*state.get("messages", []), message]}


def merge_message(
    messages: list[Message],
    incoming: Message,
    sender_key: str = "sender",
) -> list[Message]:
    """
    Fold one server-confirmed message into a message list.

    - Same id already present: list unchanged
    - Temporary entry with the same (sender, message): replaced in place
    - Otherwise: appended
    """
    if any(m.get("id") == incoming.get("id") for m in messages):
        return list(messages)

    for index, existing in enumerate(messages):
        if (
            is_temporary(existing)
            and existing.get(sender_key) == incoming.get(sender_key)
            and existing.get("message") == incoming.get("message")
        ):
            return [*messages[:index], incoming, *messages[index + 1:]]

    return [*messages, incoming]


def _with_carried_message(state: State, event: dict[str, Any]) -> list[Message]:
    messages = state.get("messages", [])
    if event.get("message"):
        return merge_message(messages, event["message"])
    return list(messages)


def apply_event(state: State, event: dict[str, Any]) -> State:
    """
    Return the state after applying a server event.

    Events for another chat, or of an unknown type, leave the state as is.
    """
    event_type = event.get("type")

    if event_type == Event.RECEIVE_MESSAGE:
        peer = state.get("peer")
        if peer is None or peer not in (event.get("senderId"), event.get("receiverId")):
            return state
        incoming = {k: v for k, v in event.items() if k not in ("type", "alert")}
        return {
            **state,
            "messages": merge_message(state.get("messages", []), incoming, sender_key="senderId"),
        }

    if event.get("chatId") is None or event.get("chatId") != state.get("chatId"):
        return state

    if event_type == Event.NEW_TRYOUT_MESSAGE:
        return {
            **state,
            "messages": merge_message(state.get("messages", []), event["message"]),
        }

    if event_type == Event.TRYOUT_ENDED:
        return {
            **state,
            "tryoutStatus": event["tryoutStatus"],
            "endedBy": event.get("endedBy"),
            "endReason": event.get("reason"),
            "locked": True,
            "messages": _with_carried_message(state, event),
        }

    if event_type == Event.TEAM_OFFER_SENT:
        return {
            **state,
            "tryoutStatus": event.get("tryoutStatus", "offer_sent"),
            "teamOffer": event.get("offer"),
            "locked": True,
            "messages": _with_carried_message(state, event),
        }

    if event_type in (Event.TEAM_OFFER_ACCEPTED, Event.TEAM_OFFER_REJECTED):
        default_status = (
            "offer_accepted" if event_type == Event.TEAM_OFFER_ACCEPTED else "offer_rejected"
        )
        return {
            **state,
            "tryoutStatus": event.get("tryoutStatus", default_status),
            "teamOffer": event.get("offer", state.get("teamOffer")),
            "locked": True,
            "messages": _with_carried_message(state, event),
        }

    return state
