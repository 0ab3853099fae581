"""
Tests for client session reconciliation.

Related files:
    - reconciliation.py: Implementation under test
"""

from chat.reconciliation import (
    add_optimistic_message,
    apply_event,
    is_temporary,
    merge_message,
)

CHAT_ID = "3f1c2a5e-0000-4000-8000-000000000001"


def tryout_state(**overrides):
    state = {
        "chatId": CHAT_ID,
        "tryoutStatus": "active",
        "teamOffer": {"status": "none"},
        "endedBy": None,
        "endReason": None,
        "locked": False,
        "messages": [],
    }
    state.update(overrides)
    return state


def server_message(id_, sender="7", text="hello", message_type="text"):
    return {"id": id_, "sender": sender, "message": text, "messageType": message_type}


class TestOptimisticMessages:
    """Tests for add_optimistic_message() and merge_message()."""

    def test_optimistic_message_gets_temporary_id(self):
        state = add_optimistic_message(tryout_state(), sender="7", text="hello")

        [message] = state["messages"]
        assert is_temporary(message)
        assert message["pending"] is True

    def test_echo_replaces_temporary_message_in_place(self):
        """
        Given an optimistic message followed by another message
        When the server echo of the optimistic one arrives
        Then it replaces the temporary entry at the same position
        """
        state = add_optimistic_message(tryout_state(), sender="7", text="hello", temp_id="temp_a")
        state["messages"].append(server_message(40, sender="8", text="hi"))

        merged = merge_message(state["messages"], server_message(41, sender="7", text="hello"))

        assert [m["id"] for m in merged] == [41, 40]

    def test_duplicate_server_message_is_ignored(self):
        messages = [server_message(41)]

        assert merge_message(messages, server_message(41)) == messages

    def test_other_senders_message_is_appended(self):
        messages = [{"id": "temp_a", "sender": "7", "message": "hello"}]

        merged = merge_message(messages, server_message(41, sender="8", text="hello"))

        assert [m["id"] for m in merged] == ["temp_a", 41]

    def test_inputs_are_not_mutated(self):
        messages = [{"id": "temp_a", "sender": "7", "message": "hello"}]

        merge_message(messages, server_message(41))

        assert messages == [{"id": "temp_a", "sender": "7", "message": "hello"}]


class TestApplyEvent:
    """Tests for apply_event()."""

    def test_new_tryout_message_is_merged(self):
        event = {"type": "newTryoutMessage", "chatId": CHAT_ID, "message": server_message(1)}

        state = apply_event(tryout_state(), event)

        assert state["messages"] == [server_message(1)]

    def test_event_for_another_chat_is_ignored(self):
        event = {"type": "newTryoutMessage", "chatId": "other", "message": server_message(1)}
        state = tryout_state()

        assert apply_event(state, event) is state

    def test_unknown_event_is_ignored(self):
        state = tryout_state()

        assert apply_event(state, {"type": "somethingElse", "chatId": CHAT_ID}) is state

    def test_tryout_ended_locks_and_records_reason(self):
        event = {
            "type": "tryoutEnded",
            "chatId": CHAT_ID,
            "tryoutStatus": "ended_by_team",
            "endedBy": "team",
            "endedById": "8",
            "reason": "Roster full",
            "message": server_message(5, sender="system", message_type="system"),
        }

        state = apply_event(tryout_state(), event)

        assert state["tryoutStatus"] == "ended_by_team"
        assert state["endedBy"] == "team"
        assert state["endReason"] == "Roster full"
        assert state["locked"] is True
        assert state["messages"][-1]["id"] == 5

    def test_offer_sent_then_accepted(self):
        """
        Given an active tryout view
        When teamOfferSent and then teamOfferAccepted arrive
        Then the view ends in offer_accepted with the accepted offer shown
        """
        sent = {
            "type": "teamOfferSent",
            "chatId": CHAT_ID,
            "tryoutStatus": "offer_sent",
            "offer": {"status": "pending"},
            "message": server_message(6, sender="8", message_type="team_offer"),
        }
        accepted = {
            "type": "teamOfferAccepted",
            "chatId": CHAT_ID,
            "tryoutStatus": "offer_accepted",
            "offer": {"status": "accepted"},
            "message": server_message(7, sender="system", message_type="system"),
        }

        state = apply_event(apply_event(tryout_state(), sent), accepted)

        assert state["tryoutStatus"] == "offer_accepted"
        assert state["teamOffer"] == {"status": "accepted"}
        assert state["locked"] is True
        assert [m["id"] for m in state["messages"]] == [6, 7]

    def test_offer_rejected_keeps_previous_offer_when_missing(self):
        state = tryout_state(tryoutStatus="offer_sent", teamOffer={"status": "pending"})

        state = apply_event(state, {"type": "teamOfferRejected", "chatId": CHAT_ID})

        assert state["tryoutStatus"] == "offer_rejected"
        assert state["teamOffer"] == {"status": "pending"}

    def test_receive_message_for_open_conversation(self):
        state = add_optimistic_message(
            {"peer": "8", "messages": []}, sender="7", text="gg", temp_id="temp_x", sender_key="senderId"
        )
        echo = {
            "type": "receiveMessage",
            "id": 90,
            "senderId": "7",
            "receiverId": "8",
            "message": "gg",
            "alert": {"title": "x"},
        }

        state = apply_event(state, echo)

        assert state["messages"] == [
            {"id": 90, "senderId": "7", "receiverId": "8", "message": "gg"}
        ]

    def test_receive_message_for_other_conversation_is_ignored(self):
        state = {"peer": "8", "messages": []}
        event = {"type": "receiveMessage", "id": 91, "senderId": "9", "receiverId": "7", "message": "yo"}

        assert apply_event(state, event) is state
