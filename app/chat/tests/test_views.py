"""
Tests for the direct messaging API views.

Related files:
    - views.py: Implementation under test
    - urls.py: /api/v1/chat/ routes
"""

import warnings

from rest_framework import status

from chat.constants import SYSTEM_ID
from chat.models import DirectMessage, InvitationStatus
from chat.tests.factories import (
    DirectMessageFactory,
    InvitationMessageFactory,
    SystemMessageFactory,
)

BASE = "/api/v1/chat"


class TestConversationListView:
    def test_requires_authentication(self, api_client, db):
        response = api_client.get(f"{BASE}/conversations/")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_lists_peers(self, user, other_user, conversation, api_client_for):
        SystemMessageFactory(receiver=user)

        response = api_client_for(user).get(f"{BASE}/conversations/")

        assert response.status_code == status.HTTP_200_OK
        assert [p["id"] for p in response.data] == [SYSTEM_ID, str(other_user.pk)]
        assert response.data[0]["isSystem"] is True
        assert response.data[1]["displayName"] == other_user.display_name

    def test_page_size_defaults_to_50_and_caps_at_100(self, user, api_client_for):
        DirectMessageFactory.create_batch(101, sender=user)
        client = api_client_for(user)

        default_page = client.get(f"{BASE}/conversations/")
        capped_page = client.get(f"{BASE}/conversations/", {"limit": 500})

        assert len(default_page.data) == 50
        assert len(capped_page.data) == 100

    def test_invalid_limit_is_bad_request(self, user, api_client_for):
        response = api_client_for(user).get(f"{BASE}/conversations/", {"limit": "many"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "VALIDATION_ERROR"


class TestConversationMessagesView:
    def test_returns_page_in_camel_case(self, user, other_user, conversation, api_client_for):
        response = api_client_for(user).get(f"{BASE}/conversations/{other_user.pk}/messages/")

        assert response.status_code == status.HTTP_200_OK
        assert [m["id"] for m in response.data] == [m.id for m in conversation]
        first = response.data[0]
        assert first["senderId"] == str(user.pk)
        assert first["receiverId"] == str(other_user.pk)
        assert first["messageType"] == "text"

    def test_limit_query_param(self, user, other_user, conversation, api_client_for):
        response = api_client_for(user).get(
            f"{BASE}/conversations/{other_user.pk}/messages/", {"limit": 1}
        )

        assert [m["id"] for m in response.data] == [conversation[-1].id]

    def test_before_query_param(self, user, other_user, conversation, api_client_for):
        response = api_client_for(user).get(
            f"{BASE}/conversations/{other_user.pk}/messages/",
            {"before": conversation[1].timestamp.isoformat()},
        )

        assert [m["id"] for m in response.data] == [conversation[0].id]

    def test_naive_before_is_read_as_utc(self, user, other_user, conversation, api_client_for):
        naive = conversation[1].timestamp.replace(tzinfo=None)

        with warnings.catch_warnings():
            warnings.simplefilter("error", RuntimeWarning)
            response = api_client_for(user).get(
                f"{BASE}/conversations/{other_user.pk}/messages/",
                {"before": naive.isoformat()},
            )

        assert response.status_code == status.HTTP_200_OK
        assert [m["id"] for m in response.data] == [conversation[0].id]

    def test_malformed_before_is_bad_request(self, user, other_user, api_client_for):
        response = api_client_for(user).get(
            f"{BASE}/conversations/{other_user.pk}/messages/", {"before": "yesterday"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "VALIDATION_ERROR"

    def test_invalid_limit_is_bad_request(self, user, other_user, api_client_for):
        response = api_client_for(user).get(
            f"{BASE}/conversations/{other_user.pk}/messages/", {"limit": 0}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_peer_is_not_found(self, user, api_client_for):
        response = api_client_for(user).get(f"{BASE}/conversations/999999/messages/")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "NOT_FOUND"

    def test_system_conversation(self, user, api_client_for):
        notice = SystemMessageFactory(receiver=user)

        response = api_client_for(user).get(f"{BASE}/conversations/system/messages/")

        assert [m["id"] for m in response.data] == [notice.id]
        assert response.data[0]["senderId"] == SYSTEM_ID


class TestDirectMessageCreateView:
    def test_sends_message(self, user, other_user, api_client_for):
        response = api_client_for(user).post(
            f"{BASE}/messages/",
            {"receiverId": str(other_user.pk), "message": "gg"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["senderId"] == str(user.pk)
        assert DirectMessage.objects.filter(sender=user, receiver=other_user).count() == 1

    def test_unknown_receiver_is_not_found(self, user, api_client_for):
        response = api_client_for(user).post(
            f"{BASE}/messages/", {"receiverId": "999999", "message": "gg"}, format="json"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_missing_fields_are_bad_request(self, user, api_client_for):
        response = api_client_for(user).post(f"{BASE}/messages/", {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "VALIDATION_ERROR"
        assert "receiverId" in response.data["errors"]

    def test_cannot_send_as_another_user(self, user, other_user, api_client_for):
        response = api_client_for(user).post(
            f"{BASE}/messages/",
            {"receiverId": str(other_user.pk), "message": "hi", "senderId": str(other_user.pk)},
            format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_regular_user_cannot_send_as_system(self, user, other_user, api_client_for):
        response = api_client_for(user).post(
            f"{BASE}/messages/",
            {"receiverId": str(other_user.pk), "message": "hi", "senderId": SYSTEM_ID},
            format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_staff_can_send_as_system(self, staff_user, other_user, api_client_for):
        response = api_client_for(staff_user).post(
            f"{BASE}/messages/",
            {
                "receiverId": str(other_user.pk),
                "message": "Your match starts at 18:00",
                "messageType": "match_scheduled",
                "metadata": {"match_id": "m-1", "scheduled_at": "2026-10-20T18:00:00Z"},
                "senderId": SYSTEM_ID,
            },
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["senderId"] == SYSTEM_ID
        assert response.data["matchId"] == "m-1"


class TestInvitationResponseView:
    def test_accept(self, user, api_client_for):
        invitation = InvitationMessageFactory(receiver=user)

        response = api_client_for(user).post(
            f"{BASE}/messages/{invitation.pk}/respond/", {"accept": True}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["invitationStatus"] == InvitationStatus.ACCEPTED

    def test_second_answer_conflicts(self, user, api_client_for):
        invitation = InvitationMessageFactory(receiver=user, invitation_status=InvitationStatus.DECLINED)

        response = api_client_for(user).post(
            f"{BASE}/messages/{invitation.pk}/respond/", {"accept": True}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "INVALID_TRANSITION"

    def test_not_receiver_is_forbidden(self, user, other_user, api_client_for):
        invitation = InvitationMessageFactory(receiver=user)

        response = api_client_for(other_user).post(
            f"{BASE}/messages/{invitation.pk}/respond/", {"accept": True}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestTournamentReferenceView:
    def test_shares_tournament(self, user, other_user, api_client_for):
        response = api_client_for(user).post(
            f"{BASE}/tournament-reference/t-42/",
            {"captainId": str(other_user.pk), "tournamentName": "Spring Cup"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["message"] == "Check out this tournament: Spring Cup"
        assert response.data["tournamentId"] == "t-42"
        assert response.data["messageType"] == "tournament_reference"
