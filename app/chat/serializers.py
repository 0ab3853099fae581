"""
Serializers for the direct messaging API and socket events.

The same representation is used for REST pages and receiveMessage events, so
a client can merge both sources into one message list.

Serializer Hierarchy:
    DirectMessageSerializer: Wire representation of a stored message
    ConversationPeerSerializer: Entry of the conversation list
    DirectMessageCreateSerializer: Send a direct message
    InvitationResponseSerializer: Accept or decline an invitation
    TournamentReferenceSerializer: Share a tournament with a captain
"""

from __future__ import annotations

from rest_framework import serializers

from chat.constants import MESSAGE_CONFIG, wire_user_id
from chat.models import DirectMessage, MessageType


class DirectMessageSerializer(serializers.ModelSerializer):
    """
    Read representation of a direct message.

    senderId is SYSTEM_ID for system-authored messages.
    """

    senderId = serializers.SerializerMethodField()
    receiverId = serializers.SerializerMethodField()
    messageType = serializers.CharField(source="message_type", read_only=True)
    invitationId = serializers.CharField(source="invitation_id", read_only=True)
    tournamentId = serializers.CharField(source="tournament_id", read_only=True)
    matchId = serializers.CharField(source="match_id", read_only=True)
    invitationStatus = serializers.CharField(
        source="invitation_status", read_only=True, allow_null=True
    )

    class Meta:
        model = DirectMessage
        fields = [
            "id",
            "senderId",
            "receiverId",
            "message",
            "messageType",
            "metadata",
            "invitationId",
            "tournamentId",
            "matchId",
            "invitationStatus",
            "timestamp",
        ]
        read_only_fields = fields

    def get_senderId(self, obj: DirectMessage) -> str:
        return wire_user_id(obj.sender_id)

    def get_receiverId(self, obj: DirectMessage) -> str:
        return str(obj.receiver_id)


def direct_message_data(message: DirectMessage) -> dict:
    """Plain dict for channel layer payloads."""
    return dict(DirectMessageSerializer(message).data)


class ConversationPeerSerializer(serializers.Serializer):
    """A counterpart in the conversation list (a user or the system)."""

    id = serializers.CharField()
    displayName = serializers.CharField(source="display_name")
    isSystem = serializers.BooleanField(source="is_system")
    lastMessageAt = serializers.DateTimeField(source="last_message_at", allow_null=True)


class DirectMessageCreateSerializer(serializers.Serializer):
    """
    Send a direct message.

    senderId may only be given as SYSTEM_ID, by staff callers.
    """

    receiverId = serializers.CharField()
    message = serializers.CharField(max_length=MESSAGE_CONFIG.MAX_CONTENT_LENGTH)
    messageType = serializers.ChoiceField(
        choices=MessageType.choices, default=MessageType.TEXT
    )
    metadata = serializers.DictField(required=False, default=dict)
    invitationId = serializers.CharField(required=False, allow_blank=True, default="")
    tournamentId = serializers.CharField(required=False, allow_blank=True, default="")
    matchId = serializers.CharField(required=False, allow_blank=True, default="")
    senderId = serializers.CharField(required=False)


class InvitationResponseSerializer(serializers.Serializer):
    accept = serializers.BooleanField()


class TournamentReferenceSerializer(serializers.Serializer):
    captainId = serializers.CharField()
    tournamentName = serializers.CharField(max_length=200)
