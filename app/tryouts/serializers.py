"""
Serializers for the tryout chat API and tryout events.

Serializer Hierarchy:
    TryoutMessageSerializer: One log entry (also the `message` of every event)
    TryoutChatListSerializer: "My tryouts" list entry
    TryoutChatDetailSerializer: Full chat with its message log

    StartTryoutSerializer, TryoutMessageCreateSerializer, EndTryoutSerializer,
    SendOfferSerializer, RejectOfferSerializer: Command input
"""

from __future__ import annotations

from rest_framework import serializers

from chat.constants import wire_user_id
from tryouts.constants import TRYOUT_CONFIG
from tryouts.models import ChatType, EndedByKind, TryoutChat, TryoutMessage


class TryoutMessageSerializer(serializers.ModelSerializer):
    """A message in the log; sender is SYSTEM_ID for system entries."""

    sender = serializers.SerializerMethodField()
    messageType = serializers.CharField(source="message_type", read_only=True)

    class Meta:
        model = TryoutMessage
        fields = ["id", "sender", "message", "messageType", "metadata", "timestamp"]
        read_only_fields = fields

    def get_sender(self, obj: TryoutMessage) -> str:
        return wire_user_id(obj.sender_id)


def tryout_message_data(message: TryoutMessage) -> dict:
    """Plain dict for channel layer payloads."""
    return dict(TryoutMessageSerializer(message).data)


class TryoutChatListSerializer(serializers.ModelSerializer):
    teamId = serializers.CharField(source="team_id", read_only=True)
    applicantId = serializers.SerializerMethodField()
    applicationId = serializers.CharField(source="application_id", read_only=True)
    chatType = serializers.CharField(source="chat_type", read_only=True)
    tryoutStatus = serializers.CharField(source="tryout_status", read_only=True)
    teamOffer = serializers.SerializerMethodField()
    expiresAt = serializers.DateTimeField(source="expires_at", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = TryoutChat
        fields = [
            "id",
            "teamId",
            "applicantId",
            "applicationId",
            "chatType",
            "status",
            "tryoutStatus",
            "teamOffer",
            "locked",
            "metadata",
            "expiresAt",
            "createdAt",
        ]
        read_only_fields = fields

    def get_applicantId(self, obj: TryoutChat) -> str:
        return str(obj.applicant_id)

    def get_teamOffer(self, obj: TryoutChat) -> dict:
        return obj.offer_data()


class TryoutChatDetailSerializer(TryoutChatListSerializer):
    """Chat detail including participants, end metadata and the message log."""

    participants = serializers.SerializerMethodField()
    endedAt = serializers.DateTimeField(source="ended_at", read_only=True)
    endedBy = serializers.CharField(source="ended_by_kind", read_only=True)
    endedById = serializers.SerializerMethodField()
    endReason = serializers.CharField(source="end_reason", read_only=True)
    messages = TryoutMessageSerializer(many=True, read_only=True)

    class Meta(TryoutChatListSerializer.Meta):
        fields = TryoutChatListSerializer.Meta.fields + [
            "participants",
            "endedAt",
            "endedBy",
            "endedById",
            "endReason",
            "messages",
        ]
        read_only_fields = fields

    def get_participants(self, obj: TryoutChat) -> list[str]:
        return [str(pk) for pk in obj.participants.values_list("pk", flat=True)]

    def get_endedById(self, obj: TryoutChat) -> str | None:
        return str(obj.ended_by_id) if obj.ended_by_id else None


# =============================================================================
# Command input
# =============================================================================


class StartTryoutSerializer(serializers.Serializer):
    applicationId = serializers.CharField(max_length=64)
    teamRepresentativeIds = serializers.ListField(
        child=serializers.CharField(), required=False, allow_empty=True
    )
    chatType = serializers.ChoiceField(choices=ChatType.choices, default=ChatType.APPLICATION)


class TryoutMessageCreateSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=TRYOUT_CONFIG.MAX_MESSAGE_LENGTH)


class EndTryoutSerializer(serializers.Serializer):
    endedByKind = serializers.ChoiceField(choices=EndedByKind.choices)
    # Blank reasons reach the service, which reports VALIDATION_ERROR
    reason = serializers.CharField(
        max_length=TRYOUT_CONFIG.MAX_REASON_LENGTH, allow_blank=True, trim_whitespace=False
    )


class SendOfferSerializer(serializers.Serializer):
    message = serializers.CharField(
        max_length=TRYOUT_CONFIG.MAX_OFFER_MESSAGE_LENGTH, allow_blank=True, default=""
    )


class RejectOfferSerializer(serializers.Serializer):
    reason = serializers.CharField(
        max_length=TRYOUT_CONFIG.MAX_REASON_LENGTH, allow_blank=True, required=False
    )
