"""
API views for direct messages.

URL Structure:
    /api/v1/chat/conversations/                             GET
    /api/v1/chat/conversations/{peer}/messages/             GET
    /api/v1/chat/messages/                                  POST
    /api/v1/chat/messages/{id}/respond/                     POST
    /api/v1/chat/tournament-reference/{tournament_id}/      POST

{peer} is a user id or "system". All operations go through
DirectMessageService; failures are mapped onto HTTP statuses by
core.views.failure_response.
"""

from __future__ import annotations

from django.utils import timezone
from django.utils.dateparse import parse_datetime
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.views import failure_response

from chat.constants import SYSTEM_ID, ErrorCode, is_system_id
from chat.serializers import (
    ConversationPeerSerializer,
    DirectMessageCreateSerializer,
    DirectMessageSerializer,
    InvitationResponseSerializer,
    TournamentReferenceSerializer,
)
from chat.services import DirectMessageService


class ConversationListView(APIView):
    """
    Distinct conversation peers of the current user.

    GET /api/v1/chat/conversations/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_conversation_peers",
        summary="List conversation peers",
        description=(
            "Users the caller exchanged direct messages with, most recent first. "
            "The system peer is listed first when the caller has system messages."
        ),
        parameters=[
            OpenApiParameter(
                name="limit",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description="Number of peers (default 50, max 100)",
                required=False,
            ),
        ],
        responses={
            200: ConversationPeerSerializer(many=True),
            400: OpenApiResponse(description="Malformed limit"),
        },
        tags=["Chat - Direct Messages"],
    )
    def get(self, request):
        result = DirectMessageService.list_conversation_peers(
            request.user, limit=request.query_params.get("limit")
        )
        if not result.success:
            return failure_response(result)
        return Response(ConversationPeerSerializer(result.data, many=True).data)


class ConversationMessagesView(APIView):
    """
    Page of a conversation, oldest first.

    GET /api/v1/chat/conversations/{peer}/messages/?before=<iso8601>&limit=<n>
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_conversation_messages",
        summary="Get conversation page",
        description=(
            "Newest messages of the conversation with {peer} strictly before "
            "`before`, returned oldest first. `limit` defaults to 50 and is capped at 100."
        ),
        parameters=[
            OpenApiParameter(
                name="before",
                type=OpenApiTypes.DATETIME,
                location=OpenApiParameter.QUERY,
                description="Only messages strictly earlier than this time",
                required=False,
            ),
            OpenApiParameter(
                name="limit",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description="Page size (default 50, max 100)",
                required=False,
            ),
        ],
        responses={
            200: DirectMessageSerializer(many=True),
            400: OpenApiResponse(description="Malformed peer, before or limit"),
            404: OpenApiResponse(description="Peer not found"),
        },
        tags=["Chat - Direct Messages"],
    )
    def get(self, request, peer):
        before = request.query_params.get("before")
        before_dt = None
        if before:
            try:
                before_dt = parse_datetime(before)
            except ValueError:
                before_dt = None
            if before_dt is None:
                return Response(
                    {
                        "error": "before must be an ISO 8601 datetime",
                        "error_code": ErrorCode.VALIDATION_ERROR,
                    },
                    status=status.HTTP_400_BAD_REQUEST,
                )
            if timezone.is_naive(before_dt):
                before_dt = timezone.make_aware(before_dt)

        result = DirectMessageService.fetch_conversation(
            user=request.user,
            peer=SYSTEM_ID if is_system_id(peer) else peer,
            before=before_dt,
            limit=request.query_params.get("limit"),
        )
        if not result.success:
            return failure_response(result)
        return Response(DirectMessageSerializer(result.data, many=True).data)


class DirectMessageCreateView(APIView):
    """
    Send a direct message.

    POST /api/v1/chat/messages/

    Staff callers may pass senderId "system" to send a system notification.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="send_direct_message",
        summary="Send direct message",
        request=DirectMessageCreateSerializer,
        responses={
            201: DirectMessageSerializer,
            400: OpenApiResponse(description="Invalid message, type or payload"),
            403: OpenApiResponse(description="Sending as someone else"),
            404: OpenApiResponse(description="Receiver not found"),
        },
        tags=["Chat - Direct Messages"],
    )
    def post(self, request):
        serializer = DirectMessageCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {
                    "error": "Invalid message",
                    "error_code": ErrorCode.VALIDATION_ERROR,
                    "errors": serializer.errors,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        data = serializer.validated_data

        sender = request.user
        sender_id = data.get("senderId")
        if sender_id is not None and sender_id != str(request.user.pk):
            if not (is_system_id(sender_id) and request.user.is_staff):
                return Response(
                    {
                        "error": "You can only send messages as yourself",
                        "error_code": ErrorCode.FORBIDDEN,
                    },
                    status=status.HTTP_403_FORBIDDEN,
                )
            sender = SYSTEM_ID

        result = DirectMessageService.send_direct(
            sender=sender,
            receiver_id=data["receiverId"],
            text=data["message"],
            message_type=data["messageType"],
            metadata=data.get("metadata"),
            invitation_id=data.get("invitationId"),
            tournament_id=data.get("tournamentId"),
            match_id=data.get("matchId"),
            caller=request.user,
        )
        if not result.success:
            return failure_response(result)
        return Response(DirectMessageSerializer(result.data).data, status=status.HTTP_201_CREATED)


class InvitationResponseView(APIView):
    """
    Accept or decline an invitation message.

    POST /api/v1/chat/messages/{id}/respond/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="respond_to_invitation",
        summary="Answer invitation",
        request=InvitationResponseSerializer,
        responses={
            200: DirectMessageSerializer,
            403: OpenApiResponse(description="Not the receiver"),
            404: OpenApiResponse(description="Message not found"),
            409: OpenApiResponse(description="Invitation already answered"),
        },
        tags=["Chat - Direct Messages"],
    )
    def post(self, request, pk):
        serializer = InvitationResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = DirectMessageService.respond_to_invitation(
            user=request.user,
            message_id=pk,
            accept=serializer.validated_data["accept"],
        )
        if not result.success:
            return failure_response(result)
        return Response(DirectMessageSerializer(result.data).data)


class TournamentReferenceView(APIView):
    """
    Share a tournament with a team captain.

    POST /api/v1/chat/tournament-reference/{tournament_id}/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="send_tournament_reference",
        summary="Share tournament with captain",
        request=TournamentReferenceSerializer,
        responses={
            201: DirectMessageSerializer,
            404: OpenApiResponse(description="Captain not found"),
        },
        tags=["Chat - Direct Messages"],
    )
    def post(self, request, tournament_id):
        serializer = TournamentReferenceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = DirectMessageService.send_tournament_reference(
            sender=request.user,
            captain_id=serializer.validated_data["captainId"],
            tournament_id=tournament_id,
            tournament_name=serializer.validated_data["tournamentName"],
        )
        if not result.success:
            return failure_response(result)
        return Response(DirectMessageSerializer(result.data).data, status=status.HTTP_201_CREATED)
