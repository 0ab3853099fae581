"""
API views for tryout chats.

URL Structure:
    /api/v1/tryouts/start/                      POST
    /api/v1/tryouts/chats/                      GET   (?status=active|completed|cancelled&limit=<n>)
    /api/v1/tryouts/chats/{id}/                 GET
    /api/v1/tryouts/chats/{id}/messages/        POST
    /api/v1/tryouts/chats/{id}/end/             POST
    /api/v1/tryouts/chats/{id}/send-offer/      POST
    /api/v1/tryouts/chats/{id}/accept-offer/    POST
    /api/v1/tryouts/chats/{id}/reject-offer/    POST

Every mutation goes through TryoutLifecycleService, which also publishes the
matching socket event once the change commits.
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.views import failure_response

from tryouts.serializers import (
    EndTryoutSerializer,
    RejectOfferSerializer,
    SendOfferSerializer,
    StartTryoutSerializer,
    TryoutChatDetailSerializer,
    TryoutChatListSerializer,
    TryoutMessageCreateSerializer,
    TryoutMessageSerializer,
)
from tryouts.services import TryoutLifecycleService

TRANSITION_RESPONSES = {
    200: TryoutChatDetailSerializer,
    403: OpenApiResponse(description="Caller may not perform this transition"),
    404: OpenApiResponse(description="Chat not found"),
    409: OpenApiResponse(description="Chat is not in the required state"),
}


class StartTryoutView(APIView):
    """
    Open a tryout chat for a pending application.

    POST /api/v1/tryouts/start/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="start_tryout",
        summary="Start tryout",
        request=StartTryoutSerializer,
        responses={
            201: TryoutChatDetailSerializer,
            403: OpenApiResponse(description="Caller does not speak for the team"),
            404: OpenApiResponse(description="Application or applicant not found"),
            409: OpenApiResponse(description="Application is not pending"),
            503: OpenApiResponse(description="Application tracker unavailable"),
        },
        tags=["Tryouts"],
    )
    def post(self, request):
        serializer = StartTryoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = TryoutLifecycleService.start_tryout(
            application_id=data["applicationId"],
            started_by=request.user,
            team_representatives=data.get("teamRepresentativeIds") or None,
            chat_type=data["chatType"],
        )
        if not result.success:
            return failure_response(result)
        return Response(
            TryoutChatDetailSerializer(result.data).data,
            status=status.HTTP_201_CREATED,
        )


class TryoutChatListView(APIView):
    """
    Tryout chats the current user participates in, newest first.

    GET /api/v1/tryouts/chats/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_tryout_chats",
        summary="My tryouts",
        parameters=[
            OpenApiParameter(
                name="status",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                description="Coarse status filter: active, completed or cancelled",
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
            200: TryoutChatListSerializer(many=True),
            400: OpenApiResponse(description="Unknown status or malformed limit"),
        },
        tags=["Tryouts"],
    )
    def get(self, request):
        result = TryoutLifecycleService.list_user_chats(
            request.user,
            status=request.query_params.get("status"),
            limit=request.query_params.get("limit"),
        )
        if not result.success:
            return failure_response(result)
        return Response(TryoutChatListSerializer(result.data, many=True).data)


class TryoutChatDetailView(APIView):
    """
    Chat detail with the full message log.

    GET /api/v1/tryouts/chats/{id}/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_tryout_chat",
        summary="Get tryout chat",
        responses={
            200: TryoutChatDetailSerializer,
            403: OpenApiResponse(description="Not a participant"),
            404: OpenApiResponse(description="Chat not found"),
        },
        tags=["Tryouts"],
    )
    def get(self, request, chat_id):
        result = TryoutLifecycleService.get_chat_for_user(chat_id, request.user)
        if not result.success:
            return failure_response(result)
        return Response(TryoutChatDetailSerializer(result.data).data)


class TryoutMessageCreateView(APIView):
    """
    Post a message to an active tryout chat.

    POST /api/v1/tryouts/chats/{id}/messages/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="post_tryout_message",
        summary="Post tryout message",
        request=TryoutMessageCreateSerializer,
        responses={
            201: TryoutMessageSerializer,
            403: OpenApiResponse(description="Not a participant"),
            404: OpenApiResponse(description="Chat not found"),
            409: OpenApiResponse(description="Chat is locked"),
        },
        tags=["Tryouts"],
    )
    def post(self, request, chat_id):
        serializer = TryoutMessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = TryoutLifecycleService.post_message(
            chat_id, request.user, serializer.validated_data["message"]
        )
        if not result.success:
            return failure_response(result)
        return Response(TryoutMessageSerializer(result.data).data, status=status.HTTP_201_CREATED)


class EndTryoutView(APIView):
    """
    End an active tryout as the team or as the player.

    POST /api/v1/tryouts/chats/{id}/end/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="end_tryout",
        summary="End tryout",
        request=EndTryoutSerializer,
        responses=TRANSITION_RESPONSES,
        tags=["Tryouts"],
    )
    def post(self, request, chat_id):
        serializer = EndTryoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = TryoutLifecycleService.end_tryout(
            chat_id,
            ended_by=request.user,
            ended_by_kind=serializer.validated_data["endedByKind"],
            reason=serializer.validated_data["reason"],
        )
        if not result.success:
            return failure_response(result)
        return Response(TryoutChatDetailSerializer(result.data).data)


class SendOfferView(APIView):
    """POST /api/v1/tryouts/chats/{id}/send-offer/"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="send_team_offer",
        summary="Send team offer",
        request=SendOfferSerializer,
        responses=TRANSITION_RESPONSES,
        tags=["Tryouts"],
    )
    def post(self, request, chat_id):
        serializer = SendOfferSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = TryoutLifecycleService.send_offer(
            chat_id, request.user, serializer.validated_data["message"]
        )
        if not result.success:
            return failure_response(result)
        return Response(TryoutChatDetailSerializer(result.data).data)


class AcceptOfferView(APIView):
    """POST /api/v1/tryouts/chats/{id}/accept-offer/"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="accept_team_offer",
        summary="Accept team offer",
        request=None,
        responses={
            **TRANSITION_RESPONSES,
            503: OpenApiResponse(description="Team roster service unavailable"),
        },
        tags=["Tryouts"],
    )
    def post(self, request, chat_id):
        result = TryoutLifecycleService.accept_offer(chat_id, request.user)
        if not result.success:
            return failure_response(result)
        return Response(TryoutChatDetailSerializer(result.data).data)


class RejectOfferView(APIView):
    """POST /api/v1/tryouts/chats/{id}/reject-offer/"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="reject_team_offer",
        summary="Reject team offer",
        request=RejectOfferSerializer,
        responses=TRANSITION_RESPONSES,
        tags=["Tryouts"],
    )
    def post(self, request, chat_id):
        serializer = RejectOfferSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = TryoutLifecycleService.reject_offer(
            chat_id, request.user, serializer.validated_data.get("reason")
        )
        if not result.success:
            return failure_response(result)
        return Response(TryoutChatDetailSerializer(result.data).data)
