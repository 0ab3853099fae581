"""
Direct messaging service layer.

Services:
    DirectMessageService: Send, page and list direct messages; answer invitations

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure() with chat.constants.ErrorCode
    - Broadcasts are scheduled on commit through EventBroadcaster
    - The system identity is SYSTEM_ID in arguments and sender=NULL in storage

Usage:
    from chat.services import DirectMessageService

    result = DirectMessageService.send_direct(
        sender=request.user,
        receiver_id=peer_id,
        text="gg, want to scrim tomorrow?",
        caller=request.user,
    )
    if result.success:
        message = result.data

    # System notification (no caller check)
    DirectMessageService.send_direct(SYSTEM_ID, captain.pk, "Match scheduled", "system")
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Max
from django.utils import timezone

from core.exceptions import ValidationError
from core.services import BaseService, ServiceResult

from chat.constants import (
    ALERTS,
    MESSAGE_CONFIG,
    SYSTEM_DISPLAY_NAME,
    SYSTEM_ID,
    ErrorCode,
    is_system_id,
)
from chat.events import EventBroadcaster
from chat.models import DirectMessage, InvitationStatus, MessageType
from chat.payloads import parse_payload
from chat.serializers import direct_message_data

if TYPE_CHECKING:
    from authentication.models import User


def resolve_user(user_id) -> User | None:
    """
    Look up an active user by wire id.

    Raises:
        ValidationError: If the id is malformed
    """
    User = get_user_model()
    if isinstance(user_id, User):
        return user_id if user_id.is_active else None
    try:
        pk = User._meta.pk.to_python(user_id)
    except DjangoValidationError:
        raise ValidationError(
            f"Malformed user id: {user_id!r}",
            details={"fields": {"user_id": ["Malformed identifier."]}},
        )
    return User.objects.filter(pk=pk, is_active=True).first()


def clamp_limit(limit) -> int:
    """
    Normalize a page size: default when missing, capped at the maximum.

    Raises:
        ValidationError: If limit is not a positive integer
    """
    if limit in (None, ""):
        return MESSAGE_CONFIG.DEFAULT_PAGE_SIZE
    try:
        value = int(limit)
    except (TypeError, ValueError):
        raise ValidationError(
            "limit must be an integer",
            details={"fields": {"limit": ["A valid integer is required."]}},
        )
    if value < 1:
        raise ValidationError(
            "limit must be at least 1",
            details={"fields": {"limit": ["Ensure this value is at least 1."]}},
        )
    return min(value, MESSAGE_CONFIG.MAX_PAGE_SIZE)


class DirectMessageService(BaseService):
    """
    Service for direct (player-to-player and system) messages.

    Methods:
        send_direct: Store a message and deliver it to the receiver's room
        fetch_conversation: Page of a pair or system conversation
        list_conversation_peers: Distinct counterparts, system first
        send_tournament_reference: Share a tournament with a team captain
        respond_to_invitation: Accept or decline an invitation once
    """

    @classmethod
    def send_direct(
        cls,
        sender,
        receiver_id,
        text: str,
        message_type: str = MessageType.TEXT,
        metadata: dict | None = None,
        invitation_id: str | None = None,
        tournament_id: str | None = None,
        match_id: str | None = None,
        caller: User | None = None,
        broadcaster: EventBroadcaster | None = None,
    ) -> ServiceResult[DirectMessage]:
        """
        Send a direct message.

        Args:
            sender: Sending User, or SYSTEM_ID for system notifications
            receiver_id: Receiver user id (or User)
            text: Message text
            message_type: One of MessageType
            metadata: Raw payload for the message type (see chat.payloads)
            invitation_id: External invitation reference
            tournament_id: External tournament reference
            match_id: External match reference
            caller: Authenticated user making the request
            broadcaster: Event broadcaster (process default if omitted)

        Returns:
            ServiceResult with the created DirectMessage

        Error codes:
            FORBIDDEN: Sender is a user other than the caller
            VALIDATION_ERROR: Blank/oversized text, bad type, bad payload,
                malformed or system receiver
            NOT_FOUND: Receiver does not exist
        """
        from_system = is_system_id(sender)
        if not from_system and (caller is None or sender is None or sender.pk != caller.pk):
            return ServiceResult.failure(
                "You can only send messages as yourself",
                error_code=ErrorCode.FORBIDDEN,
            )

        text = (text or "").strip()
        if not text:
            return ServiceResult.failure(
                "Message text cannot be empty",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"message": ["This field is required."]},
            )
        if len(text) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
            return ServiceResult.failure(
                f"Message exceeds {MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"message": ["Message is too long."]},
            )

        if is_system_id(receiver_id):
            return ServiceResult.failure(
                "Messages cannot be addressed to the system",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"receiver_id": ["Invalid receiver."]},
            )

        try:
            payload = parse_payload(message_type, metadata)
            receiver = resolve_user(receiver_id)
        except ValidationError as e:
            return ServiceResult.from_exception(e)

        if receiver is None:
            return ServiceResult.failure(
                "Receiver not found",
                error_code=ErrorCode.NOT_FOUND,
            )

        invitation_id = invitation_id or getattr(payload, "invitation_id", "")
        tournament_id = tournament_id or getattr(payload, "tournament_id", "")
        match_id = match_id or getattr(payload, "match_id", "")

        if message_type == MessageType.INVITATION and not invitation_id:
            return ServiceResult.failure(
                "Invitation messages need an invitation id",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"invitation_id": ["This field is required."]},
            )

        broadcaster = broadcaster or EventBroadcaster.default()

        with cls.atomic():
            message = DirectMessage.objects.create(
                sender=None if from_system else sender,
                receiver=receiver,
                message=text,
                message_type=message_type,
                metadata=payload.to_dict(),
                invitation_id=invitation_id,
                tournament_id=tournament_id,
                match_id=match_id,
                invitation_status=(
                    InvitationStatus.PENDING
                    if message_type == MessageType.INVITATION
                    else None
                ),
            )
            alert = ALERTS.TOURNAMENT_INVITE if message_type == MessageType.TOURNAMENT_INVITE else None
            broadcaster.direct_message(receiver.pk, direct_message_data(message), alert=alert)

        cls.get_logger().info(
            f"Direct message {message.id} ({message_type}) "
            f"{message.sender_wire_id} -> {receiver.pk}"
        )
        return ServiceResult.success(message)

    @classmethod
    def fetch_conversation(
        cls,
        user: User,
        peer,
        before: datetime | None = None,
        limit=None,
    ) -> ServiceResult[list[DirectMessage]]:
        """
        Page of a conversation, ordered oldest to newest.

        Args:
            user: Requesting user
            peer: Counterpart user id (or User), or SYSTEM_ID
            before: Only messages strictly earlier than this time
            limit: Page size (default 50, capped at 100)

        Returns:
            ServiceResult with the newest `limit` messages before `before`,
            oldest first

        Error codes:
            VALIDATION_ERROR: Malformed peer id or limit
            NOT_FOUND: Peer does not exist
        """
        try:
            limit = clamp_limit(limit)
            if is_system_id(peer):
                queryset = DirectMessage.objects.from_system(user)
            else:
                peer_user = resolve_user(peer)
                if peer_user is None:
                    return ServiceResult.failure(
                        "Conversation peer not found",
                        error_code=ErrorCode.NOT_FOUND,
                    )
                queryset = DirectMessage.objects.between(user, peer_user)
        except ValidationError as e:
            return ServiceResult.from_exception(e)

        if before is not None:
            queryset = queryset.filter(timestamp__lt=before)

        page = list(
            queryset.select_related("sender").order_by("-timestamp", "-id")[:limit]
        )
        page.reverse()
        return ServiceResult.success(page)

    @classmethod
    def list_conversation_peers(cls, user: User, limit=None) -> ServiceResult[list[dict]]:
        """
        Distinct counterparts the user exchanged direct messages with.

        The system peer comes first when any system message exists for the
        user; user peers follow, most recent conversation first.

        Args:
            limit: Number of peers (default 50, capped at 100)

        Returns:
            ServiceResult with dicts {id, display_name, is_system, last_message_at}

        Error codes:
            VALIDATION_ERROR: Malformed limit
        """
        try:
            limit = clamp_limit(limit)
        except ValidationError as e:
            return ServiceResult.from_exception(e)

        last_by_peer: dict[int, datetime] = {}

        sent = (
            DirectMessage.objects.filter(sender=user)
            .values("receiver_id")
            .annotate(last=Max("timestamp"))
        )
        for row in sent:
            last_by_peer[row["receiver_id"]] = row["last"]

        received = (
            DirectMessage.objects.filter(receiver=user, sender__isnull=False)
            .values("sender_id")
            .annotate(last=Max("timestamp"))
        )
        for row in received:
            peer_id = row["sender_id"]
            if peer_id not in last_by_peer or row["last"] > last_by_peer[peer_id]:
                last_by_peer[peer_id] = row["last"]

        last_by_peer.pop(user.pk, None)

        User = get_user_model()
        users = {u.pk: u for u in User.objects.filter(pk__in=last_by_peer)}

        peers = []
        system_last = DirectMessage.objects.from_system(user).aggregate(last=Max("timestamp"))["last"]
        if system_last is not None:
            peers.append(
                {
                    "id": SYSTEM_ID,
                    "display_name": SYSTEM_DISPLAY_NAME,
                    "is_system": True,
                    "last_message_at": system_last,
                }
            )

        for peer_id in sorted(last_by_peer, key=lambda pk: last_by_peer[pk], reverse=True):
            peer = users.get(peer_id)
            if peer is None:
                continue
            peers.append(
                {
                    "id": str(peer.pk),
                    "display_name": peer.get_full_name(),
                    "is_system": False,
                    "last_message_at": last_by_peer[peer_id],
                }
            )

        return ServiceResult.success(peers[:limit])

    @classmethod
    def send_tournament_reference(
        cls,
        sender: User,
        captain_id,
        tournament_id: str,
        tournament_name: str,
        broadcaster: EventBroadcaster | None = None,
    ) -> ServiceResult[DirectMessage]:
        """
        Share a tournament with a team captain.

        Creates a tournament_reference message "Check out this tournament: <name>".
        """
        validation = cls.validate_required(
            captain_id=captain_id,
            tournament_id=tournament_id,
            tournament_name=tournament_name,
        )
        if validation is not None:
            return validation

        return cls.send_direct(
            sender=sender,
            receiver_id=captain_id,
            text=MESSAGE_CONFIG.TOURNAMENT_REFERENCE_TEMPLATE.format(name=tournament_name),
            message_type=MessageType.TOURNAMENT_REFERENCE,
            metadata={
                "tournament_id": str(tournament_id),
                "tournament_name": tournament_name,
            },
            tournament_id=str(tournament_id),
            caller=sender,
            broadcaster=broadcaster,
        )

    @classmethod
    def respond_to_invitation(
        cls,
        user: User,
        message_id,
        accept: bool,
    ) -> ServiceResult[DirectMessage]:
        """
        Accept or decline an invitation message.

        The status moves pending -> accepted | declined through a conditional
        update, so only the first answer wins.

        Error codes:
            NOT_FOUND: Message does not exist
            FORBIDDEN: User is not the receiver
            VALIDATION_ERROR: Message is not an invitation
            INVALID_TRANSITION: Invitation was already answered
        """
        message = DirectMessage.objects.filter(pk=message_id).first()
        if message is None:
            return ServiceResult.failure("Message not found", error_code=ErrorCode.NOT_FOUND)

        if message.receiver_id != user.pk:
            return ServiceResult.failure(
                "Only the receiver can answer this invitation",
                error_code=ErrorCode.FORBIDDEN,
            )

        if not message.is_invitation:
            return ServiceResult.failure(
                "Only invitation messages can be answered",
                error_code=ErrorCode.VALIDATION_ERROR,
            )

        new_status = InvitationStatus.ACCEPTED if accept else InvitationStatus.DECLINED
        updated = DirectMessage.objects.filter(
            pk=message.pk,
            invitation_status=InvitationStatus.PENDING,
        ).update(invitation_status=new_status, updated_at=timezone.now())

        if updated == 0:
            return ServiceResult.failure(
                "Invitation was already answered",
                error_code=ErrorCode.INVALID_TRANSITION,
            )

        message.refresh_from_db()
        cls.get_logger().info(
            f"Invitation message {message.pk} {new_status} by user {user.pk}"
        )
        return ServiceResult.success(message)
