"""
Direct messaging models.

There is no conversation container: a conversation is the set of
DirectMessage rows exchanged between a pair of users, or between the system
identity and one user.

Models:
    DirectMessage: One message from a user (or the system) to a user

Design Decisions:
    - A system-authored message has sender=NULL (see chat.constants.SYSTEM_ID)
    - Rows are immutable except invitation_status, which moves
      pending -> accepted | declined exactly once
    - metadata holds the typed payload for message_type (see chat.payloads)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.model_mixins import MetadataMixin
from core.models import BaseModel

from chat.constants import wire_user_id

if TYPE_CHECKING:
    from authentication.models import User


class MessageType(models.TextChoices):
    """
    Type of direct message.

    TEXT: Player-authored text
    INVITATION: Team invitation the receiver can accept or decline
    TOURNAMENT_REFERENCE: Link to a tournament shared with a captain
    TOURNAMENT_INVITE: Tournament invitation for the receiver's team
    MATCH_SCHEDULED: Match scheduling notice
    SYSTEM: Generic system notification
    """

    TEXT = "text", "Text"
    INVITATION = "invitation", "Invitation"
    TOURNAMENT_REFERENCE = "tournament_reference", "Tournament Reference"
    TOURNAMENT_INVITE = "tournament_invite", "Tournament Invite"
    MATCH_SCHEDULED = "match_scheduled", "Match Scheduled"
    SYSTEM = "system", "System"


class InvitationStatus(models.TextChoices):
    """Answer state of an invitation message."""

    PENDING = "pending", "Pending"
    ACCEPTED = "accepted", "Accepted"
    DECLINED = "declined", "Declined"


class DirectMessageQuerySet(models.QuerySet):
    """Conversation lookups over DirectMessage rows."""

    def between(self, user: User, peer: User) -> DirectMessageQuerySet:
        """Messages exchanged between two users, in either direction."""
        return self.filter(
            Q(sender=user, receiver=peer) | Q(sender=peer, receiver=user)
        )

    def from_system(self, user: User) -> DirectMessageQuerySet:
        """System-authored messages addressed to the user."""
        return self.filter(sender__isnull=True, receiver=user)

    def involving(self, user: User) -> DirectMessageQuerySet:
        return self.filter(Q(sender=user) | Q(receiver=user))


class DirectMessage(MetadataMixin, BaseModel):
    """
    A direct message between two users, or from the system to a user.

    Fields:
        sender: User who sent the message (NULL for system messages)
        receiver: User the message is addressed to
        message: Message text
        message_type: Type of message (see MessageType)
        metadata: Typed payload for the message type
        invitation_id: External invitation reference
        tournament_id: External tournament reference
        match_id: External match reference
        invitation_status: Answer state (invitations only)
        timestamp: When the message was sent (orders conversations)
    """

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="sent_direct_messages",
        help_text="User who sent this message (null for system messages)",
    )
    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_direct_messages",
        help_text="User this message is addressed to",
    )

    message = models.TextField(help_text="Message text")
    message_type = models.CharField(
        max_length=32,
        choices=MessageType.choices,
        default=MessageType.TEXT,
        db_index=True,
        help_text="Type of message",
    )

    invitation_id = models.CharField(max_length=64, blank=True, default="")
    tournament_id = models.CharField(max_length=64, blank=True, default="")
    match_id = models.CharField(max_length=64, blank=True, default="")

    invitation_status = models.CharField(
        max_length=16,
        choices=InvitationStatus.choices,
        null=True,
        blank=True,
        help_text="Answer state, set only for invitation messages",
    )

    timestamp = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="When the message was sent",
    )

    objects = DirectMessageQuerySet.as_manager()

    class Meta:
        db_table = "chat_direct_message"
        ordering = ["timestamp", "id"]
        indexes = [
            # Pair conversation pages
            models.Index(
                fields=["sender", "receiver", "timestamp"],
                name="chat_dm_pair_ts_idx",
            ),
            # Inbox and system conversation pages
            models.Index(
                fields=["receiver", "timestamp"],
                name="chat_dm_receiver_ts_idx",
            ),
        ]

    def __str__(self) -> str:
        preview = self.message[:50] + "..." if len(self.message) > 50 else self.message
        return f"{self.sender_wire_id} -> {self.receiver_id}: {preview}"

    @property
    def is_system_message(self) -> bool:
        return self.sender_id is None

    @property
    def sender_wire_id(self) -> str:
        return wire_user_id(self.sender_id)

    @property
    def is_invitation(self) -> bool:
        return self.message_type == MessageType.INVITATION
