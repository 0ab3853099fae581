"""
Tryout chat models.

A tryout chat is a time-bounded conversation between a team (represented by
one or more users) and one applicant. It starts active and ends through
exactly one outcome, after which it is read-only:

    active -> ended_by_team
    active -> ended_by_player
    active -> offer_sent -> offer_accepted
    active -> offer_sent -> offer_rejected

Models:
    TryoutChat: The chat record and its lifecycle state
    TryoutMessage: One entry of a chat's append-only message log

Design Decisions:
    - tryout_status is authoritative; status is the coarse bucket derived from it
    - Every state change is a conditional UPDATE on the expected tryout_status
      (TryoutChatQuerySet.compare_and_set), so racing transitions cannot both win
    - Messages are separate rows ordered by their auto-increment id; appends
      never rewrite existing rows
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.model_mixins import MetadataMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel

from chat.constants import wire_user_id

if TYPE_CHECKING:
    from authentication.models import User


class ChatStatus(models.TextChoices):
    """Coarse lifecycle bucket for "is this chat still live" queries."""

    ACTIVE = "active", "Active"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class TryoutStatus(models.TextChoices):
    """Authoritative lifecycle state."""

    ACTIVE = "active", "Active"
    ENDED_BY_TEAM = "ended_by_team", "Ended by team"
    ENDED_BY_PLAYER = "ended_by_player", "Ended by player"
    OFFER_SENT = "offer_sent", "Offer sent"
    OFFER_ACCEPTED = "offer_accepted", "Offer accepted"
    OFFER_REJECTED = "offer_rejected", "Offer rejected"


class OfferStatus(models.TextChoices):
    """Team offer state; mirrors the offer_* tryout states."""

    NONE = "none", "None"
    PENDING = "pending", "Pending"
    ACCEPTED = "accepted", "Accepted"
    REJECTED = "rejected", "Rejected"


class ChatType(models.TextChoices):
    """
    How the chat was opened.

    APPLICATION: The player applied to the team
    RECRUITMENT: The team approached the player
    """

    APPLICATION = "application", "Application"
    RECRUITMENT = "recruitment", "Recruitment"


class EndedByKind(models.TextChoices):
    TEAM = "team", "Team"
    PLAYER = "player", "Player"


class TryoutMessageType(models.TextChoices):
    TEXT = "text", "Text"
    SYSTEM = "system", "System"
    TEAM_OFFER = "team_offer", "Team offer"


COARSE_STATUS = {
    TryoutStatus.ACTIVE: ChatStatus.ACTIVE,
    TryoutStatus.OFFER_SENT: ChatStatus.ACTIVE,
    TryoutStatus.OFFER_ACCEPTED: ChatStatus.COMPLETED,
    TryoutStatus.OFFER_REJECTED: ChatStatus.CANCELLED,
    TryoutStatus.ENDED_BY_TEAM: ChatStatus.CANCELLED,
    TryoutStatus.ENDED_BY_PLAYER: ChatStatus.CANCELLED,
}

# Legal edges of the lifecycle
TRANSITIONS = {
    TryoutStatus.ACTIVE: frozenset(
        {
            TryoutStatus.ENDED_BY_TEAM,
            TryoutStatus.ENDED_BY_PLAYER,
            TryoutStatus.OFFER_SENT,
        }
    ),
    TryoutStatus.OFFER_SENT: frozenset(
        {
            TryoutStatus.OFFER_ACCEPTED,
            TryoutStatus.OFFER_REJECTED,
        }
    ),
}


def default_expiry():
    return timezone.now() + timedelta(days=settings.TRYOUT_CHAT_TTL_DAYS)


class TryoutChatQuerySet(models.QuerySet):
    """Lookups and the conditional update used by every lifecycle transition."""

    def for_user(self, user: User) -> TryoutChatQuerySet:
        """Chats the user participates in."""
        return self.filter(participants=user).distinct()

    def live(self) -> TryoutChatQuerySet:
        return self.filter(status=ChatStatus.ACTIVE)

    def expired(self, now=None) -> TryoutChatQuerySet:
        """Chats past their expiry that are no longer live."""
        now = now or timezone.now()
        return self.filter(expires_at__lte=now).exclude(status=ChatStatus.ACTIVE)

    def compare_and_set(self, chat_id, expected: str, new_status: str, **fields) -> bool:
        """
        Move a chat from `expected` to `new_status` in one conditional UPDATE.

        The coarse status follows the new tryout_status. Returns False when
        the chat is missing or no longer in `expected` (another transition
        won), in which case nothing is written.

        Raises:
            ValueError: If the edge is not part of the lifecycle
        """
        if new_status not in TRANSITIONS.get(expected, ()):
            raise ValueError(f"Illegal tryout transition {expected} -> {new_status}")

        fields.update(
            tryout_status=new_status,
            status=COARSE_STATUS[new_status],
            updated_at=timezone.now(),
        )
        return self.filter(pk=chat_id, tryout_status=expected).update(**fields) == 1


class TryoutChat(UUIDPrimaryKeyMixin, MetadataMixin, BaseModel):
    """
    A tryout conversation between a team and an applicant.

    Fields:
        team_id: External team identifier
        applicant: Player being evaluated
        participants: Users allowed to post (team representatives + applicant)
        application_id: External application identifier
        chat_type: application or recruitment
        status: Coarse bucket (active, completed, cancelled)
        tryout_status: Authoritative lifecycle state
        team_offer_status, offer_sent_at, offer_responded_at, offer_message:
            Team offer bookkeeping
        ended_at, ended_by, ended_by_kind, end_reason:
            Set only for ended_by_team / ended_by_player
        expires_at: Soft TTL after which a finished chat may be purged
        locked: True once a transition blocked regular messages
    """

    team_id = models.CharField(max_length=64, db_index=True)
    applicant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="tryout_applications",
        help_text="Player being evaluated",
    )
    participants = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="tryout_chats",
        help_text="Users allowed to post in this chat",
    )
    application_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    chat_type = models.CharField(
        max_length=16,
        choices=ChatType.choices,
        default=ChatType.APPLICATION,
    )

    status = models.CharField(
        max_length=16,
        choices=ChatStatus.choices,
        default=ChatStatus.ACTIVE,
        db_index=True,
    )
    tryout_status = models.CharField(
        max_length=16,
        choices=TryoutStatus.choices,
        default=TryoutStatus.ACTIVE,
        db_index=True,
    )

    # Team offer
    team_offer_status = models.CharField(
        max_length=16,
        choices=OfferStatus.choices,
        default=OfferStatus.NONE,
    )
    offer_sent_at = models.DateTimeField(null=True, blank=True)
    offer_responded_at = models.DateTimeField(null=True, blank=True)
    offer_message = models.TextField(blank=True, default="")

    # Ending
    ended_at = models.DateTimeField(null=True, blank=True)
    ended_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="User who ended the tryout",
    )
    ended_by_kind = models.CharField(
        max_length=8,
        choices=EndedByKind.choices,
        blank=True,
        default="",
    )
    end_reason = models.TextField(blank=True, default="")

    expires_at = models.DateTimeField(default=default_expiry, db_index=True)
    locked = models.BooleanField(default=False)

    objects = TryoutChatQuerySet.as_manager()

    class Meta:
        db_table = "tryouts_chat"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["team_id", "applicant"], name="tryout_team_applicant_idx"),
        ]

    def __str__(self) -> str:
        return f"Tryout {self.id} team={self.team_id} applicant={self.applicant_id} ({self.tryout_status})"

    @property
    def is_active(self) -> bool:
        return self.tryout_status == TryoutStatus.ACTIVE

    def is_participant(self, user: User) -> bool:
        return self.participants.filter(pk=user.pk).exists()

    def is_team_representative(self, user: User) -> bool:
        """A participant other than the applicant speaks for the team."""
        return user.pk != self.applicant_id and self.is_participant(user)

    def is_applicant(self, user: User) -> bool:
        return user.pk == self.applicant_id

    def offer_data(self) -> dict:
        """Wire representation of the team offer."""
        return {
            "status": self.team_offer_status,
            "sentAt": self.offer_sent_at.isoformat() if self.offer_sent_at else None,
            "respondedAt": self.offer_responded_at.isoformat() if self.offer_responded_at else None,
            "message": self.offer_message,
        }

    def append_message(
        self,
        sender: User | None,
        message: str,
        message_type: str = TryoutMessageType.TEXT,
        metadata: dict | None = None,
    ) -> TryoutMessage:
        """Insert a message at the end of the log; sender=None is the system."""
        return TryoutMessage.objects.create(
            chat=self,
            sender=sender,
            message=message,
            message_type=message_type,
            metadata=metadata or {},
        )


class TryoutMessage(models.Model):
    """
    One entry in a tryout chat's message log.

    Order is insertion order (the auto-increment id); timestamp is
    informational.
    """

    chat = models.ForeignKey(
        TryoutChat,
        on_delete=models.CASCADE,
        related_name="messages",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="tryout_messages",
        help_text="Author (null for system messages)",
    )
    message = models.TextField()
    message_type = models.CharField(
        max_length=16,
        choices=TryoutMessageType.choices,
        default=TryoutMessageType.TEXT,
    )
    metadata = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "tryouts_message"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["chat", "id"], name="tryout_msg_chat_seq_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.sender_wire_id}: {self.message[:50]}"

    @property
    def sender_wire_id(self) -> str:
        return wire_user_id(self.sender_id)
