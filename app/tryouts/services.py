"""
Tryout lifecycle service layer.

Services:
    TryoutLifecycleService: Start, converse in, and conclude tryout chats

Lifecycle:
    active -> ended_by_team | ended_by_player          (end_tryout)
    active -> offer_sent                               (send_offer)
    offer_sent -> offer_accepted | offer_rejected      (accept_offer / reject_offer)

Every transition is a compare-and-set on the expected tryout_status inside
a transaction. A transition that finds the chat in another state changes
nothing and reports INVALID_TRANSITION, so exactly one terminal outcome per
chat ever succeeds and a retried call after success never repeats its side
effects.

Usage:
    from tryouts.services import TryoutLifecycleService

    result = TryoutLifecycleService.start_tryout("app-17", started_by=captain)
    chat = result.data

    TryoutLifecycleService.send_offer(chat.id, captain, "Join us for the season")
    TryoutLifecycleService.accept_offer(chat.id, applicant)
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.utils import timezone

from core.exceptions import ExternalServiceError, ValidationError
from core.services import BaseService, ServiceResult

from chat.events import EventBroadcaster
from chat.payloads import SystemEventPayload, TeamOfferPayload
from chat.services import clamp_limit, resolve_user
from tryouts.collaborators import get_application_tracker, get_team_membership
from tryouts.constants import SYSTEM_MESSAGES, TRYOUT_CONFIG, ErrorCode, SystemEvent
from tryouts.models import (
    ChatStatus,
    ChatType,
    EndedByKind,
    OfferStatus,
    TryoutChat,
    TryoutMessage,
    TryoutMessageType,
    TryoutStatus,
)
from tryouts.serializers import tryout_message_data

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from authentication.models import User
    from tryouts.collaborators import ApplicationTracker, TeamMembership


class TryoutLifecycleService(BaseService):
    """
    Service for the tryout chat state machine.

    Methods:
        start_tryout: Open an active chat for a pending application
        post_message: Append a participant message to an active chat
        end_tryout: End an active chat on behalf of the team or the player
        send_offer: Team offers the applicant a place
        accept_offer: Applicant accepts; player is added to the team
        reject_offer: Applicant declines
        get_chat_for_user: Chat detail for a participant
        list_user_chats: Chats the user participates in
    """

    @classmethod
    def _get_chat(cls, chat_id, for_update: bool = False):
        """Return (chat, None) or (None, failure result)."""
        try:
            pk = uuid.UUID(str(chat_id))
        except ValueError:
            return None, ServiceResult.failure(
                f"Malformed chat id: {chat_id!r}",
                error_code=ErrorCode.VALIDATION_ERROR,
            )

        queryset = TryoutChat.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        chat = queryset.filter(pk=pk).first()
        if chat is None:
            return None, ServiceResult.failure(
                "Tryout chat not found",
                error_code=ErrorCode.NOT_FOUND,
            )
        return chat, None

    @classmethod
    def _lost_race(cls, chat_id, action: str) -> ServiceResult:
        cls.get_logger().info(f"Rejected {action} on tryout {chat_id}: state changed")
        return ServiceResult.failure(
            f"Cannot {action}: the tryout is no longer in the required state",
            error_code=ErrorCode.INVALID_TRANSITION,
        )

    @classmethod
    def _system_message(cls, chat: TryoutChat, text: str, event: str, reason: str = "") -> TryoutMessage:
        return chat.append_message(
            sender=None,
            message=text,
            message_type=TryoutMessageType.SYSTEM,
            metadata=SystemEventPayload(event=event, reason=reason).to_dict(),
        )

    # -------------------------------------------------------------------------
    # Start
    # -------------------------------------------------------------------------

    @classmethod
    def start_tryout(
        cls,
        application_id: str,
        started_by: User,
        team_representatives=None,
        chat_type: str = ChatType.APPLICATION,
        tracker: ApplicationTracker | None = None,
    ) -> ServiceResult[TryoutChat]:
        """
        Open an active tryout chat for a pending application.

        Participants are the team representatives plus the applicant. The
        representatives default to those listed on the application, or the
        starting user when the application lists none.

        Args:
            application_id: External application identifier
            started_by: Team representative starting the tryout
            team_representatives: Users (or user ids) speaking for the team
            chat_type: application or recruitment
            tracker: Application tracker (configured default if omitted)

        Error codes:
            VALIDATION_ERROR: Missing application id, bad chat type or user ids
            NOT_FOUND: Application or applicant does not exist
            INVALID_TRANSITION: Application is not pending
            FORBIDDEN: started_by does not speak for the team
            TRANSIENT_FAILURE: Application tracker failed
        """
        validation = cls.validate_required(application_id=application_id)
        if validation is not None:
            return validation
        if chat_type not in ChatType.values:
            return ServiceResult.failure(
                f"Unknown chat type: {chat_type}",
                error_code=ErrorCode.VALIDATION_ERROR,
            )

        tracker = tracker or get_application_tracker()

        try:
            application = tracker.get_application(application_id)
        except ExternalServiceError as e:
            return cls.handle_exception(
                e, f"Fetching application {application_id}", ErrorCode.TRANSIENT_FAILURE
            )

        if application is None:
            return ServiceResult.failure("Application not found", error_code=ErrorCode.NOT_FOUND)
        if not application.is_pending:
            return ServiceResult.failure(
                f"Application is {application.status}, not pending",
                error_code=ErrorCode.INVALID_TRANSITION,
            )

        try:
            applicant = resolve_user(application.applicant_id)
            rep_ids = team_representatives or application.team_representative_ids
            representatives = [resolve_user(rep) for rep in rep_ids]
        except ValidationError as e:
            return ServiceResult.from_exception(e)

        if applicant is None:
            return ServiceResult.failure("Applicant not found", error_code=ErrorCode.NOT_FOUND)

        representatives = {
            rep.pk: rep for rep in representatives if rep is not None and rep.pk != applicant.pk
        }
        if not representatives and started_by.pk != applicant.pk:
            representatives[started_by.pk] = started_by
        if started_by.pk not in representatives:
            return ServiceResult.failure(
                "Only a team representative can start a tryout",
                error_code=ErrorCode.FORBIDDEN,
            )

        metadata = {"team_name": application.team_name} if application.team_name else {}

        try:
            with cls.atomic():
                chat = TryoutChat.objects.create(
                    team_id=str(application.team_id),
                    applicant=applicant,
                    application_id=str(application.id),
                    chat_type=chat_type,
                    metadata=metadata,
                )
                chat.participants.add(applicant, *representatives.values())
                cls._system_message(chat, SYSTEM_MESSAGES.STARTED, SystemEvent.STARTED)
                tracker.mark_application_in_tryout(application.id)
        except ExternalServiceError as e:
            return cls.handle_exception(
                e, f"Marking application {application_id} in tryout", ErrorCode.TRANSIENT_FAILURE
            )

        cls.get_logger().info(
            f"Tryout {chat.id} started by user {started_by.pk} "
            f"for application {application.id} (team {chat.team_id})"
        )
        return ServiceResult.success(chat)

    # -------------------------------------------------------------------------
    # Messages
    # -------------------------------------------------------------------------

    @classmethod
    def post_message(
        cls,
        chat_id,
        sender: User,
        text: str,
        broadcaster: EventBroadcaster | None = None,
    ) -> ServiceResult[TryoutMessage]:
        """
        Append a regular message to an active chat.

        The chat row is locked for the append, so a message can never land
        after a transition that committed first.

        Error codes:
            NOT_FOUND: Chat does not exist
            VALIDATION_ERROR: Malformed chat id; empty or oversized text
            CHAT_LOCKED: Chat is no longer active, whoever the sender
            FORBIDDEN: Sender is not a participant
        """
        text = (text or "").strip()
        broadcaster = broadcaster or EventBroadcaster.default()

        with cls.atomic():
            chat, failure = cls._get_chat(chat_id, for_update=True)
            if failure is not None:
                return failure

            if chat.locked or chat.tryout_status != TryoutStatus.ACTIVE:
                return ServiceResult.failure(
                    "This tryout chat is closed",
                    error_code=ErrorCode.CHAT_LOCKED,
                )

            if not chat.is_participant(sender):
                return ServiceResult.failure(
                    "Only participants can post in this tryout",
                    error_code=ErrorCode.FORBIDDEN,
                )

            if not text:
                return ServiceResult.failure(
                    "Message text cannot be empty",
                    error_code=ErrorCode.VALIDATION_ERROR,
                    errors={"message": ["This field is required."]},
                )
            if len(text) > TRYOUT_CONFIG.MAX_MESSAGE_LENGTH:
                return ServiceResult.failure(
                    f"Message exceeds {TRYOUT_CONFIG.MAX_MESSAGE_LENGTH} characters",
                    error_code=ErrorCode.VALIDATION_ERROR,
                    errors={"message": ["Message is too long."]},
                )

            message = chat.append_message(sender, text)
            broadcaster.new_tryout_message(chat.id, tryout_message_data(message))

        return ServiceResult.success(message)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    @classmethod
    def end_tryout(
        cls,
        chat_id,
        ended_by: User,
        ended_by_kind: str,
        reason: str,
        broadcaster: EventBroadcaster | None = None,
    ) -> ServiceResult[TryoutChat]:
        """
        End an active tryout on behalf of the team or the player.

        Error codes:
            VALIDATION_ERROR: Blank reason or unknown ended_by_kind
            NOT_FOUND: Chat does not exist
            FORBIDDEN: Caller is not the party named by ended_by_kind
            INVALID_TRANSITION: Chat is not active (including a lost race)
        """
        if ended_by_kind not in EndedByKind.values:
            return ServiceResult.failure(
                f"Unknown ended_by_kind: {ended_by_kind}",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"ended_by_kind": ["Must be team or player."]},
            )
        reason = (reason or "").strip()
        if not reason:
            return ServiceResult.failure(
                "A reason is required to end the tryout",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"reason": ["This field is required."]},
            )

        chat, failure = cls._get_chat(chat_id)
        if failure is not None:
            return failure

        if ended_by_kind == EndedByKind.TEAM:
            allowed = chat.is_team_representative(ended_by)
            new_status = TryoutStatus.ENDED_BY_TEAM
            template = SYSTEM_MESSAGES.ENDED_BY_TEAM
        else:
            allowed = chat.is_applicant(ended_by)
            new_status = TryoutStatus.ENDED_BY_PLAYER
            template = SYSTEM_MESSAGES.ENDED_BY_PLAYER

        if not allowed:
            return ServiceResult.failure(
                f"Only the {ended_by_kind} side can end the tryout this way",
                error_code=ErrorCode.FORBIDDEN,
            )

        broadcaster = broadcaster or EventBroadcaster.default()

        with cls.atomic():
            won = TryoutChat.objects.compare_and_set(
                chat.pk,
                TryoutStatus.ACTIVE,
                new_status,
                locked=True,
                ended_at=timezone.now(),
                ended_by=ended_by,
                ended_by_kind=ended_by_kind,
                end_reason=reason,
            )
            if not won:
                return cls._lost_race(chat.pk, "end tryout")

            chat.refresh_from_db()
            message = cls._system_message(
                chat, template.format(reason=reason), SystemEvent.ENDED, reason
            )
            broadcaster.tryout_ended(
                chat.id,
                new_status,
                ended_by_kind,
                str(ended_by.pk),
                reason,
                tryout_message_data(message),
            )

        cls.get_logger().info(f"Tryout {chat.id} {new_status} by user {ended_by.pk}")
        return ServiceResult.success(chat)

    @classmethod
    def send_offer(
        cls,
        chat_id,
        sender: User,
        message: str = "",
        broadcaster: EventBroadcaster | None = None,
    ) -> ServiceResult[TryoutChat]:
        """
        Team offers the applicant a place on the team.

        Posting is blocked from here on; the chat stays live until the
        applicant answers.

        Error codes:
            NOT_FOUND: Chat does not exist
            FORBIDDEN: Sender is not a team representative
            VALIDATION_ERROR: Offer message too long
            INVALID_TRANSITION: Chat is not active
        """
        offer_message = (message or "").strip()
        if len(offer_message) > TRYOUT_CONFIG.MAX_OFFER_MESSAGE_LENGTH:
            return ServiceResult.failure(
                f"Offer message exceeds {TRYOUT_CONFIG.MAX_OFFER_MESSAGE_LENGTH} characters",
                error_code=ErrorCode.VALIDATION_ERROR,
            )

        chat, failure = cls._get_chat(chat_id)
        if failure is not None:
            return failure

        if not chat.is_team_representative(sender):
            return ServiceResult.failure(
                "Only a team representative can send an offer",
                error_code=ErrorCode.FORBIDDEN,
            )

        broadcaster = broadcaster or EventBroadcaster.default()

        with cls.atomic():
            won = TryoutChat.objects.compare_and_set(
                chat.pk,
                TryoutStatus.ACTIVE,
                TryoutStatus.OFFER_SENT,
                locked=True,
                team_offer_status=OfferStatus.PENDING,
                offer_sent_at=timezone.now(),
                offer_message=offer_message,
            )
            if not won:
                return cls._lost_race(chat.pk, "send offer")

            chat.refresh_from_db()
            offer_entry = chat.append_message(
                sender=sender,
                message=offer_message or "The team has offered you a place on the roster.",
                message_type=TryoutMessageType.TEAM_OFFER,
                metadata=TeamOfferPayload(
                    team_id=chat.team_id, offer_message=offer_message
                ).to_dict(),
            )
            broadcaster.team_offer_sent(
                chat.id,
                TryoutStatus.OFFER_SENT,
                chat.offer_data(),
                tryout_message_data(offer_entry),
            )

        cls.get_logger().info(f"Tryout {chat.id} offer sent by user {sender.pk}")
        return ServiceResult.success(chat)

    @classmethod
    def accept_offer(
        cls,
        chat_id,
        responder: User,
        membership: TeamMembership | None = None,
        broadcaster: EventBroadcaster | None = None,
    ) -> ServiceResult[TryoutChat]:
        """
        Applicant accepts the team offer and joins the team.

        add_player_to_team runs inside the transition's transaction; if it
        raises anything the transition is rolled back and TRANSIENT_FAILURE is
        reported, so the call can be retried.

        Error codes:
            NOT_FOUND: Chat does not exist
            FORBIDDEN: Responder is not the applicant
            INVALID_TRANSITION: No pending offer (including a lost race)
            TRANSIENT_FAILURE: Team membership service or the transition failed
        """
        chat, failure = cls._get_chat(chat_id)
        if failure is not None:
            return failure

        if not chat.is_applicant(responder):
            return ServiceResult.failure(
                "Only the applicant can accept the offer",
                error_code=ErrorCode.FORBIDDEN,
            )

        membership = membership or get_team_membership()
        broadcaster = broadcaster or EventBroadcaster.default()

        try:
            with cls.atomic():
                won = TryoutChat.objects.compare_and_set(
                    chat.pk,
                    TryoutStatus.OFFER_SENT,
                    TryoutStatus.OFFER_ACCEPTED,
                    locked=True,
                    team_offer_status=OfferStatus.ACCEPTED,
                    offer_responded_at=timezone.now(),
                )
                if not won:
                    return cls._lost_race(chat.pk, "accept offer")

                membership.add_player_to_team(chat.team_id, chat.applicant_id)

                chat.refresh_from_db()
                message = cls._system_message(
                    chat, SYSTEM_MESSAGES.OFFER_ACCEPTED, SystemEvent.OFFER_ACCEPTED
                )
                broadcaster.team_offer_accepted(
                    chat.id,
                    TryoutStatus.OFFER_ACCEPTED,
                    chat.offer_data(),
                    tryout_message_data(message),
                )
        except ExternalServiceError as e:
            return cls.handle_exception(
                e, f"Adding applicant of tryout {chat.pk} to team", ErrorCode.TRANSIENT_FAILURE
            )
        except Exception as e:
            return cls.handle_exception(
                e, f"Unexpected failure accepting offer of tryout {chat.pk}", ErrorCode.TRANSIENT_FAILURE
            )

        cls.get_logger().info(
            f"Tryout {chat.id} offer accepted; user {responder.pk} joined team {chat.team_id}"
        )
        return ServiceResult.success(chat)

    @classmethod
    def reject_offer(
        cls,
        chat_id,
        responder: User,
        reason: str | None = None,
        broadcaster: EventBroadcaster | None = None,
    ) -> ServiceResult[TryoutChat]:
        """
        Applicant declines the team offer.

        Error codes:
            NOT_FOUND: Chat does not exist
            FORBIDDEN: Responder is not the applicant
            INVALID_TRANSITION: No pending offer (including a lost race)
        """
        reason = (reason or "").strip()

        chat, failure = cls._get_chat(chat_id)
        if failure is not None:
            return failure

        if not chat.is_applicant(responder):
            return ServiceResult.failure(
                "Only the applicant can reject the offer",
                error_code=ErrorCode.FORBIDDEN,
            )

        broadcaster = broadcaster or EventBroadcaster.default()

        with cls.atomic():
            won = TryoutChat.objects.compare_and_set(
                chat.pk,
                TryoutStatus.OFFER_SENT,
                TryoutStatus.OFFER_REJECTED,
                locked=True,
                team_offer_status=OfferStatus.REJECTED,
                offer_responded_at=timezone.now(),
            )
            if not won:
                return cls._lost_race(chat.pk, "reject offer")

            chat.refresh_from_db()
            text = (
                SYSTEM_MESSAGES.OFFER_REJECTED_WITH_REASON.format(reason=reason)
                if reason
                else SYSTEM_MESSAGES.OFFER_REJECTED
            )
            message = cls._system_message(chat, text, SystemEvent.OFFER_REJECTED, reason)
            broadcaster.team_offer_rejected(
                chat.id,
                TryoutStatus.OFFER_REJECTED,
                chat.offer_data(),
                reason,
                tryout_message_data(message),
            )

        cls.get_logger().info(f"Tryout {chat.id} offer rejected by user {responder.pk}")
        return ServiceResult.success(chat)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @classmethod
    def get_chat_for_user(cls, chat_id, user: User) -> ServiceResult[TryoutChat]:
        """
        Chat detail for a participant.

        Error codes:
            NOT_FOUND, VALIDATION_ERROR (malformed id), FORBIDDEN (not a participant)
        """
        chat, failure = cls._get_chat(chat_id)
        if failure is not None:
            return failure
        if not chat.is_participant(user):
            return ServiceResult.failure(
                "You are not a participant in this tryout",
                error_code=ErrorCode.FORBIDDEN,
            )
        return ServiceResult.success(chat)

    @classmethod
    def list_user_chats(
        cls, user: User, status: str | None = None, limit=None
    ) -> ServiceResult[QuerySet]:
        """
        Tryout chats the user participates in, newest first.

        Args:
            status: Optional coarse status filter (active, completed, cancelled)
            limit: Page size (default 50, capped at 100)
        """
        try:
            limit = clamp_limit(limit)
        except ValidationError as e:
            return ServiceResult.from_exception(e)
        queryset = TryoutChat.objects.for_user(user)
        if status:
            if status not in ChatStatus.values:
                return ServiceResult.failure(
                    f"Unknown status filter: {status}",
                    error_code=ErrorCode.VALIDATION_ERROR,
                )
            queryset = queryset.filter(status=status)
        return ServiceResult.success(queryset.order_by("-created_at")[:limit])
