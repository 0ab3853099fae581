"""
Factory Boy factories for chat models.

Usage:
    from chat.tests.factories import DirectMessageFactory, SystemMessageFactory

    message = DirectMessageFactory(sender=user, receiver=other_user)
    notice = SystemMessageFactory(receiver=user)
"""

import factory
from django.utils import timezone

from authentication.tests.factories import UserFactory
from chat.models import DirectMessage, InvitationStatus, MessageType


class DirectMessageFactory(factory.django.DjangoModelFactory):
    """
    Factory for DirectMessage model.

    Creates a text message between two new users by default.
    """

    class Meta:
        model = DirectMessage

    sender = factory.SubFactory(UserFactory)
    receiver = factory.SubFactory(UserFactory)
    message = factory.Sequence(lambda n: f"Message {n}")
    message_type = MessageType.TEXT
    metadata = factory.LazyFunction(dict)
    timestamp = factory.LazyFunction(timezone.now)


class SystemMessageFactory(DirectMessageFactory):
    """System notification (sender stored as NULL)."""

    sender = None
    message_type = MessageType.SYSTEM
    metadata = factory.LazyFunction(lambda: {"event": "notice", "link": ""})


class InvitationMessageFactory(DirectMessageFactory):
    """Pending team invitation."""

    message_type = MessageType.INVITATION
    invitation_id = factory.Sequence(lambda n: f"inv-{n}")
    invitation_status = InvitationStatus.PENDING
    metadata = factory.LazyFunction(
        lambda: {"team_id": "team-1", "team_name": "Night Owls", "role": "support"}
    )
