"""
Constants for tryout chats.

Import example:
    from tryouts.constants import ErrorCode, SYSTEM_MESSAGES, TRYOUT_CONFIG
"""

from typing import Final

from chat.constants import ErrorCode

__all__ = ["ErrorCode", "SYSTEM_MESSAGES", "SystemEvent", "TRYOUT_CONFIG"]


class TRYOUT_CONFIG:
    """Limits for tryout chat input."""

    MAX_MESSAGE_LENGTH: Final[int] = 5000
    MAX_REASON_LENGTH: Final[int] = 500
    MAX_OFFER_MESSAGE_LENGTH: Final[int] = 1000


class SystemEvent:
    """Lifecycle events recorded as system messages in the chat log."""

    STARTED: Final[str] = "tryout_started"
    ENDED: Final[str] = "tryout_ended"
    OFFER_ACCEPTED: Final[str] = "offer_accepted"
    OFFER_REJECTED: Final[str] = "offer_rejected"


class SYSTEM_MESSAGES:
    """Text of the system messages appended on lifecycle transitions."""

    STARTED: Final[str] = "Tryout started. Say hello to your potential new teammates!"
    ENDED_BY_TEAM: Final[str] = "The team ended this tryout. Reason: {reason}"
    ENDED_BY_PLAYER: Final[str] = "The player ended this tryout. Reason: {reason}"
    OFFER_ACCEPTED: Final[str] = "The player accepted the team offer and joined the team."
    OFFER_REJECTED: Final[str] = "The player declined the team offer."
    OFFER_REJECTED_WITH_REASON: Final[str] = "The player declined the team offer. Reason: {reason}"
