"""
Constants shared by direct messaging and tryout chats.

This module centralizes:
- The reserved system identity (SYSTEM_ID)
- Error codes reported by services, views and the socket consumer
- Message and room configuration

Import example:
    from chat.constants import SYSTEM_ID, ErrorCode, MESSAGE_CONFIG
"""

from typing import Final


# =============================================================================
# System Identity
# =============================================================================

# Stored as sender=NULL; serialised to this value on the wire.
SYSTEM_ID: Final[str] = "system"

SYSTEM_DISPLAY_NAME: Final[str] = "System"


def is_system_id(value) -> bool:
    """Return True if value is the reserved system identity."""
    return isinstance(value, str) and value == SYSTEM_ID


def wire_user_id(user) -> str:
    """
    Wire identifier for a sender/receiver given a User or a pk.

    None (a system-authored row) maps to SYSTEM_ID.
    """
    if user is None:
        return SYSTEM_ID
    return str(getattr(user, "pk", user))


# =============================================================================
# Error Codes
# =============================================================================


class ErrorCode:
    """Machine-readable failure codes carried by ServiceResult and error events."""

    NOT_FOUND: Final[str] = "NOT_FOUND"
    FORBIDDEN: Final[str] = "FORBIDDEN"
    CHAT_LOCKED: Final[str] = "CHAT_LOCKED"
    INVALID_TRANSITION: Final[str] = "INVALID_TRANSITION"
    VALIDATION_ERROR: Final[str] = "VALIDATION_ERROR"
    TRANSIENT_FAILURE: Final[str] = "TRANSIENT_FAILURE"


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    MAX_CONTENT_LENGTH: Final[int] = 5000  # Characters

    # Conversation pages
    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 100

    # Client-generated ids for optimistic messages
    TEMP_ID_PREFIX: Final[str] = "temp_"

    TOURNAMENT_REFERENCE_TEMPLATE: Final[str] = "Check out this tournament: {name}"


class ALERTS:
    """Client alert hints attached to selected direct message types."""

    TOURNAMENT_INVITE: Final[dict] = {
        "title": "Tournament Invitation",
        "body": "Your team has been invited to participate in a tournament",
    }


# =============================================================================
# Socket Configuration
# =============================================================================


class SOCKET_CONFIG:
    """WebSocket transport settings."""

    # Close code for a connection without a valid token
    CLOSE_UNAUTHENTICATED: Final[int] = 4001

    # Sec-WebSocket-Protocol: jwt, <token>
    TOKEN_SUBPROTOCOL: Final[str] = "jwt"
