"""
Typed message payloads.

Every message type carries its own frozen dataclass instead of a free-form
metadata dict. The stored metadata is the payload's to_dict() output.

Usage:
    from chat.payloads import parse_payload

    payload = parse_payload("tournament_invite", {"tournament_id": "t1", "team_id": "42"})
    payload.tournament_id  # "t1"

    parse_payload("invitation", {})  # raises core.exceptions.ValidationError
"""

from __future__ import annotations

from dataclasses import MISSING, asdict, dataclass, fields
from typing import TYPE_CHECKING

from core.exceptions import ValidationError

if TYPE_CHECKING:
    from typing import Any


class Payload:
    """Mixin with the dict conversions shared by all payloads."""

    message_type: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Payload:
        data = {} if data is None else data
        if not isinstance(data, dict):
            raise ValidationError(
                f"Metadata for {cls.message_type} must be an object",
                details={"fields": {"metadata": ["Expected an object."]}},
            )

        known = {f.name: f for f in fields(cls)}
        errors: dict[str, list[str]] = {}

        for name in sorted(set(data) - set(known)):
            errors[name] = ["Unknown field."]
        for name, f in known.items():
            required = f.default is MISSING and f.default_factory is MISSING
            if required and data.get(name) in (None, ""):
                errors[name] = ["This field is required."]

        if errors:
            raise ValidationError(
                f"Invalid metadata for {cls.message_type}",
                details={"fields": errors},
            )

        return cls(**{name: str(value) for name, value in data.items() if value is not None})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Direct message payloads
# =============================================================================


@dataclass(frozen=True)
class TextPayload(Payload):
    message_type = "text"


@dataclass(frozen=True)
class InvitationPayload(Payload):
    message_type = "invitation"

    team_id: str
    team_name: str = ""
    role: str = ""


@dataclass(frozen=True)
class TournamentReferencePayload(Payload):
    message_type = "tournament_reference"

    tournament_id: str
    tournament_name: str = ""


@dataclass(frozen=True)
class TournamentInvitePayload(Payload):
    message_type = "tournament_invite"

    tournament_id: str
    team_id: str
    tournament_name: str = ""


@dataclass(frozen=True)
class MatchScheduledPayload(Payload):
    message_type = "match_scheduled"

    match_id: str
    scheduled_at: str
    tournament_id: str = ""
    opponent_name: str = ""


@dataclass(frozen=True)
class SystemPayload(Payload):
    message_type = "system"

    event: str = "notice"
    link: str = ""


# =============================================================================
# Tryout message payloads
# =============================================================================


@dataclass(frozen=True)
class TeamOfferPayload(Payload):
    message_type = "team_offer"

    team_id: str
    offer_message: str = ""


@dataclass(frozen=True)
class SystemEventPayload(Payload):
    """Lifecycle event recorded in a tryout chat (started, ended, offer answered)."""

    message_type = "system"

    event: str
    reason: str = ""


DIRECT_PAYLOADS: dict[str, type[Payload]] = {
    payload.message_type: payload
    for payload in (
        TextPayload,
        InvitationPayload,
        TournamentReferencePayload,
        TournamentInvitePayload,
        MatchScheduledPayload,
        SystemPayload,
    )
}

TRYOUT_PAYLOADS: dict[str, type[Payload]] = {
    "text": TextPayload,
    "team_offer": TeamOfferPayload,
    "system": SystemEventPayload,
}


def parse_payload(
    message_type: str,
    data: dict[str, Any] | None,
    registry: dict[str, type[Payload]] | None = None,
) -> Payload:
    """
    Build the typed payload for a message type.

    Args:
        message_type: Message type key
        data: Raw metadata dict (None is treated as empty)
        registry: Payload registry, DIRECT_PAYLOADS by default

    Raises:
        ValidationError: Unknown type, unknown field or missing required field
    """
    registry = DIRECT_PAYLOADS if registry is None else registry
    payload_cls = registry.get(message_type)
    if payload_cls is None:
        raise ValidationError(
            f"Unknown message type: {message_type}",
            details={"fields": {"message_type": ["Unknown message type."]}},
        )
    return payload_cls.from_dict(data)
