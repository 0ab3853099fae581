"""
External collaborators of the tryout lifecycle.

Applications and team rosters live in other services. The lifecycle talks to
them through two small protocols; the implementation classes are chosen by
dotted path in settings:

    TRYOUTS_APPLICATION_TRACKER = "tryouts.collaborators.InMemoryApplicationTracker"
    TRYOUTS_TEAM_MEMBERSHIP = "tryouts.collaborators.InMemoryTeamMembership"

The in-memory implementations record every call and are used in development
and tests.

Implementations signal failure by raising core.exceptions.ExternalServiceError.

Usage:
    from tryouts.collaborators import get_application_tracker

    tracker = get_application_tracker()
    application = tracker.get_application("app-17")
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from django.conf import settings
from django.utils.module_loading import import_string

if TYPE_CHECKING:
    from typing import Any


@dataclass(frozen=True)
class ApplicationInfo:
    """
    What the lifecycle needs to know about an application.

    Attributes:
        id: External application identifier
        team_id: Team the player applied to (or that approached the player)
        applicant_id: User id of the player
        status: Application state in the tracking service
        team_representative_ids: User ids speaking for the team
        team_name: Display name stored in the chat metadata
    """

    PENDING = "pending"
    IN_TRYOUT = "in_tryout"

    id: str
    team_id: str
    applicant_id: Any
    status: str = PENDING
    team_representative_ids: tuple = field(default_factory=tuple)
    team_name: str = ""

    @property
    def is_pending(self) -> bool:
        return self.status == self.PENDING


@runtime_checkable
class ApplicationTracker(Protocol):
    """Application tracking service."""

    def get_application(self, application_id: str) -> ApplicationInfo | None:
        """Return the application, or None if it does not exist."""
        ...

    def mark_application_in_tryout(self, application_id: str) -> None:
        """Record that a tryout chat was opened for the application."""
        ...


@runtime_checkable
class TeamMembership(Protocol):
    """Team roster service."""

    def add_player_to_team(self, team_id: str, player_id: Any) -> None:
        ...


class InMemoryApplicationTracker:
    """Process-local application registry."""

    def __init__(self):
        self.applications: dict[str, ApplicationInfo] = {}
        self.marked_in_tryout: list[str] = []

    def register(self, application: ApplicationInfo) -> ApplicationInfo:
        self.applications[str(application.id)] = application
        return application

    def get_application(self, application_id: str) -> ApplicationInfo | None:
        return self.applications.get(str(application_id))

    def mark_application_in_tryout(self, application_id: str) -> None:
        key = str(application_id)
        if key in self.applications:
            self.applications[key] = replace(
                self.applications[key], status=ApplicationInfo.IN_TRYOUT
            )
        self.marked_in_tryout.append(key)


class InMemoryTeamMembership:
    """Process-local team rosters."""

    def __init__(self):
        self.rosters: dict[str, set] = defaultdict(set)
        self.calls: list[tuple[str, Any]] = []

    def add_player_to_team(self, team_id: str, player_id: Any) -> None:
        self.calls.append((str(team_id), player_id))
        self.rosters[str(team_id)].add(player_id)


@lru_cache(maxsize=1)
def get_application_tracker() -> ApplicationTracker:
    """Configured application tracker (one instance per process)."""
    return import_string(settings.TRYOUTS_APPLICATION_TRACKER)()


@lru_cache(maxsize=1)
def get_team_membership() -> TeamMembership:
    """Configured team membership service (one instance per process)."""
    return import_string(settings.TRYOUTS_TEAM_MEMBERSHIP)()


def reset_collaborators() -> None:
    """Drop the cached instances so the next lookup rebuilds them."""
    get_application_tracker.cache_clear()
    get_team_membership.cache_clear()
