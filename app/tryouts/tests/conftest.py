"""
Test configuration and fixtures for tryout tests.

Provides:
- captain / applicant users and an active chat between them
- In-memory collaborators passed explicitly to the service
- configured_collaborators for views, which use the settings-configured ones

Usage:
    def test_example(tryout_chat, captain, broadcaster):
        result = TryoutLifecycleService.post_message(tryout_chat.id, captain, "hi", broadcaster=broadcaster)
"""

import pytest

from authentication.tests.factories import UserFactory
from tryouts.collaborators import (
    ApplicationInfo,
    InMemoryApplicationTracker,
    InMemoryTeamMembership,
    get_application_tracker,
    get_team_membership,
    reset_collaborators,
)
from tryouts.tests.factories import TryoutChatFactory


@pytest.fixture
def captain(db):
    """Team representative."""
    return UserFactory(display_name="Captain")


@pytest.fixture
def applicant(db):
    return UserFactory(display_name="Applicant")


@pytest.fixture
def tryout_chat(captain, applicant):
    """Active tryout chat between captain and applicant."""
    return TryoutChatFactory(applicant=applicant, representatives=[captain], team_id="team-1")


@pytest.fixture
def application_tracker():
    return InMemoryApplicationTracker()


@pytest.fixture
def team_membership():
    return InMemoryTeamMembership()


@pytest.fixture
def pending_application(application_tracker, captain, applicant):
    """Pending application of `applicant` to team-1, with `captain` representing the team."""
    return application_tracker.register(
        ApplicationInfo(
            id="app-1",
            team_id="team-1",
            applicant_id=applicant.pk,
            team_representative_ids=(captain.pk,),
            team_name="Night Owls",
        )
    )


@pytest.fixture
def configured_collaborators():
    """
    Fresh settings-configured collaborators, as used by the views.

    Returns:
        (application_tracker, team_membership)
    """
    reset_collaborators()
    yield get_application_tracker(), get_team_membership()
    reset_collaborators()
