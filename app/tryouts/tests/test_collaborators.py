"""
Tests for the in-memory collaborators and their settings-based lookup.
"""

from tryouts.collaborators import (
    ApplicationInfo,
    InMemoryApplicationTracker,
    InMemoryTeamMembership,
    get_application_tracker,
    get_team_membership,
)


class TestInMemoryApplicationTracker:
    def test_register_and_mark(self):
        tracker = InMemoryApplicationTracker()
        tracker.register(ApplicationInfo(id="app-1", team_id="team-1", applicant_id=7))

        assert tracker.get_application("app-1").is_pending
        tracker.mark_application_in_tryout("app-1")

        assert tracker.get_application("app-1").status == ApplicationInfo.IN_TRYOUT
        assert tracker.marked_in_tryout == ["app-1"]

    def test_unknown_application(self):
        assert InMemoryApplicationTracker().get_application("nope") is None


class TestInMemoryTeamMembership:
    def test_records_calls(self):
        membership = InMemoryTeamMembership()

        membership.add_player_to_team("team-1", 7)

        assert membership.calls == [("team-1", 7)]
        assert membership.rosters["team-1"] == {7}


class TestConfiguredCollaborators:
    def test_lookup_is_cached_until_reset(self, configured_collaborators):
        tracker, membership = configured_collaborators

        assert isinstance(tracker, InMemoryApplicationTracker)
        assert isinstance(membership, InMemoryTeamMembership)
        assert get_application_tracker() is tracker
        assert get_team_membership() is membership
