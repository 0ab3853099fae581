"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide fixtures:
users, authenticated API clients, and a room registry that records
broadcasts instead of sending them over the channel layer.

App-specific fixtures are defined in each app's tests/conftest.py.
"""

import os

import django
import pytest

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()

    from django.conf import settings

    # Disable throttling during tests to prevent rate limit failures
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}

    # Use fast password hasher for tests
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full user journey workflows)
    - test_views.py, test_services.py, test_tasks.py, test_consumers.py → integration
    - test_models.py, test_serializers.py, test_payloads.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_tasks.py",
        "test_consumers.py",
        "test_middleware.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_serializers.py",
        "test_managers.py",
        "test_payloads.py",
        "test_reconciliation.py",
        "test_events.py",
        "test_collaborators.py",
    ]

    for item in items:
        # Skip if test already has unit/integration/e2e marker
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)


# =============================================================================
# Users and API clients
# =============================================================================


@pytest.fixture
def user(db):
    """Create a basic active user."""
    from authentication.tests.factories import UserFactory

    return UserFactory()


@pytest.fixture
def other_user(db):
    """Create a second active user."""
    from authentication.tests.factories import UserFactory

    return UserFactory()


@pytest.fixture
def staff_user(db):
    from authentication.tests.factories import UserFactory

    return UserFactory(is_staff=True)


@pytest.fixture
def api_client():
    """Unauthenticated DRF client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def access_token_for():
    """Return a callable issuing a simplejwt access token string for a user."""
    from rest_framework_simplejwt.tokens import AccessToken

    def _token(user):
        return str(AccessToken.for_user(user))

    return _token


@pytest.fixture
def api_client_for(access_token_for):
    """
    Return a callable building an APIClient authenticated as the given user.

    Uses a real bearer token so the JWT authentication class is exercised.

    Usage:
        def test_example(user, api_client_for):
            response = api_client_for(user).get("/api/v1/chat/conversations/")
    """
    from rest_framework.test import APIClient

    def _client(user):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {access_token_for(user)}")
        return client

    return _client


# =============================================================================
# Rooms and broadcasts
# =============================================================================


class RecordingRoomRegistry:
    """Room registry that keeps every broadcast in memory."""

    def __init__(self):
        self.broadcasts = []
        self.members = {}

    async def join(self, room, channel_name):
        self.members.setdefault(room, set()).add(channel_name)

    async def leave(self, room, channel_name):
        self.members.get(room, set()).discard(channel_name)

    async def broadcast(self, room, event, payload):
        self.broadcasts.append((room, event, payload))

    def broadcast_sync(self, room, event, payload):
        self.broadcasts.append((room, event, payload))

    def events(self, room=None):
        """Event names broadcast so far, optionally for one room."""
        return [event for r, event, _ in self.broadcasts if room is None or r == room]

    def payloads(self, event):
        return [payload for _, name, payload in self.broadcasts if name == event]


@pytest.fixture
def room_registry():
    return RecordingRoomRegistry()


@pytest.fixture
def broadcaster(room_registry):
    """
    EventBroadcaster over the recording registry.

    Broadcasts are published on commit; wrap the call under test in
    django_capture_on_commit_callbacks(execute=True) to deliver them.
    """
    from chat.events import EventBroadcaster

    return EventBroadcaster(room_registry)
