"""
Test configuration and fixtures for chat tests.

Usage:
    def test_example(user, other_user, conversation):
        assert len(conversation) == 3
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from chat.tests.factories import DirectMessageFactory


@pytest.fixture
def conversation(user, other_user):
    """Three messages between user and other_user, one minute apart, oldest first."""
    start = timezone.now() - timedelta(minutes=10)
    return [
        DirectMessageFactory(sender=user, receiver=other_user, timestamp=start),
        DirectMessageFactory(
            sender=other_user, receiver=user, timestamp=start + timedelta(minutes=1)
        ),
        DirectMessageFactory(
            sender=user, receiver=other_user, timestamp=start + timedelta(minutes=2)
        ),
    ]
