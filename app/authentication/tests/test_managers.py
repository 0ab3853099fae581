"""
Tests for UserManager and the slim User model.

Related files:
    - managers.py: Implementation under test
    - models.py: User model that uses this manager
"""

import pytest

from authentication.models import User
from authentication.tests.factories import UserFactory


class TestUserManagerCreateUser:
    """Tests for UserManager.create_user() method."""

    def test_creates_user_with_email_and_password(self, db):
        """
        Given valid email and password
        When create_user is called
        Then a user is created with those credentials
        """
        user = User.objects.create_user(email="player@example.com", password="SecurePass123!")

        assert user.pk is not None
        assert user.email == "player@example.com"
        assert user.check_password("SecurePass123!") is True

    def test_normalizes_email_domain_to_lowercase(self, db):
        user = User.objects.create_user(email="Night.Owl@EXAMPLE.COM", password="pw12345!")

        assert user.email == "Night.Owl@example.com"

    def test_raises_valueerror_when_email_is_empty(self, db):
        with pytest.raises(ValueError, match="Email field must be set"):
            User.objects.create_user(email="", password="pw12345!")

    def test_creates_user_without_password(self, db):
        """
        Given no password (identity issued by an external provider)
        When create_user is called
        Then the user has an unusable password
        """
        user = User.objects.create_user(email="external@example.com")

        assert user.has_usable_password() is False

    def test_sets_default_flags_for_regular_user(self, db):
        user = User.objects.create_user(email="flags@example.com", password="pw12345!")

        assert user.is_active is True
        assert user.is_staff is False
        assert user.is_superuser is False


class TestUserManagerCreateSuperuser:
    """Tests for UserManager.create_superuser() method."""

    def test_creates_superuser_with_correct_flags(self, db):
        admin = User.objects.create_superuser(email="admin@example.com", password="pw12345!")

        assert admin.is_staff is True
        assert admin.is_superuser is True

    def test_raises_valueerror_when_is_staff_is_false(self, db):
        with pytest.raises(ValueError, match="is_staff=True"):
            User.objects.create_superuser(
                email="admin2@example.com", password="pw12345!", is_staff=False
            )

    def test_raises_valueerror_when_is_superuser_is_false(self, db):
        with pytest.raises(ValueError, match="is_superuser=True"):
            User.objects.create_superuser(
                email="admin3@example.com", password="pw12345!", is_superuser=False
            )


class TestUserNames:
    """Tests for the name helpers used when rendering chat participants."""

    def test_full_name_prefers_display_name(self, db):
        user = UserFactory(display_name="Night Owl")

        assert user.get_full_name() == "Night Owl"
        assert user.get_short_name() == "Night Owl"

    def test_names_fall_back_to_email(self, db):
        user = UserFactory(email="captain@example.com", display_name="")

        assert user.get_full_name() == "captain@example.com"
        assert user.get_short_name() == "captain"
        assert str(user) == "captain@example.com"
