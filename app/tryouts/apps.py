"""
Tryouts application configuration.

This app provides tryout chats between a team and an applicant:
- Lifecycle (active, offer, accept/reject, ended)
- Message log locked by terminal transitions
- Purge of expired chats
"""

from django.apps import AppConfig


class TryoutsConfig(AppConfig):
    """Configuration for the tryouts application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "tryouts"
    verbose_name = "Tryouts"
