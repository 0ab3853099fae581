"""
Chat application configuration.

This app provides:
- Direct (player-to-player and system) messages
- The room registry and event broadcaster shared with tryouts
- The WebSocket consumer
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"

    def ready(self):
        """Build the process room registry over the default channel layer."""
        from channels.layers import get_channel_layer

        from chat.rooms import RoomRegistry

        self.rooms = RoomRegistry(get_channel_layer())
