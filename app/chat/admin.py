"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Direct message moderation
"""

from django.contrib import admin

from chat.models import DirectMessage


@admin.register(DirectMessage)
class DirectMessageAdmin(admin.ModelAdmin):
    """Admin interface for DirectMessage model."""

    list_display = [
        "id",
        "sender",
        "receiver",
        "message_type",
        "content_preview",
        "invitation_status",
        "timestamp",
    ]
    list_filter = ["message_type", "invitation_status", "timestamp"]
    search_fields = ["message", "sender__email", "receiver__email"]
    readonly_fields = ["created_at", "updated_at", "timestamp"]
    raw_id_fields = ["sender", "receiver"]
    ordering = ["-timestamp"]

    @admin.display(description="Content Preview")
    def content_preview(self, obj: DirectMessage) -> str:
        """Return truncated message text for list display."""
        max_length = 50
        if len(obj.message) > max_length:
            return obj.message[:max_length] + "..."
        return obj.message
