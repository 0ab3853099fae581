"""
Django admin configuration for tryout models.
"""

from django.contrib import admin

from tryouts.models import TryoutChat, TryoutMessage


class TryoutMessageInline(admin.TabularInline):
    """Read-only message log of a chat."""

    model = TryoutMessage
    extra = 0
    can_delete = False
    readonly_fields = ["sender", "message", "message_type", "metadata", "timestamp"]


@admin.register(TryoutChat)
class TryoutChatAdmin(admin.ModelAdmin):
    """Admin interface for TryoutChat model."""

    list_display = [
        "id",
        "team_id",
        "applicant",
        "chat_type",
        "status",
        "tryout_status",
        "locked",
        "expires_at",
        "created_at",
    ]
    list_filter = ["status", "tryout_status", "chat_type", "locked"]
    search_fields = ["id", "team_id", "application_id", "applicant__email"]
    # State changes go through TryoutLifecycleService only
    readonly_fields = [
        "status",
        "tryout_status",
        "team_offer_status",
        "offer_sent_at",
        "offer_responded_at",
        "ended_at",
        "ended_by",
        "ended_by_kind",
        "locked",
        "created_at",
        "updated_at",
    ]
    raw_id_fields = ["applicant", "participants"]
    inlines = [TryoutMessageInline]
    ordering = ["-created_at"]
