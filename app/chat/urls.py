"""
URL configuration for the direct messaging API.

URL Structure:
    Conversations:
        /conversations/                            GET
        /conversations/{peer}/messages/            GET  (?before=&limit=)

    Messages:
        /messages/                                 POST
        /messages/{id}/respond/                    POST

    Tournaments:
        /tournament-reference/{tournament_id}/     POST

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
"""

from django.urls import path

from chat.views import (
    ConversationListView,
    ConversationMessagesView,
    DirectMessageCreateView,
    InvitationResponseView,
    TournamentReferenceView,
)

app_name = "chat"

urlpatterns = [
    path("conversations/", ConversationListView.as_view(), name="conversation-list"),
    path(
        "conversations/<str:peer>/messages/",
        ConversationMessagesView.as_view(),
        name="conversation-messages",
    ),
    path("messages/", DirectMessageCreateView.as_view(), name="message-create"),
    path(
        "messages/<int:pk>/respond/",
        InvitationResponseView.as_view(),
        name="message-respond",
    ),
    path(
        "tournament-reference/<str:tournament_id>/",
        TournamentReferenceView.as_view(),
        name="tournament-reference",
    ),
]
