"""
URL configuration for the tryouts API.

URL Structure:
    /start/                      POST
    /chats/                      GET
    /chats/{id}/                 GET
    /chats/{id}/messages/        POST
    /chats/{id}/end/             POST
    /chats/{id}/send-offer/      POST
    /chats/{id}/accept-offer/    POST
    /chats/{id}/reject-offer/    POST

All URLs are prefixed with /api/v1/tryouts/ in the main URL configuration.
"""

from django.urls import path

from tryouts.views import (
    AcceptOfferView,
    EndTryoutView,
    RejectOfferView,
    SendOfferView,
    StartTryoutView,
    TryoutChatDetailView,
    TryoutChatListView,
    TryoutMessageCreateView,
)

app_name = "tryouts"

urlpatterns = [
    path("start/", StartTryoutView.as_view(), name="start"),
    path("chats/", TryoutChatListView.as_view(), name="chat-list"),
    path("chats/<str:chat_id>/", TryoutChatDetailView.as_view(), name="chat-detail"),
    path("chats/<str:chat_id>/messages/", TryoutMessageCreateView.as_view(), name="chat-messages"),
    path("chats/<str:chat_id>/end/", EndTryoutView.as_view(), name="chat-end"),
    path("chats/<str:chat_id>/send-offer/", SendOfferView.as_view(), name="chat-send-offer"),
    path("chats/<str:chat_id>/accept-offer/", AcceptOfferView.as_view(), name="chat-accept-offer"),
    path("chats/<str:chat_id>/reject-offer/", RejectOfferView.as_view(), name="chat-reject-offer"),
]
