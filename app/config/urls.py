"""
URL configuration for the messaging backend.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/chat/                  - Direct messages
        conversations/             - Conversation peers
        conversations/{peer}/messages/ - Conversation page (?before=&limit=)
        messages/                  - Send a direct message
        messages/{id}/respond/     - Accept/decline an invitation message
        tournament-reference/{id}/ - Share a tournament with a captain
    /api/v1/tryouts/               - Tryout chats
        start/                     - Start a tryout from an application
        chats/                     - My tryout chats
        chats/{id}/                - Chat detail with message log
        chats/{id}/messages/       - Post a message
        chats/{id}/end/            - End the tryout
        chats/{id}/send-offer/     - Team sends a join offer
        chats/{id}/accept-offer/   - Applicant accepts the offer
        chats/{id}/reject-offer/   - Applicant rejects the offer

WebSocket: ws/chat/ (see chat.routing)
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

api_v1_patterns = [
    path("chat/", include("chat.urls")),
    path("tryouts/", include("tryouts.urls")),
]

urlpatterns = [
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("admin/", admin.site.urls),
    path("health/", health_check, name="health_check"),
    path("api/v1/", include(api_v1_patterns)),
]

admin.site.site_header = "Recruitment Messaging Admin"
admin.site.site_title = "Messaging Admin"
admin.site.index_title = "Chats and tryouts"
