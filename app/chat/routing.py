"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/chat/ - One socket per client session (direct messages and tryout chats)

Authentication:
    JWT token passed as ?token=<jwt_access_token> or as the subprotocol pair
    "jwt, <token>". JWTAuthMiddleware validates it and attaches the user to
    the consumer's scope.
"""

from django.apps import apps
from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path(
        "ws/chat/",
        consumers.ChatConsumer.as_asgi(registry=apps.get_app_config("chat").rooms),
    ),
]
