"""
Chat app for real-time messaging.

This app handles:
- Direct messages between players, and from the system to a player
- Invitation answers and tournament references
- The socket endpoint and room fan-out used by tryout chats

Related apps:
    - authentication: User model for senders and receivers
    - tryouts: Tryout chats published through the same rooms

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for the socket handler.
    See routing.py for the socket URL.

Usage:
    from chat.services import DirectMessageService

    result = DirectMessageService.send_direct(
        sender=user,
        receiver_id=other_user.pk,
        text="Hello!",
        caller=user,
    )
"""
