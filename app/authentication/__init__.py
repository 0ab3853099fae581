"""
Authentication application.

Holds the email-based User model that chats, tryouts and socket sessions are
keyed on. Tokens are issued by rest_framework_simplejwt.

Usage:
    from authentication.models import User
"""
