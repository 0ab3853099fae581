"""
Tests for chat app.

This package contains test modules for:
- test_payloads.py: Typed message payload validation
- test_reconciliation.py: Legacy DirectMessage normalization
- test_events.py: Room registry and on-commit event broadcasting
- test_services.py: DirectMessageService tests
- test_consumers.py: WebSocket consumer and JWT middleware tests
- test_views.py: REST API endpoint tests

Usage:
    pytest chat/tests/
    pytest chat/tests/test_consumers.py
"""
