"""
Tests for authentication app.

This package contains test modules for:
- test_managers.py: UserManager creation and normalization tests
- factories.py: UserFactory shared by the chat and tryouts tests

Usage:
    pytest authentication/tests/
"""
