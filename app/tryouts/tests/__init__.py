"""
Tests for tryouts app.

This package contains test modules for:
- test_models.py: TryoutChat state, compare-and-set transitions, querysets
- test_collaborators.py: Application tracker and team membership lookups
- test_services.py: TryoutLifecycleService tests
- test_views.py: REST API endpoint tests
- test_tasks.py: Expired chat purge task

Usage:
    pytest tryouts/tests/
"""
