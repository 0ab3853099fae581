"""
Tests for core infrastructure.

- test_services.py: ServiceResult and BaseService helpers
- test_views.py: failure_response mapping and the health check
"""
