"""
StarShield Test Suite
=====================

Test organization:
- tests/services/warranty/   - Lifecycle services, store, notifications and API

Run tests:
    pytest                          # All tests
    pytest tests/services/warranty  # Warranty service only
    pytest --cov=services --cov=shared
"""
