"""
Tests for payments app.

This package contains test modules for:
- test_state_transitions.py: Order FSM transitions
- test_optimistic_locking.py: ConcurrentTransitionMixin compare-and-swap
- test_signatures.py: Payment and webhook HMAC checks
- test_checks.py: Razorpay configuration system checks
- test_views.py: Checkout API endpoint tests
- test_admin.py: Order admin smoke tests

Adapter, service and webhook tests live beside their packages.

Usage:
    pytest payments/
    pytest payments/tests/test_signatures.py
"""
