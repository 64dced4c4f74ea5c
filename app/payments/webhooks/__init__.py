"""
Razorpay webhook handling.

- handlers.py: Signature check, parsing and the event handler registry
- views.py: The HTTP endpoint
"""
