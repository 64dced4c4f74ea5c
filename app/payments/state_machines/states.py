"""
State enums for payment models.

This module defines the state enum used by Order with django-fsm.
It is a Django TextChoices for database storage and admin integration.

State Machine Overview:

Order payment status:
    pending → paid
    pending → failed

    paid and failed are terminal. Nothing in this app moves an order out
    of them; an administrative correction happens outside the state machine.
"""

from django.db import models


class PaymentStatus(models.TextChoices):
    """
    Payment status of an Order.

    Terminal states: PAID, FAILED

    State Flow:
        PENDING → PAID    (verified client confirmation or payment.captured)
        PENDING → FAILED  (client-reported failure or payment.failed)
    """

    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"

    @classmethod
    def terminal(cls) -> frozenset[str]:
        return frozenset({cls.PAID, cls.FAILED})


__all__ = ["PaymentStatus"]
