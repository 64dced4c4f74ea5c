"""
Persistence for time-bound secrets.

SecretStore is the only code that writes TimeBoundSecret rows. Every
mutation is a single database statement or a short transaction, so
correctness does not depend on in-process locks and holds across any
number of web workers.

Operations:
    put: Replace whatever secret exists for (user, purpose)
    get: Fetch the current secret for (user, purpose)
    delete_if_present: Remove the secret for (user, purpose)
    consume: Conditional delete of one exact record

Usage:
    from authentication.store import SecretStore

    record = SecretStore.get(user.id, SecretPurpose.EMAIL_VERIFICATION)
    if record and SecretStore.consume(record):
        ...  # this caller won; any concurrent consumer sees False
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction
from django.utils import timezone

from authentication.models import TimeBoundSecret

if TYPE_CHECKING:
    from datetime import datetime

logger = logging.getLogger(__name__)

# Concurrent puts for the same key can collide on the unique constraint.
# One more delete-then-insert resolves it; the later writer wins.
PUT_ATTEMPTS = 2


class SecretStore:
    """Atomic storage primitives for TimeBoundSecret."""

    @staticmethod
    def put(
        subject_id,
        purpose: str,
        hashed_value: str,
        expires_at: datetime,
    ) -> TimeBoundSecret:
        """
        Store a secret, replacing any prior record for the same key.

        The delete and insert run in one transaction, so readers see either
        the old record or the new one, never both and never neither after
        commit.

        Args:
            subject_id: Primary key of the user
            purpose: SecretPurpose value
            hashed_value: Output of make_password()
            expires_at: Absolute expiry instant

        Returns:
            The newly stored TimeBoundSecret
        """
        for attempt in range(1, PUT_ATTEMPTS + 1):
            try:
                with transaction.atomic():
                    TimeBoundSecret.objects.filter(
                        user_id=subject_id, purpose=purpose
                    ).delete()
                    return TimeBoundSecret.objects.create(
                        user_id=subject_id,
                        purpose=purpose,
                        hashed_value=hashed_value,
                        issued_at=timezone.now(),
                        expires_at=expires_at,
                    )
            except IntegrityError:
                if attempt == PUT_ATTEMPTS:
                    raise
                logger.info(
                    "Concurrent secret issue detected, replacing again",
                    extra={"user_id": subject_id, "purpose": purpose},
                )

    @staticmethod
    def get(subject_id, purpose: str) -> TimeBoundSecret | None:
        """Return the current secret for (subject, purpose), or None."""
        return TimeBoundSecret.objects.filter(
            user_id=subject_id, purpose=purpose
        ).first()

    @staticmethod
    def delete_if_present(subject_id, purpose: str) -> bool:
        """Delete the secret for (subject, purpose). True if a row was removed."""
        deleted, _ = TimeBoundSecret.objects.filter(
            user_id=subject_id, purpose=purpose
        ).delete()
        return deleted > 0

    @staticmethod
    def consume(secret: TimeBoundSecret) -> bool:
        """
        Atomically delete exactly this record.

        Issues ``DELETE ... WHERE id = :id AND hashed_value = :hash``. Among
        any number of concurrent callers holding the same record, exactly
        one sees True. A record superseded by a reissue is left alone.

        Note:
            TimeBoundSecret has no dependents and no delete signals, so
            Django performs this as one fast-path DELETE statement.
        """
        deleted, _ = TimeBoundSecret.objects.filter(
            pk=secret.pk, hashed_value=secret.hashed_value
        ).delete()
        return deleted > 0
