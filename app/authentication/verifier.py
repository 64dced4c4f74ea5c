"""
Verification of time-bound secrets.

Outcomes of SecretVerifier.verify():

    +----------------------------+-------------------------------------------+
    | Situation                  | Result                                    |
    +----------------------------+-------------------------------------------+
    | no record                  | failure NOT_FOUND                         |
    | past expires_at            | record deleted, failure EXPIRED           |
    | wrong value                | failure INVALID, record kept              |
    | right value, consume wins  | success (VerifiedSecret)                  |
    | right value, consume loses | failure NOT_FOUND (another caller won)    |
    | attempt policy blocks      | failure INVALID, hash not checked         |
    +----------------------------+-------------------------------------------+

Attempt policy:
    SECRET_ATTEMPT_POLICY names a class implementing AttemptPolicy. The
    default, NoLockoutPolicy, never blocks; request throttling in DRF bounds
    guessing. A deployment can plug in a counting policy without touching
    the verifier.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings
from django.contrib.auth.hashers import check_password
from django.utils import timezone
from django.utils.module_loading import import_string

from authentication.store import SecretStore
from core.services import BaseService, ErrorKind, ServiceResult


class AttemptPolicy:
    """
    Extension point consulted around every secret check.

    Subclasses decide whether a subject may attempt verification, and are
    told about failures and successes so they can count attempts.
    """

    def allow(self, subject_id, purpose: str) -> bool:
        raise NotImplementedError

    def record_failure(self, subject_id, purpose: str) -> None:
        pass

    def record_success(self, subject_id, purpose: str) -> None:
        pass


class NoLockoutPolicy(AttemptPolicy):
    """Never blocks. A wrong value only returns INVALID."""

    def allow(self, subject_id, purpose: str) -> bool:
        return True


def get_attempt_policy() -> AttemptPolicy:
    """Instantiate the policy named by SECRET_ATTEMPT_POLICY."""
    return import_string(settings.SECRET_ATTEMPT_POLICY)()


@dataclass(frozen=True)
class VerifiedSecret:
    user_id: int
    purpose: str


class SecretVerifier(BaseService):
    """Checks presented secrets and consumes them exactly once."""

    @classmethod
    def verify(cls, subject_id, purpose: str, presented) -> ServiceResult[VerifiedSecret]:
        """
        Verify a presented secret for (subject, purpose).

        Args:
            subject_id: Primary key of the user
            purpose: SecretPurpose value
            presented: Plaintext value supplied by the user

        Returns:
            ServiceResult[VerifiedSecret]; see the module docstring for
            the failure kinds.
        """
        logger = cls.get_logger()
        log_extra = {"user_id": subject_id, "purpose": purpose}
        policy = get_attempt_policy()

        if not policy.allow(subject_id, purpose):
            logger.warning("Secret verification blocked by policy", extra=log_extra)
            return ServiceResult.failure(
                "Too many attempts",
                error_code=ErrorKind.INVALID,
                details={"reason": "ATTEMPTS_EXCEEDED"},
            )

        record = SecretStore.get(subject_id, purpose)
        if record is None:
            return ServiceResult.failure(
                "No pending secret for this user", error_code=ErrorKind.NOT_FOUND
            )

        if record.is_expired(timezone.now()):
            # Conditional delete: a reissue that landed meanwhile survives
            SecretStore.consume(record)
            logger.info("Expired secret removed on verify", extra=log_extra)
            return ServiceResult.failure(
                "Secret has expired", error_code=ErrorKind.EXPIRED
            )

        if not isinstance(presented, str) or not check_password(
            presented, record.hashed_value
        ):
            policy.record_failure(subject_id, purpose)
            logger.info("Secret mismatch", extra=log_extra)
            return ServiceResult.failure(
                "Secret is invalid", error_code=ErrorKind.INVALID
            )

        if not SecretStore.consume(record):
            logger.info("Secret already consumed by a concurrent verify", extra=log_extra)
            return ServiceResult.failure(
                "No pending secret for this user", error_code=ErrorKind.NOT_FOUND
            )

        policy.record_success(subject_id, purpose)
        logger.info("Secret verified", extra=log_extra)
        return ServiceResult.success(VerifiedSecret(user_id=subject_id, purpose=purpose))
