"""Pydantic schemas for gate decisions and the registration hook contract.

These are plain data: the pipeline passes attempts and results in, the gate
hands decisions and commit outcomes back. Nothing is carried implicitly
between the two hooks.
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from fingerprint_gate.db.models import FINGERPRINT_MAX_LENGTH
from fingerprint_gate.errors import FingerprintLimitExceeded, StoreUnavailable

# =============================================================================
# Enums
# =============================================================================


class DecisionOutcome(str, Enum):
    """Result of evaluating a registration attempt."""

    ALLOW = "allow"
    DENY = "deny"
    ERROR = "error"  # Store unavailable; pipeline picks fail-open or fail-closed


class DecisionReason(str, Enum):
    """Why a decision was not a plain allow."""

    FINGERPRINT_LIMIT_EXCEEDED = "fingerprint_limit_exceeded"
    STORE_UNAVAILABLE = "store_unavailable"


class CommitOutcome(str, Enum):
    """Result of recording a fingerprint association after registration."""

    COMMITTED = "committed"
    ALREADY_COMMITTED = "already_committed"  # Retried commit, count unchanged
    SKIPPED = "skipped"  # No fingerprint, failed registration, or no user id
    FAILED = "failed"  # Store unavailable; retry out-of-band


class AttemptState(str, Enum):
    """Lifecycle of a single registration attempt."""

    PENDING = "pending"
    EVALUATING = "evaluating"
    ALLOWED = "allowed"
    DENIED = "denied"  # Terminal
    ERRORED = "errored"
    COMMITTED = "committed"


# =============================================================================
# Fingerprint normalization
# =============================================================================


def normalize_fingerprint(value: object) -> str | None:
    """Return the usable fingerprint, or None if missing or malformed.

    A missing fingerprint is a client capability gap, not a fraud signal.
    """
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or len(value) > FINGERPRINT_MAX_LENGTH:
        return None
    return value


# =============================================================================
# Decision
# =============================================================================


class Decision(BaseModel):
    """Outcome of the threshold check for one registration attempt."""

    outcome: DecisionOutcome
    reason: DecisionReason | None = None
    threshold: int | None = None
    current_count: int | None = None  # None when no count was taken

    @classmethod
    def allow(
        cls, threshold: int | None = None, current_count: int | None = None
    ) -> "Decision":
        return cls(
            outcome=DecisionOutcome.ALLOW,
            threshold=threshold,
            current_count=current_count,
        )

    @classmethod
    def deny(cls, threshold: int, current_count: int) -> "Decision":
        return cls(
            outcome=DecisionOutcome.DENY,
            reason=DecisionReason.FINGERPRINT_LIMIT_EXCEEDED,
            threshold=threshold,
            current_count=current_count,
        )

    @classmethod
    def error(cls, threshold: int | None = None) -> "Decision":
        return cls(
            outcome=DecisionOutcome.ERROR,
            reason=DecisionReason.STORE_UNAVAILABLE,
            threshold=threshold,
        )

    @property
    def allowed(self) -> bool:
        return self.outcome == DecisionOutcome.ALLOW

    @property
    def denied(self) -> bool:
        return self.outcome == DecisionOutcome.DENY

    @property
    def errored(self) -> bool:
        return self.outcome == DecisionOutcome.ERROR

    @property
    def state(self) -> AttemptState:
        """Attempt state reached once this decision is made."""
        return {
            DecisionOutcome.ALLOW: AttemptState.ALLOWED,
            DecisionOutcome.DENY: AttemptState.DENIED,
            DecisionOutcome.ERROR: AttemptState.ERRORED,
        }[self.outcome]

    def raise_for_outcome(self) -> None:
        """Raise the matching exception for deny and error decisions.

        Raises:
            FingerprintLimitExceeded: The decision is a deny.
            StoreUnavailable: The decision is an error.
        """
        if self.denied:
            raise FingerprintLimitExceeded(self.threshold, self.current_count)
        if self.errored:
            raise StoreUnavailable("Fingerprint store unavailable")


# =============================================================================
# Hook Contract
# =============================================================================


class RegistrationAttempt(BaseModel):
    """Input to the before-register hook."""

    fingerprint: str | None = None
    threshold: int | None = Field(default=None, ge=1)

    @field_validator("fingerprint", mode="before")
    @classmethod
    def clean_fingerprint(cls, value: object) -> str | None:
        return normalize_fingerprint(value)


class RegistrationResult(BaseModel):
    """Input to the after-register hook."""

    success: bool
    user_id: str | None = None
    fingerprint: str | None = None

    @field_validator("fingerprint", mode="before")
    @classmethod
    def clean_fingerprint(cls, value: object) -> str | None:
        return normalize_fingerprint(value)

    @field_validator("user_id", mode="before")
    @classmethod
    def clean_user_id(cls, value: object) -> str | None:
        if value is None:
            return None
        value = str(value).strip()
        return value or None
