"""Registration pipeline hooks.

The boundary a registration pipeline calls: ``before_register`` strictly
before any account is created, ``after_register`` once the pipeline knows
whether the account was durably stored.
"""

import logging

from fingerprint_gate.gate import ThresholdGate
from fingerprint_gate.schemas import (
    CommitOutcome,
    Decision,
    RegistrationAttempt,
    RegistrationResult,
)

logger = logging.getLogger("fingerprint-gate")


class RegistrationHooks:
    """Before/after registration hooks backed by a threshold gate."""

    def __init__(self, gate: ThresholdGate):
        self.gate = gate

    async def before_register(self, attempt: RegistrationAttempt) -> Decision:
        """Check an attempt before the account is created.

        A deny must be surfaced as DEVICE_FINGERPRINT_LIMIT_EXCEEDED (403).
        An error leaves fail-open or fail-closed to the pipeline.
        """
        return await self.gate.evaluate(attempt.fingerprint, attempt.threshold)

    async def after_register(self, result: RegistrationResult) -> CommitOutcome:
        """Record the association for a successful registration."""
        if not result.success:
            return CommitOutcome.SKIPPED
        if result.fingerprint is None:
            return CommitOutcome.SKIPPED
        if result.user_id is None:
            logger.warning("Registration reported success without a user id")
            return CommitOutcome.SKIPPED
        return await self.gate.commit(result.fingerprint, result.user_id)
