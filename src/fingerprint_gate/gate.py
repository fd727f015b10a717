"""Device fingerprint threshold gate.

Enforces "at most N accounts per fingerprint" at registration time. N is a
deployment setting (default 3) so shared household or café machines still
work while scripted mass registration is stopped.

Two ways to use it:

1. ``evaluate`` before creating the account, then ``commit`` once the
   account is durably stored. The count read and the write are separate, so
   concurrent registrations under one fingerprint can overshoot the
   threshold by at most the number of attempts that had passed ``evaluate``
   and not yet reached ``commit`` when the limit was hit. Every committed
   association is seen by every later ``evaluate``, so the overshoot never
   grows beyond that.
2. ``admit`` inside the transaction that creates the account, with the
   account id allocated up front. The store inserts the association only if
   the count is still below the threshold, in one atomic statement, so the
   decision and the write cannot race.
"""

import asyncio
import logging
from collections.abc import Awaitable
from datetime import datetime, timezone
from typing import TypeVar

from fingerprint_gate.config import GateConfig
from fingerprint_gate.errors import DuplicateAssociation, StoreUnavailable
from fingerprint_gate.schemas import CommitOutcome, Decision, normalize_fingerprint
from fingerprint_gate.store import FingerprintStore

logger = logging.getLogger("fingerprint-gate")

T = TypeVar("T")


def _short(fingerprint: str) -> str:
    """Truncate a fingerprint for log lines."""
    return fingerprint if len(fingerprint) <= 12 else f"{fingerprint[:12]}..."


class ThresholdGate:
    """Allows or denies registrations by device fingerprint reuse."""

    def __init__(self, store: FingerprintStore, config: GateConfig | None = None):
        """Initialize the gate.

        Args:
            store: Fingerprint association store.
            config: Gate configuration. Loads from env if not provided.
        """
        self.store = store
        self.config = config or GateConfig.from_env()

    def resolve_threshold(self, threshold: int | None = None) -> int:
        """Per-attempt threshold, falling back to the configured default."""
        if threshold is None:
            return self.config.threshold
        if threshold < 1:
            raise ValueError(f"threshold must be at least 1, got {threshold}")
        return threshold

    async def evaluate(
        self, fingerprint: str | None, threshold: int | None = None
    ) -> Decision:
        """Decide whether a registration under ``fingerprint`` may proceed.

        A missing or malformed fingerprint always allows. A store failure or
        timeout returns an error decision, never a deny.

        Args:
            fingerprint: Client-supplied device fingerprint.
            threshold: Override for the configured threshold.

        Returns:
            Allow, deny (with threshold and observed count) or error.
        """
        limit = self.resolve_threshold(threshold)
        fingerprint = normalize_fingerprint(fingerprint)
        if fingerprint is None:
            return Decision.allow(threshold=limit)

        try:
            count = await self._call(
                self.store.count_by_fingerprint(fingerprint, self.window_start())
            )
        except StoreUnavailable as e:
            logger.error(f"Fingerprint check failed for {_short(fingerprint)}: {e}")
            return Decision.error(threshold=limit)

        if count >= limit:
            logger.warning(
                f"Registration denied for fingerprint {_short(fingerprint)}: "
                f"{count} accounts, threshold {limit}"
            )
            return Decision.deny(threshold=limit, current_count=count)
        return Decision.allow(threshold=limit, current_count=count)

    async def commit(self, fingerprint: str | None, user_id: str) -> CommitOutcome:
        """Record that ``user_id`` was created under ``fingerprint``.

        Call only after the account is durably stored. Failures never undo
        the registration; a FAILED outcome tells the pipeline to retry the
        association write out-of-band.

        Args:
            fingerprint: Fingerprint the account registered with.
            user_id: Identifier of the new account.

        Returns:
            COMMITTED, ALREADY_COMMITTED, SKIPPED or FAILED.
        """
        if not user_id:
            raise ValueError("user_id is required to commit an association")
        fingerprint = normalize_fingerprint(fingerprint)
        if fingerprint is None:
            return CommitOutcome.SKIPPED

        try:
            await self._call(self.store.record(fingerprint, user_id))
        except DuplicateAssociation:
            logger.info(
                f"Association for user {user_id} and fingerprint "
                f"{_short(fingerprint)} already recorded"
            )
            return CommitOutcome.ALREADY_COMMITTED
        except StoreUnavailable as e:
            logger.error(
                f"Failed to record fingerprint {_short(fingerprint)} "
                f"for user {user_id}: {e}"
            )
            return CommitOutcome.FAILED

        logger.info(f"Recorded fingerprint {_short(fingerprint)} for user {user_id}")
        return CommitOutcome.COMMITTED

    async def admit(
        self,
        fingerprint: str | None,
        user_id: str,
        threshold: int | None = None,
    ) -> Decision:
        """Atomically check the threshold and record the association.

        Run inside the transaction that creates the account. On a deny the
        caller must not create the account. A retried admit for an account
        that was already admitted allows again without counting twice.

        Args:
            fingerprint: Client-supplied device fingerprint.
            user_id: Identifier allocated for the new account.
            threshold: Override for the configured threshold.

        Returns:
            Allow, deny or error, as for ``evaluate``.
        """
        if not user_id:
            raise ValueError("user_id is required to admit a registration")
        limit = self.resolve_threshold(threshold)
        fingerprint = normalize_fingerprint(fingerprint)
        if fingerprint is None:
            return Decision.allow(threshold=limit)

        try:
            inserted, count = await self._call(
                self.store.record_if_below(
                    fingerprint, user_id, limit, since=self.window_start()
                )
            )
        except DuplicateAssociation:
            return Decision.allow(threshold=limit)
        except StoreUnavailable as e:
            logger.error(f"Fingerprint admit failed for {_short(fingerprint)}: {e}")
            return Decision.error(threshold=limit)

        if not inserted:
            logger.warning(
                f"Registration denied for fingerprint {_short(fingerprint)}: "
                f"{count} accounts, threshold {limit}"
            )
            return Decision.deny(threshold=limit, current_count=count)
        return Decision.allow(threshold=limit, current_count=count)

    def window_start(self) -> datetime | None:
        """Oldest association time that still counts, or None for all."""
        window = self.config.window
        if window is None:
            return None
        return datetime.now(timezone.utc) - window

    async def _call(self, operation: Awaitable[T]) -> T:
        """Await a store call, turning a timeout into StoreUnavailable."""
        try:
            return await asyncio.wait_for(
                operation, timeout=self.config.store_timeout_seconds
            )
        except TimeoutError as e:
            raise StoreUnavailable(
                f"Store call timed out after {self.config.store_timeout_seconds}s"
            ) from e
