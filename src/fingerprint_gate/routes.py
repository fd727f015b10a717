"""Registration gate API routes.

Exposes the before/after registration hooks over HTTP for pipelines running
in another process.
"""

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from fingerprint_gate.config import GateConfig
from fingerprint_gate.db.database import get_db
from fingerprint_gate.errors import FingerprintLimitExceeded, StoreUnavailable
from fingerprint_gate.gate import ThresholdGate
from fingerprint_gate.hooks import RegistrationHooks
from fingerprint_gate.schemas import (
    CommitOutcome,
    Decision,
    RegistrationAttempt,
    RegistrationResult,
    normalize_fingerprint,
)
from fingerprint_gate.store import SQLFingerprintStore

router = APIRouter(tags=["Registration Gate"])


# =============================================================================
# Dependencies
# =============================================================================


@lru_cache
def get_gate_config() -> GateConfig:
    """Gate configuration, loaded once from the environment."""
    return GateConfig.from_env()


def get_gate(
    db: AsyncSession = Depends(get_db),
    config: GateConfig = Depends(get_gate_config),
) -> ThresholdGate:
    """Gate bound to the request's database session."""
    return ThresholdGate(SQLFingerprintStore(db), config)


def get_hooks(gate: ThresholdGate = Depends(get_gate)) -> RegistrationHooks:
    return RegistrationHooks(gate)


# =============================================================================
# Request/Response Models
# =============================================================================


class CompleteResponse(BaseModel):
    """Result of recording a completed registration."""

    outcome: CommitOutcome


class CountResponse(BaseModel):
    """Registration count for one fingerprint."""

    fingerprint: str
    count: int


class RemoveResponse(BaseModel):
    """Associations removed for a deleted account."""

    user_id: str
    removed: int


def _store_unavailable(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"code": StoreUnavailable.code, "message": message},
    )


# =============================================================================
# Routes
# =============================================================================


@router.post("/registrations/check", response_model=Decision)
async def check_registration(
    attempt: RegistrationAttempt,
    hooks: RegistrationHooks = Depends(get_hooks),
):
    """Check a registration attempt before the account is created.

    - 200 with the decision when the registration may proceed
    - 403 DEVICE_FINGERPRINT_LIMIT_EXCEEDED when the threshold is reached
    - 503 when the fingerprint store is unavailable (caller picks
      fail-open or fail-closed)
    """
    decision = await hooks.before_register(attempt)

    if decision.denied:
        raise HTTPException(
            status_code=FingerprintLimitExceeded.status_code,
            detail={
                "code": FingerprintLimitExceeded.code,
                "message": FingerprintLimitExceeded.message,
                "threshold": decision.threshold,
                "current_count": decision.current_count,
            },
        )
    if decision.errored:
        raise _store_unavailable("Fingerprint check could not be completed")

    return decision


@router.post("/registrations/complete", response_model=CompleteResponse)
async def complete_registration(
    result: RegistrationResult,
    hooks: RegistrationHooks = Depends(get_hooks),
):
    """Record the fingerprint association after the account was stored.

    Returns 503 when the association could not be written; the caller
    should retry it out-of-band. The registration itself stands.
    """
    outcome = await hooks.after_register(result)

    if outcome == CommitOutcome.FAILED:
        raise _store_unavailable("Fingerprint association was not recorded")

    return CompleteResponse(outcome=outcome)


@router.get("/fingerprints/{fingerprint}/count", response_model=CountResponse)
async def get_fingerprint_count(
    fingerprint: str,
    gate: ThresholdGate = Depends(get_gate),
):
    """Get the current registration count for a fingerprint."""
    normalized = normalize_fingerprint(fingerprint)
    if normalized is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid fingerprint",
        )

    try:
        count = await gate.store.count_by_fingerprint(normalized, gate.window_start())
    except StoreUnavailable as e:
        raise _store_unavailable(str(e)) from e

    return CountResponse(fingerprint=normalized, count=count)


@router.delete("/users/{user_id}/fingerprints", response_model=RemoveResponse)
async def remove_user_fingerprints(
    user_id: str,
    gate: ThresholdGate = Depends(get_gate),
):
    """Remove a deleted account's associations.

    Called by the account deletion process; later counts shrink accordingly.
    """
    try:
        removed = await gate.store.remove_user(user_id)
    except StoreUnavailable as e:
        raise _store_unavailable(str(e)) from e

    return RemoveResponse(user_id=user_id, removed=removed)
