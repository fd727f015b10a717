"""Device fingerprint threshold gate.

Decides at registration time whether a new account may be created, based on
how many accounts already share the same device fingerprint.
"""

from fingerprint_gate.config import GateConfig
from fingerprint_gate.errors import (
    ConfigurationError,
    DuplicateAssociation,
    FingerprintGateError,
    FingerprintLimitExceeded,
    StoreUnavailable,
)
from fingerprint_gate.gate import ThresholdGate
from fingerprint_gate.hooks import RegistrationHooks
from fingerprint_gate.schemas import (
    AttemptState,
    CommitOutcome,
    Decision,
    DecisionOutcome,
    DecisionReason,
    RegistrationAttempt,
    RegistrationResult,
)
from fingerprint_gate.store import InMemoryFingerprintStore, SQLFingerprintStore

__all__ = [
    "AttemptState",
    "CommitOutcome",
    "ConfigurationError",
    "Decision",
    "DecisionOutcome",
    "DecisionReason",
    "DuplicateAssociation",
    "FingerprintGateError",
    "FingerprintLimitExceeded",
    "GateConfig",
    "InMemoryFingerprintStore",
    "RegistrationAttempt",
    "RegistrationHooks",
    "SQLFingerprintStore",
    "StoreUnavailable",
    "ThresholdGate",
]
