"""Error taxonomy for the fingerprint gate.

Business outcomes (a denied registration) are returned as decisions, not
raised. These exceptions cover the idempotency guard, infrastructure
failures, bad configuration, and callers that prefer exceptions at their
own boundary (see ``Decision.raise_for_outcome``).
"""

LIMIT_EXCEEDED_CODE = "DEVICE_FINGERPRINT_LIMIT_EXCEEDED"
STORE_UNAVAILABLE_CODE = "FINGERPRINT_STORE_UNAVAILABLE"


class FingerprintGateError(Exception):
    """Base class for all gate errors."""

    pass


class ConfigurationError(FingerprintGateError):
    """Raised when a configuration value is missing or invalid."""

    pass


class FingerprintLimitExceeded(FingerprintGateError):
    """Too many accounts already registered under one fingerprint.

    Expected and user facing. Not retryable with the same fingerprint.
    """

    code = LIMIT_EXCEEDED_CODE
    status_code = 403
    message = "Too many accounts have been registered from this device."

    def __init__(self, threshold: int, current_count: int):
        super().__init__(
            f"{self.message} (threshold={threshold}, count={current_count})"
        )
        self.threshold = threshold
        self.current_count = current_count


class DuplicateAssociation(FingerprintGateError):
    """The (fingerprint, user_id) association already exists."""

    def __init__(self, fingerprint: str, user_id: str):
        super().__init__(f"Association already recorded for user {user_id}")
        self.fingerprint = fingerprint
        self.user_id = user_id


class StoreUnavailable(FingerprintGateError):
    """The fingerprint store could not be reached or timed out.

    The gate never retries; the pipeline decides between fail-open and
    fail-closed.
    """

    code = STORE_UNAVAILABLE_CODE
    status_code = 503
