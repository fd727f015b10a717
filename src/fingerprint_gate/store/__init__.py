"""Fingerprint association stores.

Both stores expose the same async interface: ``count_by_fingerprint``,
``record``, ``record_if_below`` and ``remove_user``.
"""

from fingerprint_gate.store.memory import InMemoryFingerprintStore
from fingerprint_gate.store.sql import SQLFingerprintStore

FingerprintStore = SQLFingerprintStore | InMemoryFingerprintStore

__all__ = [
    "FingerprintStore",
    "InMemoryFingerprintStore",
    "SQLFingerprintStore",
]
