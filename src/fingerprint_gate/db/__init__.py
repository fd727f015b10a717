"""Database module.

Provides the SQLAlchemy association model, async session management, and
utilities.
"""

from fingerprint_gate.db.database import (
    Base,
    build_engine,
    build_session_factory,
    get_db,
    get_engine,
    get_session_factory,
    init_db,
)
from fingerprint_gate.db.models import FingerprintAssociation

__all__ = [
    "Base",
    "FingerprintAssociation",
    "build_engine",
    "build_session_factory",
    "get_db",
    "get_engine",
    "get_session_factory",
    "init_db",
]
