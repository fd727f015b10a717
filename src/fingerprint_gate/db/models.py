"""SQLAlchemy model for device fingerprint associations."""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from fingerprint_gate.db.database import Base

FINGERPRINT_MAX_LENGTH = 255


class FingerprintAssociation(Base):
    """One account created under one device fingerprint.

    Append-only: rows are inserted once when a registration succeeds and
    only removed by account deletion.
    """

    __tablename__ = "fingerprint_associations"

    fingerprint: Mapped[str] = mapped_column(
        String(FINGERPRINT_MAX_LENGTH), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Indexes
    __table_args__ = (
        Index("ix_fingerprint_associations_fingerprint", "fingerprint"),
        Index("ix_fingerprint_associations_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"FingerprintAssociation(fingerprint={self.fingerprint!r}, "
            f"user_id={self.user_id!r})"
        )
