"""SQLAlchemy-backed fingerprint store.

Works on the caller's AsyncSession: statements are flushed into the
caller's transaction and the caller's unit of work commits. Connection
failures are re-raised as StoreUnavailable.
"""

from datetime import datetime

from sqlalchemy import Select, delete, exists, func, insert, literal, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from fingerprint_gate.db.models import FingerprintAssociation
from fingerprint_gate.errors import DuplicateAssociation, StoreUnavailable


class SQLFingerprintStore:
    """Append-only association table access."""

    def __init__(self, db: AsyncSession):
        """Initialize the store.

        Args:
            db: Async database session owned by the caller.
        """
        self.db = db

    async def count_by_fingerprint(
        self, fingerprint: str, since: datetime | None = None
    ) -> int:
        """Count associations recorded for a fingerprint.

        Args:
            fingerprint: Device fingerprint.
            since: Only count associations created at or after this time.

        Returns:
            Number of associations, 0 for unknown fingerprints.
        """
        result = await self._execute(self._count_query(fingerprint, since))
        return result.scalar() or 0

    async def record(self, fingerprint: str, user_id: str) -> None:
        """Insert a new association.

        Raises:
            DuplicateAssociation: The pair is already recorded.
        """
        stmt = insert(FingerprintAssociation).from_select(
            ["fingerprint", "user_id", "created_at"],
            self._new_row(fingerprint, user_id).where(
                ~self._exists(fingerprint, user_id)
            ),
        )
        try:
            result = await self._execute(stmt)
        except IntegrityError:
            # Lost a race against an identical insert
            raise DuplicateAssociation(fingerprint, user_id) from None
        if result.rowcount != 1:
            raise DuplicateAssociation(fingerprint, user_id)

    async def record_if_below(
        self,
        fingerprint: str,
        user_id: str,
        threshold: int,
        since: datetime | None = None,
    ) -> tuple[bool, int]:
        """Insert an association only while the count is below ``threshold``.

        The count and the insert are one INSERT ... SELECT statement. SQLite
        serializes writers, and on PostgreSQL a transaction-scoped advisory
        lock on the fingerprint serializes concurrent admits, so neither
        overshoots. Other backends at READ COMMITTED can overshoot by at most
        the number of concurrent statements for the same fingerprint.

        Returns:
            Tuple of (inserted, count observed before the insert).

        Raises:
            DuplicateAssociation: The pair is already recorded.
        """
        await self._lock_fingerprint(fingerprint)

        count_before = self._count_query(fingerprint, since).scalar_subquery()
        stmt = insert(FingerprintAssociation).from_select(
            ["fingerprint", "user_id", "created_at"],
            self._new_row(fingerprint, user_id).where(
                count_before < threshold,
                ~self._exists(fingerprint, user_id),
            ),
        )
        try:
            result = await self._execute(stmt)
        except IntegrityError:
            raise DuplicateAssociation(fingerprint, user_id) from None

        inserted = result.rowcount == 1
        if not inserted:
            found = await self._execute(select(self._exists(fingerprint, user_id)))
            if found.scalar():
                raise DuplicateAssociation(fingerprint, user_id)

        # Same transaction, so the count includes our own insert
        count = await self.count_by_fingerprint(fingerprint, since)
        return inserted, count - 1 if inserted else count

    async def remove_user(self, user_id: str) -> int:
        """Delete every association of an account.

        Returns:
            Number of associations removed.
        """
        stmt = delete(FingerprintAssociation).where(
            FingerprintAssociation.user_id == user_id
        )
        result = await self._execute(stmt)
        return result.rowcount or 0

    def _count_query(self, fingerprint: str, since: datetime | None) -> Select:
        query = (
            select(func.count())
            .select_from(FingerprintAssociation)
            .where(FingerprintAssociation.fingerprint == fingerprint)
        )
        if since is not None:
            query = query.where(FingerprintAssociation.created_at >= since)
        return query.correlate(None)

    def _exists(self, fingerprint: str, user_id: str):
        return exists().where(
            FingerprintAssociation.fingerprint == fingerprint,
            FingerprintAssociation.user_id == user_id,
        ).correlate(None)

    def _new_row(self, fingerprint: str, user_id: str) -> Select:
        return select(
            literal(fingerprint, FingerprintAssociation.fingerprint.type),
            literal(user_id, FingerprintAssociation.user_id.type),
            func.now(),
        )

    async def _lock_fingerprint(self, fingerprint: str) -> None:
        """Serialize writers for one fingerprint on PostgreSQL."""
        if self.db.get_bind().dialect.name != "postgresql":
            return
        await self._execute(
            select(func.pg_advisory_xact_lock(func.hashtext(fingerprint)))
        )

    async def _execute(self, statement):
        try:
            return await self.db.execute(statement)
        except (OperationalError, InterfaceError, OSError) as e:
            raise StoreUnavailable(f"Fingerprint store unavailable: {e}") from e
