"""In-memory fingerprint store.

Single-process store for tests and local development. Every operation runs
under one asyncio.Lock, so the conditional insert is exact.
"""

import asyncio
from datetime import datetime, timezone

from fingerprint_gate.errors import DuplicateAssociation


class InMemoryFingerprintStore:
    """Concurrency-safe in-memory association store.

    All operations are protected by asyncio.Lock to prevent race conditions.
    """

    def __init__(self):
        # fingerprint -> {user_id: created_at}
        self._associations: dict[str, dict[str, datetime]] = {}
        self._lock = asyncio.Lock()

    async def count_by_fingerprint(
        self, fingerprint: str, since: datetime | None = None
    ) -> int:
        """Count associations for a fingerprint. Unknown fingerprints count 0."""
        async with self._lock:
            return self._count(fingerprint, since)

    async def record(self, fingerprint: str, user_id: str) -> None:
        """Insert an association. Raises DuplicateAssociation if present."""
        async with self._lock:
            self._insert(fingerprint, user_id)

    async def record_if_below(
        self,
        fingerprint: str,
        user_id: str,
        threshold: int,
        since: datetime | None = None,
    ) -> tuple[bool, int]:
        """Insert only if fewer than ``threshold`` associations exist.

        Returns:
            Tuple of (inserted, count observed before the insert).
        """
        async with self._lock:
            count = self._count(fingerprint, since)
            if user_id in self._associations.get(fingerprint, {}):
                raise DuplicateAssociation(fingerprint, user_id)
            if count >= threshold:
                return False, count
            self._insert(fingerprint, user_id)
            return True, count

    async def remove_user(self, user_id: str) -> int:
        """Delete every association of an account. Returns rows removed."""
        async with self._lock:
            removed = 0
            for fingerprint in list(self._associations):
                users = self._associations[fingerprint]
                if users.pop(user_id, None) is not None:
                    removed += 1
                if not users:
                    del self._associations[fingerprint]
            return removed

    def _count(self, fingerprint: str, since: datetime | None) -> int:
        users = self._associations.get(fingerprint, {})
        if since is None:
            return len(users)
        return sum(1 for created_at in users.values() if created_at >= since)

    def _insert(self, fingerprint: str, user_id: str) -> None:
        users = self._associations.setdefault(fingerprint, {})
        if user_id in users:
            raise DuplicateAssociation(fingerprint, user_id)
        users[user_id] = datetime.now(timezone.utc)
