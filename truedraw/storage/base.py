"""Pool store interface.

A store holds one seed pool record per key, with a retention TTL and an
integer version used for optimistic concurrency, plus hash-chain states
keyed by session id. Absence of a record is a normal state, never an error.
"""

from abc import ABC, abstractmethod

from ..core.models import PRNGState, SeedPool, StoredPool


class PoolStoreError(Exception):
    """The store could not be read or written."""


class ConcurrentUpdateError(PoolStoreError):
    """A compare-and-swap lost against another writer."""


class PoolStore(ABC):
    """Versioned key-value store for seed pools and hash-chain states."""

    @abstractmethod
    def get_pool(self, key: str) -> StoredPool | None:
        """Return the live pool record, or None if absent or expired."""

    @abstractmethod
    def replace_pool(self, key: str, pool: SeedPool, ttl_seconds: int) -> int:
        """Unconditionally replace the pool record. Returns the new version."""

    @abstractmethod
    def compare_and_swap(
        self,
        key: str,
        pool: SeedPool,
        expected_version: int,
        ttl_seconds: int,
    ) -> int:
        """Write ``pool`` only if the stored version equals ``expected_version``.

        The TTL is measured from ``pool.created_at``, so shrinking a pool
        never extends its retention window.

        Raises:
            ConcurrentUpdateError: If the record changed or disappeared.
        """

    @abstractmethod
    def delete_pool(self, key: str) -> None:
        """Remove the pool record if present."""

    @abstractmethod
    def get_chain_state(self, session_id: str) -> PRNGState | None:
        """Return the persisted hash-chain state of a session, if any."""

    @abstractmethod
    def save_chain_state(self, session_id: str, state: PRNGState) -> None:
        """Persist the hash-chain state of a session."""

    @abstractmethod
    def delete_chain_state(self, session_id: str) -> None:
        """Discard the hash-chain state of a session."""

    def ping(self) -> None:
        """Raise PoolStoreError if the store is unreachable."""

    def close(self) -> None:
        pass

    def __enter__(self) -> "PoolStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False


class UnavailablePoolStore(PoolStore):
    """Placeholder for a store that could not be opened.

    Every operation raises PoolStoreError, so callers take the same
    degraded paths they take when a live store goes down.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason

    def _unavailable(self) -> PoolStoreError:
        return PoolStoreError(f"pool store unavailable: {self.reason}")

    def get_pool(self, key: str) -> StoredPool | None:
        raise self._unavailable()

    def replace_pool(self, key: str, pool: SeedPool, ttl_seconds: int) -> int:
        raise self._unavailable()

    def compare_and_swap(
        self,
        key: str,
        pool: SeedPool,
        expected_version: int,
        ttl_seconds: int,
    ) -> int:
        raise self._unavailable()

    def delete_pool(self, key: str) -> None:
        raise self._unavailable()

    def get_chain_state(self, session_id: str) -> PRNGState | None:
        raise self._unavailable()

    def save_chain_state(self, session_id: str, state: PRNGState) -> None:
        raise self._unavailable()

    def delete_chain_state(self, session_id: str) -> None:
        raise self._unavailable()

    def ping(self) -> None:
        raise self._unavailable()
