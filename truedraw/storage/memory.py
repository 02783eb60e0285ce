"""In-process pool store with the same versioning contract as SQLite."""

import threading
import time

from ..core.models import PRNGState, SeedPool, StoredPool
from .base import ConcurrentUpdateError, PoolStore


class MemoryPoolStore(PoolStore):
    """Dict-backed store. Records are copied in and out so callers never share state."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pools: dict[str, tuple[SeedPool, int, float]] = {}
        self._chains: dict[str, PRNGState] = {}

    def get_pool(self, key: str) -> StoredPool | None:
        with self._lock:
            entry = self._pools.get(key)
            if entry is None:
                return None
            pool, version, expires_at = entry
            if expires_at <= time.time():
                del self._pools[key]
                return None
            return StoredPool(pool=pool.model_copy(deep=True), version=version)

    def replace_pool(self, key: str, pool: SeedPool, ttl_seconds: int) -> int:
        with self._lock:
            previous = self._pools.get(key)
            version = previous[1] + 1 if previous else 1
            self._pools[key] = (
                pool.model_copy(deep=True),
                version,
                pool.created_at + ttl_seconds,
            )
            return version

    def compare_and_swap(
        self,
        key: str,
        pool: SeedPool,
        expected_version: int,
        ttl_seconds: int,
    ) -> int:
        with self._lock:
            current = self._pools.get(key)
            if current is None or current[1] != expected_version:
                raise ConcurrentUpdateError(
                    f"pool {key!r} changed since version {expected_version}"
                )
            version = expected_version + 1
            self._pools[key] = (
                pool.model_copy(deep=True),
                version,
                pool.created_at + ttl_seconds,
            )
            return version

    def delete_pool(self, key: str) -> None:
        with self._lock:
            self._pools.pop(key, None)

    def get_chain_state(self, session_id: str) -> PRNGState | None:
        with self._lock:
            state = self._chains.get(session_id)
            return state.model_copy() if state else None

    def save_chain_state(self, session_id: str, state: PRNGState) -> None:
        with self._lock:
            self._chains[session_id] = state.model_copy()

    def delete_chain_state(self, session_id: str) -> None:
        with self._lock:
            self._chains.pop(session_id, None)
