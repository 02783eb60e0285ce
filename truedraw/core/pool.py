"""Seed pool lifecycle: fetch-on-empty, threshold refill, consume-and-shrink.

The pool is the sole shared mutable resource. Consumers commit a shrunk
pool with compare-and-swap against the version they read; a losing writer
re-reads and retries instead of overwriting, so no raw value is handed out
twice through the store. Refills replace the record wholesale.

Usage:
    manager = PoolManager(store, providers=build_provider_chain())
    numbers, provenance = manager.consume(1, 45, 6)
"""

import logging
import threading

from ..config import PoolConfig
from ..storage.base import ConcurrentUpdateError, PoolStore, PoolStoreError
from .models import PoolStatus, Provenance, SeedPool, StoredPool
from .providers import EntropyProvider, acquire_entropy, build_provider_chain
from .synthesis import map_all

logger = logging.getLogger(__name__)


class PoolContentionError(RuntimeError):
    """Every compare-and-swap attempt of a consume lost to another writer."""


class PoolExhaustedError(RuntimeError):
    """A fresh refill still holds fewer values than the request needs."""


class PoolManager:
    """Owns the lifecycle of one seed pool record.

    Args:
        store: Versioned pool store
        providers: Entropy chain in priority order (defaults to quantum,
            atmospheric, csprng)
        config: Pool sizing and retention settings
    """

    def __init__(
        self,
        store: PoolStore,
        providers: list[EntropyProvider] | None = None,
        config: PoolConfig | None = None,
    ) -> None:
        self.store = store
        self.providers = providers if providers is not None else build_provider_chain()
        self.config = config or PoolConfig()
        self._background_lock = threading.Lock()
        self.last_background_refill: threading.Thread | None = None

    # ── Reads ──

    def load(self) -> StoredPool | None:
        """Read the live pool. Store failures and empty pools read as absent."""
        try:
            stored = self.store.get_pool(self.config.key)
        except PoolStoreError as e:
            logger.warning(f"Pool store read failed, treating as no pool: {e}")
            return None
        if stored is None or stored.pool.is_empty:
            return None
        return stored

    def status(self) -> PoolStatus:
        stored = self.load()
        return PoolStatus.from_pool(stored.pool if stored else None)

    # ── Refill ──

    def refill(self, min_size: int = 0) -> SeedPool:
        """Fetch a new pool from the entropy chain and replace the stored one.

        Never fails: the last tier is a local CSPRNG, and a store write
        failure only leaves the new pool unsaved.
        """
        return self._refill(min_size).pool

    def _refill(self, min_size: int = 0) -> StoredPool:
        target = max(self.config.size, min_size)
        values, provenance = acquire_entropy(target, self.providers)
        pool = SeedPool(values=values, provenance=provenance)

        version: int | None
        try:
            version = self.store.replace_pool(
                self.config.key, pool, self.config.ttl_seconds
            )
        except PoolStoreError as e:
            logger.warning(f"Failed to save refilled pool: {e}")
            version = None

        logger.info(f"Pool refilled with {pool.remaining} values from {provenance.value}")
        return StoredPool(pool=pool, version=version)

    def refill_in_background(self) -> threading.Thread | None:
        """Start a detached refill. Returns None if one is already running.

        The caller never joins the thread; failures are logged only.
        """
        if not self._background_lock.acquire(blocking=False):
            logger.debug("Background refill already in flight")
            return None

        def _run() -> None:
            try:
                self._refill()
            except Exception as e:
                logger.error(f"Background pool refill failed: {e}")
            finally:
                self._background_lock.release()

        thread = threading.Thread(target=_run, name="pool-refill", daemon=True)
        try:
            thread.start()
        except RuntimeError as e:
            self._background_lock.release()
            logger.error(f"Could not start background pool refill: {e}")
            return None
        self.last_background_refill = thread
        return thread

    # ── Consume ──

    def consume(
        self, min_value: int, max_value: int, count: int
    ) -> tuple[list[int], Provenance]:
        """Take the first ``count`` values of the pool and map them into range.

        Refills synchronously first when the pool is missing or holds fewer
        than ``count`` values, so the draw always comes from a single pool.

        Raises:
            PoolContentionError: If every commit attempt lost a race
            PoolExhaustedError: If even a fresh pool is too small
        """
        attempts = max(1, self.config.max_commit_attempts)

        for attempt in range(1, attempts + 1):
            current = self.load()
            if current is None or current.pool.remaining < count:
                current = self._refill(min_size=count)
                if current.pool.remaining < count:
                    raise PoolExhaustedError(
                        f"refilled pool holds {current.pool.remaining} values, "
                        f"{count} needed"
                    )

            pool = current.pool
            taken = pool.values[:count]
            shrunk = pool.model_copy(update={"values": pool.values[count:]})

            if current.version is None:
                logger.warning("Pool store unavailable, consumed from an unsaved pool")
                break
            try:
                self.store.compare_and_swap(
                    self.config.key,
                    shrunk,
                    expected_version=current.version,
                    ttl_seconds=self.config.ttl_seconds,
                )
                break
            except ConcurrentUpdateError:
                logger.debug(f"Pool commit conflict ({attempt}/{attempts}), retrying")
                continue
            except PoolStoreError as e:
                # Values already taken are still returned
                logger.warning(f"Failed to save shrunk pool: {e}")
                break
        else:
            raise PoolContentionError(f"pool commit lost {attempts} races in a row")

        if shrunk.remaining < self.config.refill_threshold:
            logger.info(
                f"Pool below threshold ({shrunk.remaining} < "
                f"{self.config.refill_threshold}), refilling in background"
            )
            self.refill_in_background()

        return map_all(taken, min_value, max_value), pool.provenance
