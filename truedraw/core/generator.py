"""Fallback orchestrator: the top-level draw API.

A pool draw walks ``START -> TRY_POOL -> DONE`` or, on any failure of the
pool tier, ``TRY_POOL -> TRY_CSPRNG -> DONE``. The CSPRNG tier cannot
fail, so a valid request always produces a result. Contract violations
are raised before any tier runs.
"""

import logging
import time

from ..config import TrueDrawConfig
from ..storage import PoolStore, PoolStoreError, UnavailablePoolStore, open_pool_store
from .hashchain import ChainSessions
from .models import (
    DrawRequest,
    DrawResult,
    PoolStatus,
    Provenance,
    RefillResult,
    StoreHealth,
    SystemStatus,
)
from .pool import PoolManager
from .providers import EntropyProvider, build_provider_chain
from .synthesis import csprng_numbers, overfetch_count, unique_numbers

logger = logging.getLogger(__name__)


class RandomGenerator:
    """Draws bounded integers through the tiered entropy chain.

    Args:
        pool: Pool manager for the pooled mode
        chains: Session manager for the hash-chain mode
        provider_urls: Endpoints reported by ``system_status``
    """

    def __init__(
        self,
        pool: PoolManager,
        chains: ChainSessions | None = None,
        provider_urls: dict[str, str] | None = None,
    ) -> None:
        self.pool = pool
        self.chains = chains or ChainSessions(pool.store, pool.providers)
        self.provider_urls = provider_urls or {}

    # ── Pooled mode ──

    def generate(
        self, min: int, max: int, count: int = 1, unique: bool = False
    ) -> DrawResult:
        """Draw ``count`` integers in ``[min, max]``.

        Raises:
            DrawRequestError: If the request violates its contract
        """
        request = DrawRequest.parse(min, max, count, unique)
        try:
            return self._from_pool(request)
        except Exception as e:
            logger.error(f"Pool consumption failed, falling back to CSPRNG: {e}")
            return self._from_csprng(request)

    def _from_pool(self, request: DrawRequest) -> DrawResult:
        if not request.unique:
            numbers, provenance = self.pool.consume(
                request.min, request.max, request.count
            )
            return DrawResult(numbers=numbers, provenance=provenance)

        fetch = overfetch_count(request.count, request.min, request.max)
        candidates, provenance = self.pool.consume(request.min, request.max, fetch)
        numbers = unique_numbers(candidates, request.min, request.max, request.count)
        return DrawResult(numbers=numbers, provenance=provenance)

    @staticmethod
    def _from_csprng(request: DrawRequest) -> DrawResult:
        if request.unique:
            fetch = overfetch_count(request.count, request.min, request.max)
            candidates = csprng_numbers(request.min, request.max, fetch)
            numbers = unique_numbers(
                candidates, request.min, request.max, request.count
            )
        else:
            numbers = csprng_numbers(request.min, request.max, request.count)
        return DrawResult(numbers=numbers, provenance=Provenance.CSPRNG)

    # ── Hash-chain mode ──

    def generate_chained(
        self,
        session_id: str,
        min: int,
        max: int,
        count: int = 1,
        unique: bool = False,
        reseed: bool = False,
    ) -> DrawResult:
        """Draw from the session's hash-chain generator and persist its new position.

        Raises:
            DrawRequestError: If the request violates its contract
        """
        request = DrawRequest.parse(min, max, count, unique)
        if reseed:
            prng = self.chains.reseed(session_id)
        else:
            prng = self.chains.load_or_start(session_id)

        if request.unique:
            fetch = overfetch_count(request.count, request.min, request.max)
            candidates = prng.draw(request.min, request.max, fetch)
            numbers = unique_numbers(
                candidates, request.min, request.max, request.count
            )
        else:
            numbers = prng.draw(request.min, request.max, request.count)

        self.chains.save(session_id, prng)
        return DrawResult(numbers=numbers, provenance=prng.provenance)

    # ── Status ──

    def pool_status(self) -> PoolStatus:
        return self.pool.status()

    def force_refill(self) -> RefillResult:
        pool = self.pool.refill()
        return RefillResult(
            success=True, remaining=pool.remaining, provenance=pool.provenance
        )

    def system_status(self) -> SystemStatus:
        """Store health, pool snapshot and provider endpoints. Never raises."""
        health = StoreHealth()
        try:
            self.pool.store.ping()
        except PoolStoreError as e:
            health = StoreHealth(status="error", error=str(e))

        return SystemStatus(
            timestamp=time.time(),
            store=health,
            pool=self.pool_status(),
            providers=dict(self.provider_urls),
        )


def build_generator(
    config: TrueDrawConfig,
    store: PoolStore | None = None,
    providers: list[EntropyProvider] | None = None,
) -> RandomGenerator:
    """Wire a RandomGenerator from config with explicit component instances."""
    if store is None:
        try:
            store = open_pool_store(config.db_path_resolved)
        except PoolStoreError as e:
            logger.warning(f"Running without a pool store: {e}")
            store = UnavailablePoolStore(str(e))
    if providers is None:
        providers = build_provider_chain(
            config.providers, log_calls=config.defaults.log_provider_calls
        )
    pool = PoolManager(store, providers=providers, config=config.pool)
    return RandomGenerator(
        pool,
        ChainSessions(store, providers),
        provider_urls={
            "quantum": config.providers.quantum_url,
            "atmospheric": config.providers.atmospheric_url,
        },
    )
