"""Hash-chain PRNG: deterministic expansion of a 32-byte seed.

Block ``n`` of the stream is ``SHA-256(seed || uint64_be(n))``. The counter
advances by one per block emitted, and unused bytes at the end of a block
are dropped rather than buffered, so ``(seed, counter)`` is the whole
state: persisting it after each draw lets a new process continue exactly
where the old one stopped without replaying output.

Usage:
    prng = HashChainPRNG(seed)
    numbers = prng.draw(1, 6, count=10)
    state = prng.state            # persist this
    resumed = HashChainPRNG.from_state(state)
"""

import hashlib
import logging
import math
import struct

from ..storage.base import PoolStore, PoolStoreError
from .models import SEED_LENGTH, PRNGState, Provenance
from .providers import EntropyProvider, acquire_entropy
from .synthesis import map_to_range

logger = logging.getLogger(__name__)

BLOCK_SIZE = 32  # SHA-256 digest length
WORD_SIZE = 4  # one uint32 per draw
SEED_VALUES = SEED_LENGTH // 2  # 16-bit raw values per seed


def chain_block(seed: bytes, counter: int) -> bytes:
    """Return block ``counter`` of the chain for ``seed``. Pure function."""
    return hashlib.sha256(seed + struct.pack(">Q", counter)).digest()


class HashChainPRNG:
    """Counter-mode SHA-256 generator over a fixed seed."""

    def __init__(
        self,
        seed: bytes,
        counter: int = 0,
        provenance: Provenance = Provenance.CSPRNG,
    ) -> None:
        state = PRNGState(seed=seed, counter=counter, provenance=provenance)
        self._seed = state.seed
        self._counter = state.counter
        self.provenance = state.provenance

    @classmethod
    def from_state(cls, state: PRNGState) -> "HashChainPRNG":
        return cls(state.seed, state.counter, state.provenance)

    @property
    def counter(self) -> int:
        return self._counter

    @property
    def state(self) -> PRNGState:
        return PRNGState(
            seed=self._seed, counter=self._counter, provenance=self.provenance
        )

    def next_block(self) -> bytes:
        block = chain_block(self._seed, self._counter)
        self._counter += 1
        return block

    def read(self, n: int) -> bytes:
        """Return ``n`` bytes from whole blocks; the tail of the last block is dropped."""
        blocks = math.ceil(n / BLOCK_SIZE)
        return b"".join(self.next_block() for _ in range(blocks))[:n]

    def words(self, count: int) -> list[int]:
        """Return ``count`` big-endian uint32 values."""
        data = self.read(count * WORD_SIZE)
        return [
            int.from_bytes(data[i : i + WORD_SIZE], "big")
            for i in range(0, count * WORD_SIZE, WORD_SIZE)
        ]

    def draw(self, min_value: int, max_value: int, count: int) -> list[int]:
        """Draw ``count`` numbers in ``[min_value, max_value]`` (modulo reduction)."""
        return [map_to_range(w, min_value, max_value) for w in self.words(count)]


def seed_from_values(values: list[int]) -> bytes:
    """Pack sixteen 16-bit values big-endian into a 32-byte seed."""
    if len(values) < SEED_VALUES:
        raise ValueError(f"need {SEED_VALUES} values for a seed, got {len(values)}")
    return b"".join(v.to_bytes(2, "big") for v in values[:SEED_VALUES])


class ChainSessions:
    """Owns per-session hash-chain states in a pool store.

    A session's state is never shared or merged with another session. The
    only way to change a session's provenance is ``reseed``, which discards
    the stored state and draws a fresh seed from the entropy chain.
    """

    def __init__(
        self,
        store: PoolStore,
        providers: list[EntropyProvider] | None = None,
    ) -> None:
        self.store = store
        self.providers = providers

    def load(self, session_id: str) -> HashChainPRNG | None:
        try:
            state = self.store.get_chain_state(session_id)
        except PoolStoreError as e:
            logger.warning(f"Chain state read failed for {session_id!r}: {e}")
            return None
        return HashChainPRNG.from_state(state) if state else None

    def start(self, session_id: str) -> HashChainPRNG:
        """Seed a new generator from the entropy chain and persist it."""
        values, provenance = acquire_entropy(SEED_VALUES, self.providers)
        prng = HashChainPRNG(seed_from_values(values), 0, provenance)
        self.save(session_id, prng)
        logger.info(f"Seeded chain session {session_id!r} from {provenance.value}")
        return prng

    def load_or_start(self, session_id: str) -> HashChainPRNG:
        return self.load(session_id) or self.start(session_id)

    def reseed(self, session_id: str) -> HashChainPRNG:
        self.forget(session_id)
        return self.start(session_id)

    def save(self, session_id: str, prng: HashChainPRNG) -> None:
        try:
            self.store.save_chain_state(session_id, prng.state)
        except PoolStoreError as e:
            logger.warning(f"Failed to persist chain state for {session_id!r}: {e}")

    def forget(self, session_id: str) -> None:
        try:
            self.store.delete_chain_state(session_id)
        except PoolStoreError as e:
            logger.warning(f"Failed to discard chain state for {session_id!r}: {e}")
