"""Data models for truedraw.

This module contains:
- Provenance: which entropy path produced a result
- SeedPool / StoredPool: the cached batch of raw 16-bit values
- DrawRequest / DrawResult: the draw contract
- PRNGState: persisted hash-chain position
- PoolStatus / RefillResult / SystemStatus: read-only status payloads
"""

import time
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Limits
# =============================================================================

MAX_COUNT = 100
MAX_RAW_VALUE = 0xFFFF
MAX_RANGE = 2**32
SEED_LENGTH = 32


class DrawRequestError(ValueError):
    """A draw request violates its contract (bad range, count or uniqueness)."""


# =============================================================================
# Provenance
# =============================================================================


class Provenance(str, Enum):
    """Entropy path that produced the raw values of a result."""

    QUANTUM = "quantum"
    ATMOSPHERIC = "atmospheric"
    CSPRNG = "csprng"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    Provenance.QUANTUM: "ANU Quantum (quantum vacuum noise)",
    Provenance.ATMOSPHERIC: "Random.org (atmospheric noise)",
    Provenance.CSPRNG: "Local CSPRNG",
}


# =============================================================================
# Seed pool
# =============================================================================


class SeedPool(BaseModel):
    """A batch of pre-fetched raw values, consumed from the front."""

    values: list[int] = Field(default_factory=list)
    provenance: Provenance
    created_at: float = Field(default_factory=time.time)

    @field_validator("values")
    @classmethod
    def check_raw_values(cls, v: list[int]) -> list[int]:
        for value in v:
            if value < 0 or value > MAX_RAW_VALUE:
                raise ValueError(f"raw value {value} outside 0..{MAX_RAW_VALUE}")
        return v

    @property
    def remaining(self) -> int:
        return len(self.values)

    @property
    def is_empty(self) -> bool:
        return not self.values

    def age_seconds(self, now: float | None = None) -> float:
        return (now if now is not None else time.time()) - self.created_at


class StoredPool(BaseModel):
    """A pool as read from the store, with its optimistic-concurrency version.

    ``version`` is None when the pool only exists in memory (the store
    write that should have created it failed).
    """

    pool: SeedPool
    version: int | None = None


# =============================================================================
# Draw contract
# =============================================================================


class DrawRequest(BaseModel):
    """Validated draw parameters."""

    min: int
    max: int
    count: int = 1
    unique: bool = False

    @model_validator(mode="after")
    def check_contract(self) -> "DrawRequest":
        if self.min >= self.max:
            raise ValueError("min must be less than max")
        if self.count < 1 or self.count > MAX_COUNT:
            raise ValueError(f"count must be between 1 and {MAX_COUNT}")
        if self.range_size > MAX_RANGE:
            raise ValueError("range must fit in a 32-bit unsigned integer")
        if self.unique and self.count > self.range_size:
            raise ValueError(
                "Cannot generate more unique numbers than range allows"
            )
        return self

    @property
    def range_size(self) -> int:
        return self.max - self.min + 1

    @classmethod
    def parse(
        cls, min: int, max: int, count: int = 1, unique: bool = False
    ) -> "DrawRequest":
        """Build a request, raising DrawRequestError on contract violations."""
        from pydantic import ValidationError

        try:
            return cls(min=min, max=max, count=count, unique=unique)
        except ValidationError as e:
            messages = [err["msg"].removeprefix("Value error, ") for err in e.errors()]
            raise DrawRequestError("; ".join(messages)) from None


class DrawResult(BaseModel):
    """Numbers produced by a draw, tagged with their entropy provenance."""

    numbers: list[int]
    provenance: Provenance

    @property
    def source(self) -> str:
        return self.provenance.value


# =============================================================================
# Hash-chain state
# =============================================================================


class PRNGState(BaseModel):
    """Position of a hash-chain generator: the next block index to emit."""

    seed: bytes
    counter: int = Field(default=0, ge=0)
    provenance: Provenance = Provenance.CSPRNG

    @field_validator("seed")
    @classmethod
    def check_seed_length(cls, v: bytes) -> bytes:
        if len(v) != SEED_LENGTH:
            raise ValueError(f"seed must be exactly {SEED_LENGTH} bytes, got {len(v)}")
        return v


# =============================================================================
# Status payloads
# =============================================================================


class PoolStatus(BaseModel):
    """Read-only snapshot of the active pool."""

    exists: bool = False
    remaining: int = 0
    provenance: Provenance | None = None
    created_at: float | None = None
    age_minutes: int | None = None

    @classmethod
    def from_pool(cls, pool: SeedPool | None, now: float | None = None) -> "PoolStatus":
        if pool is None:
            return cls()
        return cls(
            exists=True,
            remaining=pool.remaining,
            provenance=pool.provenance,
            created_at=pool.created_at,
            age_minutes=round(pool.age_seconds(now) / 60),
        )


class RefillResult(BaseModel):
    """Outcome of a forced refill."""

    success: bool = True
    remaining: int
    provenance: Provenance


class StoreHealth(BaseModel):
    status: str = "connected"
    error: str | None = None


class SystemStatus(BaseModel):
    """Store health, pool snapshot and configured provider endpoints."""

    timestamp: float = Field(default_factory=time.time)
    store: StoreHealth = Field(default_factory=StoreHealth)
    pool: PoolStatus = Field(default_factory=PoolStatus)
    providers: dict[str, str] = Field(default_factory=dict)
