"""Pydantic schemas for pool store rows."""

from __future__ import annotations

import json

from pydantic import BaseModel, Field

from ..core.models import PRNGState, Provenance, SeedPool


class SeedPoolDBRecord(BaseModel):
    """Validated representation of a row in ``seed_pools``."""

    pool_key: str = Field(min_length=1)
    values_json: str
    provenance: Provenance
    created_at: float
    expires_at: float
    version: int = Field(ge=1)

    @classmethod
    def from_pool(
        cls, pool_key: str, pool: SeedPool, ttl_seconds: int, version: int
    ) -> "SeedPoolDBRecord":
        return cls(
            pool_key=pool_key,
            values_json=json.dumps(pool.values),
            provenance=pool.provenance,
            created_at=pool.created_at,
            expires_at=pool.created_at + ttl_seconds,
            version=version,
        )

    def to_pool(self) -> SeedPool:
        return SeedPool(
            values=json.loads(self.values_json),
            provenance=self.provenance,
            created_at=self.created_at,
        )


class ChainStateDBRecord(BaseModel):
    """Validated representation of a row in ``chain_states``."""

    session_id: str = Field(min_length=1)
    seed_hex: str = Field(min_length=64, max_length=64)
    counter: int = Field(ge=0)
    provenance: Provenance

    @classmethod
    def from_state(cls, session_id: str, state: PRNGState) -> "ChainStateDBRecord":
        return cls(
            session_id=session_id,
            seed_hex=state.seed.hex(),
            counter=state.counter,
            provenance=state.provenance,
        )

    def to_state(self) -> PRNGState:
        return PRNGState(
            seed=bytes.fromhex(self.seed_hex),
            counter=self.counter,
            provenance=self.provenance,
        )
