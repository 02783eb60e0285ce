"""Core entropy sourcing for truedraw.

This package contains:
- models: Pydantic models for pools, draws and hash-chain state
- providers: quantum, atmospheric and CSPRNG entropy tiers
- pool: seed pool lifecycle (PoolManager)
- hashchain: SHA-256 counter-mode generator and its sessions
- synthesis: mapping raw entropy into bounded and unique integers
- generator: the fallback orchestrator (RandomGenerator)

Submodules are not eagerly imported so ``core.models`` stays importable
on its own. Use:
    from truedraw.core.generator import RandomGenerator, build_generator
"""

__all__ = [
    "models",
    "providers",
    "pool",
    "hashchain",
    "synthesis",
    "generator",
]
