"""Storage layer for seed pools and hash-chain states."""

from .base import PoolStore, PoolStoreError, ConcurrentUpdateError, UnavailablePoolStore
from .memory import MemoryPoolStore
from .pool_db import SQLitePoolStore, open_pool_store
from .schemas import SeedPoolDBRecord, ChainStateDBRecord

__all__ = [
    "PoolStore",
    "PoolStoreError",
    "ConcurrentUpdateError",
    "UnavailablePoolStore",
    "MemoryPoolStore",
    "SQLitePoolStore",
    "open_pool_store",
    "SeedPoolDBRecord",
    "ChainStateDBRecord",
]
