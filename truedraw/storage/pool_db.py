"""SQLite-backed pool store.

This module provides the schema and helper operations for ``truedraw.db``.
Every pool write bumps an integer version; consumers commit shrunk pools
with ``UPDATE ... WHERE version = ?`` so a stale writer cannot overwrite a
newer record.
"""

from __future__ import annotations

import sqlite3
import threading
import time
from datetime import datetime
from pathlib import Path

from ..core.models import PRNGState, SeedPool, StoredPool
from .base import ConcurrentUpdateError, PoolStore, PoolStoreError
from .schemas import ChainStateDBRecord, SeedPoolDBRecord


def _now_iso() -> str:
    return datetime.now().isoformat()


class SQLitePoolStore(PoolStore):
    """SQLite-backed seed pool and hash-chain state store."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.Lock()
        try:
            if str(path) != ":memory:":
                self.path.parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(str(path), check_same_thread=False, timeout=5.0)
            self.conn.row_factory = sqlite3.Row
            self._set_pragmas()
            self.init_schema()
        except (sqlite3.Error, OSError) as e:
            raise PoolStoreError(f"cannot open pool store at {path}: {e}") from e

    def _set_pragmas(self) -> None:
        cursor = self.conn.cursor()
        cursor.execute("PRAGMA journal_mode = WAL")
        cursor.execute("PRAGMA synchronous = NORMAL")
        self.conn.commit()

    def init_schema(self) -> None:
        """Create schema and indexes."""
        cursor = self.conn.cursor()
        cursor.executescript(
            """
            CREATE TABLE IF NOT EXISTS seed_pools (
                pool_key TEXT PRIMARY KEY,
                values_json TEXT NOT NULL,
                provenance TEXT NOT NULL,
                created_at REAL NOT NULL,
                expires_at REAL NOT NULL,
                version INTEGER NOT NULL
            );

            CREATE TABLE IF NOT EXISTS chain_states (
                session_id TEXT PRIMARY KEY,
                seed_hex TEXT NOT NULL,
                counter INTEGER NOT NULL,
                provenance TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_seed_pools_expires ON seed_pools(expires_at);
            """
        )
        self.conn.commit()

    def close(self) -> None:
        with self._lock:
            self.conn.close()

    def ping(self) -> None:
        try:
            with self._lock:
                self.conn.execute("SELECT 1").fetchone()
        except sqlite3.Error as e:
            raise PoolStoreError(str(e)) from e

    # ── Seed pool ──

    def get_pool(self, key: str) -> StoredPool | None:
        try:
            with self._lock:
                cursor = self.conn.cursor()
                cursor.execute("SELECT * FROM seed_pools WHERE pool_key = ?", (key,))
                row = cursor.fetchone()
                if row is None:
                    return None
                if row["expires_at"] <= time.time():
                    cursor.execute(
                        "DELETE FROM seed_pools WHERE pool_key = ? AND version = ?",
                        (key, row["version"]),
                    )
                    self.conn.commit()
                    return None
                rec = SeedPoolDBRecord(**dict(row))
        except sqlite3.Error as e:
            raise PoolStoreError(f"failed to read pool {key!r}: {e}") from e
        return StoredPool(pool=rec.to_pool(), version=rec.version)

    def replace_pool(self, key: str, pool: SeedPool, ttl_seconds: int) -> int:
        rec = SeedPoolDBRecord.from_pool(key, pool, ttl_seconds, version=1)
        try:
            with self._lock:
                cursor = self.conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO seed_pools
                    (pool_key, values_json, provenance, created_at, expires_at, version)
                    VALUES (?, ?, ?, ?, ?, 1)
                    ON CONFLICT(pool_key) DO UPDATE SET
                        values_json = excluded.values_json,
                        provenance = excluded.provenance,
                        created_at = excluded.created_at,
                        expires_at = excluded.expires_at,
                        version = seed_pools.version + 1
                    """,
                    (
                        rec.pool_key,
                        rec.values_json,
                        rec.provenance.value,
                        rec.created_at,
                        rec.expires_at,
                    ),
                )
                cursor.execute(
                    "SELECT version FROM seed_pools WHERE pool_key = ?", (key,)
                )
                version = int(cursor.fetchone()["version"])
                self.conn.commit()
        except sqlite3.Error as e:
            raise PoolStoreError(f"failed to write pool {key!r}: {e}") from e
        return version

    def compare_and_swap(
        self,
        key: str,
        pool: SeedPool,
        expected_version: int,
        ttl_seconds: int,
    ) -> int:
        rec = SeedPoolDBRecord.from_pool(
            key, pool, ttl_seconds, version=expected_version + 1
        )
        try:
            with self._lock:
                cursor = self.conn.cursor()
                cursor.execute(
                    """
                    UPDATE seed_pools
                    SET values_json = ?, provenance = ?, created_at = ?,
                        expires_at = ?, version = version + 1
                    WHERE pool_key = ? AND version = ?
                    """,
                    (
                        rec.values_json,
                        rec.provenance.value,
                        rec.created_at,
                        rec.expires_at,
                        key,
                        expected_version,
                    ),
                )
                updated = cursor.rowcount
                self.conn.commit()
        except sqlite3.Error as e:
            raise PoolStoreError(f"failed to write pool {key!r}: {e}") from e
        if updated != 1:
            raise ConcurrentUpdateError(
                f"pool {key!r} changed since version {expected_version}"
            )
        return rec.version

    def delete_pool(self, key: str) -> None:
        try:
            with self._lock:
                self.conn.execute("DELETE FROM seed_pools WHERE pool_key = ?", (key,))
                self.conn.commit()
        except sqlite3.Error as e:
            raise PoolStoreError(f"failed to delete pool {key!r}: {e}") from e

    # ── Hash-chain states ──

    def get_chain_state(self, session_id: str) -> PRNGState | None:
        try:
            with self._lock:
                cursor = self.conn.cursor()
                cursor.execute(
                    """
                    SELECT session_id, seed_hex, counter, provenance
                    FROM chain_states
                    WHERE session_id = ?
                    """,
                    (session_id,),
                )
                row = cursor.fetchone()
        except sqlite3.Error as e:
            raise PoolStoreError(f"failed to read chain state {session_id!r}: {e}") from e
        if row is None:
            return None
        return ChainStateDBRecord(**dict(row)).to_state()

    def save_chain_state(self, session_id: str, state: PRNGState) -> None:
        rec = ChainStateDBRecord.from_state(session_id, state)
        try:
            with self._lock:
                self.conn.execute(
                    """
                    INSERT OR REPLACE INTO chain_states
                    (session_id, seed_hex, counter, provenance, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        rec.session_id,
                        rec.seed_hex,
                        rec.counter,
                        rec.provenance.value,
                        _now_iso(),
                    ),
                )
                self.conn.commit()
        except sqlite3.Error as e:
            raise PoolStoreError(f"failed to save chain state {session_id!r}: {e}") from e

    def delete_chain_state(self, session_id: str) -> None:
        try:
            with self._lock:
                self.conn.execute(
                    "DELETE FROM chain_states WHERE session_id = ?", (session_id,)
                )
                self.conn.commit()
        except sqlite3.Error as e:
            raise PoolStoreError(
                f"failed to delete chain state {session_id!r}: {e}"
            ) from e


def open_pool_store(path: Path | str) -> SQLitePoolStore:
    return SQLitePoolStore(path)
