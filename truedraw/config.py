"""Configuration management for truedraw.

Three config sections:
- pool: seed pool sizing, refill threshold, retention and commit retries
- providers: endpoints, timeouts and batch caps of the external entropy services
- defaults: storage location and debug logging

Config resolution order (highest priority first):
1. Programmatic (TrueDrawConfig constructed in code)
2. Environment variables (POOL_SIZE, QUANTUM_TIMEOUT, DB_PATH, etc.)
3. Config file (~/.config/truedraw/config.json, managed by `truedraw config`)
4. Hardcoded defaults
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


# =============================================================================
# Config file location
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "truedraw"
CONFIG_FILE = CONFIG_DIR / "config.json"


# =============================================================================
# Config sections
# =============================================================================


@dataclass
class PoolConfig:
    """Seed pool lifecycle settings.

    - size: values requested per refill
    - refill_threshold: remaining size below which a background refill starts
    - ttl_seconds: retention window of a pool record, regardless of size
    - max_commit_attempts: compare-and-swap retries before a consume gives up
    """

    size: int = 1000
    refill_threshold: int = 100
    ttl_seconds: int = 60 * 60 * 24
    max_commit_attempts: int = 5
    key: str = "seed_pool"


@dataclass
class ProvidersConfig:
    """External entropy service settings."""

    quantum_url: str = "https://qrng.anu.edu.au/API/jsonI.php"
    quantum_timeout: float = 5.0
    quantum_max_batch: int = 1024
    atmospheric_url: str = "https://www.random.org/integers/"
    atmospheric_timeout: float = 10.0


@dataclass
class DefaultsConfig:
    """Non-pool default settings."""

    db_path: str = "./storage/truedraw.db"
    log_provider_calls: bool = False


# =============================================================================
# Main config class
# =============================================================================


@dataclass
class TrueDrawConfig:
    """Top-level truedraw configuration.

    Examples:
        # Package use: no files needed
        config = TrueDrawConfig(pool=PoolConfig(size=500))

        # CLI use: loads from ~/.config/truedraw/config.json
        config = TrueDrawConfig.load()
    """

    pool: PoolConfig = field(default_factory=PoolConfig)
    providers: ProvidersConfig = field(default_factory=ProvidersConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls) -> "TrueDrawConfig":
        """Load config from file + env vars.

        Priority: env var values > config.json values > defaults.
        """
        config = cls()

        # Layer 1: Load from config file if it exists
        if CONFIG_FILE.exists():
            try:
                with open(CONFIG_FILE) as f:
                    data = json.load(f)
                _apply_dict(config, data)
            except (json.JSONDecodeError, OSError) as exc:
                logger.warning("Failed to load config from %s: %s", CONFIG_FILE, exc)

        # Layer 2: Env var overrides
        _apply_int_env(config.pool, "size", "POOL_SIZE")
        _apply_int_env(config.pool, "refill_threshold", "POOL_REFILL_THRESHOLD")
        _apply_int_env(config.pool, "ttl_seconds", "POOL_TTL_SECONDS")
        if val := os.environ.get("QUANTUM_URL"):
            config.providers.quantum_url = val
        if val := os.environ.get("ATMOSPHERIC_URL"):
            config.providers.atmospheric_url = val
        _apply_float_env(config.providers, "quantum_timeout", "QUANTUM_TIMEOUT")
        _apply_float_env(config.providers, "atmospheric_timeout", "ATMOSPHERIC_TIMEOUT")
        if val := os.environ.get("DB_PATH"):
            config.defaults.db_path = val
        if val := os.environ.get("LOG_PROVIDER_CALLS"):
            try:
                config.defaults.log_provider_calls = _parse_bool(val)
            except ValueError:
                logger.warning("Invalid LOG_PROVIDER_CALLS=%r, ignoring", val)

        return config

    def save(self) -> None:
        """Save config to ~/.config/truedraw/config.json."""
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for display."""
        return {
            "pool": asdict(self.pool),
            "providers": asdict(self.providers),
            "defaults": asdict(self.defaults),
        }

    @property
    def db_path_resolved(self) -> Path:
        """Resolve database path. The store creates missing parent directories."""
        return Path(self.defaults.db_path).expanduser()


# =============================================================================
# Config dict / env application
# =============================================================================

_SECTION_NAMES = ("pool", "providers", "defaults")


def _apply_dict(config: TrueDrawConfig, data: dict) -> None:
    """Apply a dict of values onto a TrueDrawConfig, coercing to field types."""
    for section_name in _SECTION_NAMES:
        section_data = data.get(section_name)
        if not isinstance(section_data, dict):
            continue
        section = getattr(config, section_name)
        for k, v in section_data.items():
            if not hasattr(section, k):
                logger.warning("Ignoring unknown config key %s.%s", section_name, k)
                continue
            try:
                setattr(section, k, coerce_value(getattr(section, k), v))
            except (TypeError, ValueError):
                logger.warning(
                    "Invalid value for %s.%s: %r, ignoring", section_name, k, v
                )


def coerce_value(current: Any, value: Any) -> Any:
    """Coerce a raw value (e.g. from JSON or the CLI) to the type of ``current``."""
    if isinstance(current, bool):
        return _parse_bool(value) if isinstance(value, str) else bool(value)
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    return str(value)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"Invalid boolean: {value!r}")


def _apply_int_env(section: Any, attr: str, env_var: str) -> None:
    if val := os.environ.get(env_var):
        try:
            setattr(section, attr, int(val))
        except ValueError:
            logger.warning("Invalid %s=%r, ignoring", env_var, val)


def _apply_float_env(section: Any, attr: str, env_var: str) -> None:
    if val := os.environ.get(env_var):
        try:
            setattr(section, attr, float(val))
        except ValueError:
            logger.warning("Invalid %s=%r, ignoring", env_var, val)


# =============================================================================
# Global config singleton
# =============================================================================

_config: TrueDrawConfig | None = None


def get_config() -> TrueDrawConfig:
    """Get the global TrueDrawConfig instance.

    First call loads from file + env vars. Subsequent calls return cached instance.
    Use configure() to replace the global config programmatically.
    """
    global _config
    if _config is None:
        _config = TrueDrawConfig.load()
    return _config


def configure(config: TrueDrawConfig) -> None:
    """Set the global TrueDrawConfig programmatically."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global config (forces reload on next get_config())."""
    global _config
    _config = None
