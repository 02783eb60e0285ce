"""Tests for layered configuration (defaults, file, env)."""

import json

from truedraw import config as config_module
from truedraw.config import (
    PoolConfig,
    TrueDrawConfig,
    coerce_value,
    configure,
    get_config,
    reset_config,
)


class TestDefaults:
    def test_defaults(self):
        config = TrueDrawConfig.load()
        assert config.pool.size == 1000
        assert config.pool.refill_threshold == 100
        assert config.pool.ttl_seconds == 86400
        assert config.providers.quantum_url == "https://qrng.anu.edu.au/API/jsonI.php"
        assert config.providers.quantum_timeout == 5.0
        assert config.providers.quantum_max_batch == 1024
        assert config.providers.atmospheric_url == "https://www.random.org/integers/"
        assert config.providers.atmospheric_timeout == 10.0
        assert config.defaults.log_provider_calls is False

    def test_programmatic(self):
        config = TrueDrawConfig(pool=PoolConfig(size=500))
        assert config.pool.size == 500
        assert config.pool.refill_threshold == 100


class TestFileLayer:
    def test_file_values_applied(self):
        config_module.CONFIG_DIR.mkdir(parents=True)
        config_module.CONFIG_FILE.write_text(
            json.dumps(
                {
                    "pool": {"size": 250, "refill_threshold": "25"},
                    "providers": {"atmospheric_timeout": 3},
                    "defaults": {"log_provider_calls": "yes"},
                }
            )
        )

        config = TrueDrawConfig.load()

        assert config.pool.size == 250
        assert config.pool.refill_threshold == 25
        assert config.providers.atmospheric_timeout == 3.0
        assert config.defaults.log_provider_calls is True

    def test_unknown_and_invalid_keys_ignored(self):
        config_module.CONFIG_DIR.mkdir(parents=True)
        config_module.CONFIG_FILE.write_text(
            json.dumps({"pool": {"colour": "blue", "size": "lots"}, "extra": {}})
        )

        config = TrueDrawConfig.load()

        assert config.pool.size == 1000
        assert not hasattr(config.pool, "colour")

    def test_corrupt_file_falls_back_to_defaults(self):
        config_module.CONFIG_DIR.mkdir(parents=True)
        config_module.CONFIG_FILE.write_text("{not json")
        assert TrueDrawConfig.load().pool.size == 1000

    def test_save_round_trip(self):
        config = TrueDrawConfig()
        config.pool.size = 42
        config.providers.quantum_timeout = 1.25
        config.save()

        loaded = TrueDrawConfig.load()
        assert loaded.pool.size == 42
        assert loaded.providers.quantum_timeout == 1.25


class TestEnvLayer:
    def test_env_overrides_file(self, monkeypatch):
        config_module.CONFIG_DIR.mkdir(parents=True)
        config_module.CONFIG_FILE.write_text(json.dumps({"pool": {"size": 250}}))
        monkeypatch.setenv("POOL_SIZE", "2000")
        monkeypatch.setenv("POOL_REFILL_THRESHOLD", "50")
        monkeypatch.setenv("POOL_TTL_SECONDS", "3600")
        monkeypatch.setenv("QUANTUM_URL", "http://localhost:9000/q")
        monkeypatch.setenv("ATMOSPHERIC_TIMEOUT", "2.5")
        monkeypatch.setenv("DB_PATH", "/tmp/elsewhere.db")
        monkeypatch.setenv("LOG_PROVIDER_CALLS", "1")

        config = TrueDrawConfig.load()

        assert config.pool.size == 2000
        assert config.pool.refill_threshold == 50
        assert config.pool.ttl_seconds == 3600
        assert config.providers.quantum_url == "http://localhost:9000/q"
        assert config.providers.atmospheric_timeout == 2.5
        assert config.defaults.db_path == "/tmp/elsewhere.db"
        assert config.defaults.log_provider_calls is True

    def test_invalid_env_values_ignored(self, monkeypatch):
        monkeypatch.setenv("POOL_SIZE", "many")
        monkeypatch.setenv("QUANTUM_TIMEOUT", "soon")
        monkeypatch.setenv("LOG_PROVIDER_CALLS", "perhaps")

        config = TrueDrawConfig.load()

        assert config.pool.size == 1000
        assert config.providers.quantum_timeout == 5.0
        assert config.defaults.log_provider_calls is False


class TestSingleton:
    def test_get_config_caches(self):
        assert get_config() is get_config()

    def test_configure_and_reset(self):
        custom = TrueDrawConfig(pool=PoolConfig(size=7))
        configure(custom)
        assert get_config() is custom
        reset_config()
        assert get_config() is not custom


class TestCoerceValue:
    def test_types(self):
        assert coerce_value(1, "5") == 5
        assert coerce_value(1.0, "2.5") == 2.5
        assert coerce_value(False, "true") is True
        assert coerce_value(True, "off") is False
        assert coerce_value("a", 3) == "3"


class TestDbPath:
    def test_resolving_does_not_touch_filesystem(self, tmp_path):
        config = TrueDrawConfig()
        config.defaults.db_path = str(tmp_path / "missing" / "truedraw.db")
        assert config.db_path_resolved == tmp_path / "missing" / "truedraw.db"
        assert not (tmp_path / "missing").exists()
