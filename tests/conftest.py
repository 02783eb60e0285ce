"""Shared fixtures: fake entropy providers and config isolation."""

import logging

import pytest

from truedraw import config as config_module
from truedraw.cli.app import set_generator
from truedraw.core.models import Provenance
from truedraw.core.providers.base import EntropyProvider, ProviderFetchError


_ENV_VARS = (
    "POOL_SIZE",
    "POOL_REFILL_THRESHOLD",
    "POOL_TTL_SECONDS",
    "QUANTUM_URL",
    "QUANTUM_TIMEOUT",
    "ATMOSPHERIC_URL",
    "ATMOSPHERIC_TIMEOUT",
    "DB_PATH",
    "LOG_PROVIDER_CALLS",
)


class FakeProvider(EntropyProvider):
    """Provider returning a sequential stream 0, 1, 2, ... (mod 2**16) or failing."""

    def __init__(self, provenance: Provenance, fail: bool = False, start: int = 0):
        super().__init__()
        self.name = f"fake-{provenance.value}"
        self.provenance = provenance
        self.fail = fail
        self.calls: list[int] = []
        self._next = start

    def _fetch(self, count: int) -> list[int]:
        self.calls.append(count)
        if self.fail:
            raise ProviderFetchError("service down")
        values = [(self._next + i) % 0x10000 for i in range(count)]
        self._next += count
        return values


@pytest.fixture
def make_provider():
    """Factory for fake providers."""

    def _make(
        provenance: Provenance = Provenance.QUANTUM,
        fail: bool = False,
        start: int = 0,
    ) -> FakeProvider:
        return FakeProvider(provenance, fail=fail, start=start)

    return _make


@pytest.fixture
def failing_chain(make_provider):
    """Quantum and atmospheric both down, CSPRNG last."""
    from truedraw.core.providers.csprng import CSPRNGProvider

    return [
        make_provider(Provenance.QUANTUM, fail=True),
        make_provider(Provenance.ATMOSPHERIC, fail=True),
        CSPRNGProvider(),
    ]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at tmp_path and clear env overrides."""
    config_dir = tmp_path / "config"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_dir / "config.json")
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config_module.reset_config()
    set_generator(None)
    logging.getLogger("truedraw").setLevel(logging.NOTSET)
    yield
    config_module.reset_config()
    set_generator(None)
    logging.getLogger("truedraw").setLevel(logging.NOTSET)
