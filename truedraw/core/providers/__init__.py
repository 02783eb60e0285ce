"""Entropy provider registry and the tiered acquisition chain.

Provides:
- PROVIDER_ORDER: the fixed priority of entropy tiers
- get_provider(): create a provider instance from a tier name
- build_provider_chain(): the full quantum → atmospheric → csprng chain
- acquire_entropy(): walk the chain until one tier yields a batch
"""

import importlib
import logging

from ...config import ProvidersConfig
from ..models import Provenance
from .base import EntropyProvider, ProviderFetchError
from .csprng import CSPRNGProvider

logger = logging.getLogger(__name__)


# =============================================================================
# Provider Registry
# =============================================================================

# Lazy-imported so a chain can be built without loading unused transports.
_BUILTIN_REGISTRY: dict[str, dict] = {
    "quantum": {
        "module": ".quantum",
        "class": "QuantumProvider",
    },
    "atmospheric": {
        "module": ".atmospheric",
        "class": "AtmosphericProvider",
    },
    "csprng": {
        "module": ".csprng",
        "class": "CSPRNGProvider",
    },
}

PROVIDER_ORDER: tuple[str, ...] = ("quantum", "atmospheric", "csprng")


def get_provider(
    provider_name: str,
    providers_config: ProvidersConfig | None = None,
    log_calls: bool = False,
) -> EntropyProvider:
    """Create a provider instance by tier name.

    Raises:
        ValueError: If provider is unknown
    """
    if provider_name not in _BUILTIN_REGISTRY:
        raise ValueError(
            f"Unknown entropy provider: {provider_name!r}. "
            f"Available: {', '.join(PROVIDER_ORDER)}"
        )

    cfg = providers_config or ProvidersConfig()
    kwargs: dict = {"log_calls": log_calls}
    if provider_name == "quantum":
        kwargs.update(
            url=cfg.quantum_url,
            timeout=cfg.quantum_timeout,
            max_batch=cfg.quantum_max_batch,
        )
    elif provider_name == "atmospheric":
        kwargs.update(url=cfg.atmospheric_url, timeout=cfg.atmospheric_timeout)

    entry = _BUILTIN_REGISTRY[provider_name]
    module = importlib.import_module(entry["module"], package=__package__)
    cls = getattr(module, entry["class"])
    return cls(**kwargs)


def build_provider_chain(
    providers_config: ProvidersConfig | None = None,
    log_calls: bool = False,
) -> list[EntropyProvider]:
    """Build the providers in priority order."""
    return [
        get_provider(name, providers_config, log_calls=log_calls)
        for name in PROVIDER_ORDER
    ]


# =============================================================================
# Tiered acquisition
# =============================================================================


def acquire_entropy(
    count: int,
    providers: list[EntropyProvider] | None = None,
) -> tuple[list[int], Provenance]:
    """Fetch ``count`` raw 16-bit values from the first tier that succeeds.

    Tiers are tried strictly in order, never concurrently. Each provider
    applies its own batch cap (the quantum service accepts at most 1024
    values per call, so a larger request is scaled down to that cap rather
    than skipped). When every listed provider fails, a local CSPRNG
    terminates the chain, so this function never fails.

    Returns:
        (values, provenance) of the winning tier
    """
    chain = providers if providers is not None else build_provider_chain()

    for tier, provider in enumerate(chain, start=1):
        request = count
        max_batch = getattr(provider, "max_batch", None)
        if max_batch is not None:
            request = min(count, max_batch)
        values = provider.fetch(request)
        if values:
            logger.info(
                f"Acquired {len(values)} values from {provider.name} "
                f"(tier {tier}/{len(chain)})"
            )
            return values, provider.provenance
        logger.warning(f"Entropy tier {provider.name} unavailable, trying next tier")

    fallback = CSPRNGProvider()
    logger.warning("All configured entropy tiers failed, using local CSPRNG")
    return fallback.fetch(count), fallback.provenance


__all__ = [
    "EntropyProvider",
    "ProviderFetchError",
    "PROVIDER_ORDER",
    "get_provider",
    "build_provider_chain",
    "acquire_entropy",
]
