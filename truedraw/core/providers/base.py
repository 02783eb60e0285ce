"""Abstract base class for entropy providers."""

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from typing import Any

from ..models import Provenance

logger = logging.getLogger(__name__)

USER_AGENT = "truedraw"


class ProviderFetchError(Exception):
    """A provider call did not yield a usable batch.

    Raised inside providers only; ``EntropyProvider.fetch`` converts it to None.
    """


class EntropyProvider(ABC):
    """Abstract base class for entropy providers.

    Subclasses implement ``_fetch``, which may raise; ``fetch`` is the public
    contract and degrades every failure to None so the caller can move on
    to the next tier.
    """

    name: str = "unknown"
    provenance: Provenance = Provenance.CSPRNG

    # Set to False on providers that cannot fail (local primitives)
    fallible: bool = True

    def __init__(self, log_calls: bool = False) -> None:
        self._log_calls = log_calls

    @abstractmethod
    def _fetch(self, count: int) -> list[int]:
        """Return exactly ``count`` raw 16-bit values or raise."""

    def fetch(self, count: int) -> list[int] | None:
        """Fetch ``count`` raw 16-bit values, or None on any failure."""
        if count <= 0:
            return []
        try:
            values = self._fetch(count)
        except (ProviderFetchError, urllib.error.URLError, OSError, ValueError) as e:
            logger.warning(f"[{self.name}] fetch of {count} values failed: {e}")
            self._log_call(count, None, error=str(e))
            return None

        logger.info(f"[{self.name}] fetched {len(values)} values")
        self._log_call(count, values)
        return values

    def _log_call(
        self, count: int, values: list[int] | None, error: str | None = None
    ) -> None:
        if not self._log_calls:
            return
        from .call_log import log_provider_call

        log_provider_call(
            provider=self.name,
            request={"count": count},
            values=values,
            error=error,
        )

    @staticmethod
    def _check_batch(values: list[int], count: int) -> list[int]:
        """Validate a provider batch: exact length, 16-bit unsigned values."""
        if len(values) < count:
            raise ProviderFetchError(f"short result: {len(values)} < {count}")
        for value in values[:count]:
            if not isinstance(value, int) or isinstance(value, bool):
                raise ProviderFetchError(f"non-integer value: {value!r}")
            if value < 0 or value > 0xFFFF:
                raise ProviderFetchError(f"value out of 16-bit range: {value}")
        return values[:count]

    @staticmethod
    def _http_get(url: str, params: dict[str, Any], timeout: float) -> bytes:
        """GET ``url`` with query ``params``; raise ProviderFetchError on non-2xx."""
        query = urllib.parse.urlencode(params)
        full_url = f"{url}?{query}" if query else url
        req = urllib.request.Request(full_url, headers={"User-Agent": USER_AGENT})
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                status = getattr(resp, "status", 200)
                if status < 200 or status >= 300:
                    raise ProviderFetchError(f"HTTP {status}")
                return resp.read()
        except urllib.error.HTTPError as e:
            raise ProviderFetchError(f"HTTP {e.code}") from e
        except http.client.HTTPException as e:
            raise ProviderFetchError(f"broken response: {e!r}") from e

    @staticmethod
    def _decode_json(body: bytes) -> Any:
        try:
            return json.loads(body.decode())
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ProviderFetchError(f"malformed payload: {e}") from e
