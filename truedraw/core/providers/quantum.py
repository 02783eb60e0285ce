"""ANU Quantum Random Numbers provider (quantum vacuum noise)."""

from ..models import Provenance
from .base import EntropyProvider, ProviderFetchError

DEFAULT_URL = "https://qrng.anu.edu.au/API/jsonI.php"
MAX_BATCH = 1024


class QuantumProvider(EntropyProvider):
    """Fetches uint16 values from the ANU QRNG JSON API.

    Success payload: ``{"success": true, "data": [..]}``. A false flag,
    missing data or a short batch is a failure.
    """

    name = "quantum"
    provenance = Provenance.QUANTUM

    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout: float = 5.0,
        max_batch: int = MAX_BATCH,
        log_calls: bool = False,
    ) -> None:
        super().__init__(log_calls=log_calls)
        self.url = url
        self.timeout = timeout
        self.max_batch = max_batch

    def _fetch(self, count: int) -> list[int]:
        if count > self.max_batch:
            raise ProviderFetchError(
                f"requested {count} values, provider maximum is {self.max_batch}"
            )
        body = self._http_get(
            self.url,
            {"length": count, "type": "uint16", "size": 2},
            self.timeout,
        )
        payload = self._decode_json(body)
        if not isinstance(payload, dict) or not payload.get("success"):
            raise ProviderFetchError("response flag is not success")
        data = payload.get("data")
        if not isinstance(data, list) or not data:
            raise ProviderFetchError("response has no data")
        return self._check_batch(data, count)
