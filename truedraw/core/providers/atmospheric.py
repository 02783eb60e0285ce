"""Random.org provider (atmospheric noise), plain-text integer format."""

from ..models import Provenance
from .base import EntropyProvider, ProviderFetchError

DEFAULT_URL = "https://www.random.org/integers/"


class AtmosphericProvider(EntropyProvider):
    """Fetches newline-delimited integers in 0..65535 from random.org."""

    name = "atmospheric"
    provenance = Provenance.ATMOSPHERIC

    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout: float = 10.0,
        log_calls: bool = False,
    ) -> None:
        super().__init__(log_calls=log_calls)
        self.url = url
        self.timeout = timeout

    def _fetch(self, count: int) -> list[int]:
        body = self._http_get(
            self.url,
            {
                "num": count,
                "min": 0,
                "max": 0xFFFF,
                "col": 1,
                "base": 10,
                "format": "plain",
                "rnd": "new",
            },
            self.timeout,
        )
        try:
            text = body.decode()
        except UnicodeDecodeError as e:
            raise ProviderFetchError(f"malformed payload: {e}") from e

        values: list[int] = []
        for line in text.strip().splitlines():
            line = line.strip()
            try:
                values.append(int(line, 10))
            except ValueError:
                raise ProviderFetchError(f"non-numeric line: {line[:40]!r}") from None
        return self._check_batch(values, count)
