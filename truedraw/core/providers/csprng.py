"""Local CSPRNG provider, the infallible last tier."""

import logging
import secrets

from ..models import Provenance
from .base import EntropyProvider

logger = logging.getLogger(__name__)


class CSPRNGProvider(EntropyProvider):
    """Draws 16-bit values from the operating system CSPRNG via ``secrets``."""

    name = "csprng"
    provenance = Provenance.CSPRNG
    fallible = False

    def _fetch(self, count: int) -> list[int]:
        return [secrets.randbits(16) for _ in range(count)]

    def fetch(self, count: int) -> list[int]:
        if count <= 0:
            return []
        values = self._fetch(count)
        logger.info(f"[{self.name}] generated {count} values")
        self._log_call(count, values)
        return values
