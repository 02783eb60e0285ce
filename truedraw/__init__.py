"""truedraw: integers from true-entropy providers with a CSPRNG safety net."""

__version__ = "0.1.0"

from .core.models import DrawRequestError, DrawResult, Provenance  # noqa: E402
from .core.generator import RandomGenerator, build_generator  # noqa: E402

__all__ = [
    "__version__",
    "DrawRequestError",
    "DrawResult",
    "Provenance",
    "RandomGenerator",
    "build_generator",
]
