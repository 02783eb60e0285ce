"""Mapping raw entropy into bounded integers.

Raw values are reduced with ``min + value % (max - min + 1)``. This is
not perfectly uniform when the range does not divide the raw domain
(2**16 for pool values, 2**32 for CSPRNG and hash-chain values); the
resulting bias is tolerated and kept for compatibility with existing
consumers. Rejection sampling would remove it.
"""

import secrets
from collections.abc import Iterable

OVERFETCH_FACTOR = 3


def range_size(min_value: int, max_value: int) -> int:
    return max_value - min_value + 1


def map_to_range(value: int, min_value: int, max_value: int) -> int:
    """Reduce a raw value into ``[min_value, max_value]`` by modulo."""
    return min_value + value % range_size(min_value, max_value)


def map_all(values: Iterable[int], min_value: int, max_value: int) -> list[int]:
    return [map_to_range(v, min_value, max_value) for v in values]


def csprng_numbers(min_value: int, max_value: int, count: int) -> list[int]:
    """Draw ``count`` numbers from 32-bit CSPRNG values. Cannot fail."""
    return [map_to_range(secrets.randbits(32), min_value, max_value) for _ in range(count)]


def overfetch_count(count: int, min_value: int, max_value: int) -> int:
    """How many raw values to draw for a unique request of ``count`` numbers.

    Three times the count bounds expected duplicates at low collision
    rates, capped at the range size.
    """
    return min(count * OVERFETCH_FACTOR, range_size(min_value, max_value))


def unique_numbers(
    candidates: Iterable[int],
    min_value: int,
    max_value: int,
    count: int,
) -> list[int]:
    """Collect ``count`` distinct numbers, first from ``candidates``, then CSPRNG.

    ``candidates`` must already lie in range. Order of first appearance is
    kept. The CSPRNG top-up runs until the set is full, so this always
    returns exactly ``count`` numbers when ``count`` does not exceed the
    range size.

    Raises:
        ValueError: If ``count`` exceeds the range size
    """
    if count > range_size(min_value, max_value):
        raise ValueError("Cannot generate more unique numbers than range allows")

    chosen: dict[int, None] = {}
    for number in candidates:
        chosen[number] = None
        if len(chosen) >= count:
            break

    while len(chosen) < count:
        chosen[map_to_range(secrets.randbits(32), min_value, max_value)] = None

    return list(chosen)[:count]
