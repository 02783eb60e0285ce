"""CLI commands for truedraw."""

from . import (
    draw,
    chain,
    status,
    refill,
    config_cmd,
)

__all__ = [
    "draw",
    "chain",
    "status",
    "refill",
    "config_cmd",
]
