"""Command-line interface for truedraw."""

from .app import app

__all__ = ["app"]
