"""Allow ``python -m truedraw.cli``."""

from .app import app

app()
