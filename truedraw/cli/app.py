"""Core CLI app definition and global state."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..core.generator import RandomGenerator

app = typer.Typer(
    name="truedraw",
    help="Draw random integers from quantum, atmospheric or CSPRNG entropy.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Global state (set by callback)
_json_mode = False
_db_path: Path | None = None
_generator: RandomGenerator | None = None


def get_json_mode() -> bool:
    """Get current JSON mode state."""
    return _json_mode


def get_generator() -> RandomGenerator:
    """Get the generator for this CLI session, building it from config on first use."""
    global _generator
    if _generator is None:
        from ..config import get_config
        from ..core.generator import build_generator

        config = get_config()
        if _db_path is not None:
            config.defaults.db_path = str(_db_path)
        _generator = build_generator(config)
    return _generator


def set_generator(generator: RandomGenerator | None) -> None:
    """Replace the session generator (None forces a rebuild from config)."""
    global _generator
    _generator = generator


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Route library logging through rich on stderr."""
    level = logging.ERROR
    if verbose:
        level = logging.INFO
    if debug:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    logging.getLogger("truedraw").setLevel(level)


def _version_callback(value: bool) -> None:
    if value:
        from .. import __version__

        print(f"truedraw {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output machine-readable JSON instead of human-friendly text",
            is_eager=True,
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log entropy tier activity"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Log everything, including commit retries"),
    ] = False,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Pool store path (overrides config)"),
    ] = None,
):
    """truedraw: random integers from true-entropy providers.

    Sources are tried in order: ANU quantum noise, random.org atmospheric
    noise, then the local CSPRNG. Use --json for machine-readable output.
    """
    global _json_mode, _db_path
    _json_mode = json_output
    _db_path = db
    setup_logging(verbose=verbose, debug=debug)


# Import commands to register them with the app
from .commands import (  # noqa: E402, F401
    draw,
    chain,
    status,
    refill,
    config_cmd,
)
