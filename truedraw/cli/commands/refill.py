"""Refill command: force a synchronous pool refill."""

import typer

from ..app import app, console, get_generator, get_json_mode
from ..utils import Output


@app.command("refill")
def refill_command():
    """Replace the seed pool with a fresh batch from the entropy chain."""
    out = Output(console=console, json_mode=get_json_mode())
    result = get_generator().force_refill()
    out.success(
        f"Pool refilled with {result.remaining} values "
        f"from {result.provenance.display_name}",
        success=result.success,
        remaining=result.remaining,
        source=result.provenance.value,
    )
    raise typer.Exit(out.finish())
