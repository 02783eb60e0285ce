"""Draw command: pooled draws through the tiered entropy chain."""

import typer

from ...core.models import DrawRequestError, Provenance
from ..app import app, console, get_generator, get_json_mode
from ..utils import ExitCode, Output, format_numbers


@app.command("draw")
def draw_command(
    min_value: int = typer.Argument(..., metavar="MIN", help="Smallest allowed value"),
    max_value: int = typer.Argument(..., metavar="MAX", help="Largest allowed value"),
    count: int = typer.Option(1, "--count", "-n", help="How many numbers (1-100)"),
    unique: bool = typer.Option(False, "--unique", "-u", help="No repeated numbers"),
):
    """Draw random integers from the seed pool.

    Examples:
        truedraw draw 1 45 -n 6 --unique
        truedraw --json draw 0 65535 -n 10
        truedraw draw -- -10 10
    """
    out = Output(console=console, json_mode=get_json_mode())

    try:
        result = get_generator().generate(min_value, max_value, count, unique)
    except DrawRequestError as e:
        out.error(str(e), exit_code=ExitCode.VALIDATION_ERROR)
        raise typer.Exit(out.finish())

    out.success(
        format_numbers(result.numbers),
        numbers=result.numbers,
        source=result.source,
    )
    out.text(f"  [dim]source: {result.provenance.display_name}[/dim]")
    if result.provenance == Provenance.CSPRNG:
        out.warning(
            "No true-entropy source answered; numbers came from the local CSPRNG",
            suggestion="Run `truedraw refill` once the quantum or atmospheric service is reachable",
        )
    raise typer.Exit(out.finish())
