"""Chain command: reproducible draws from a per-session hash-chain generator."""

import typer

from ...core.models import DrawRequestError, Provenance
from ..app import app, console, get_generator, get_json_mode
from ..utils import ExitCode, Output, format_numbers


@app.command("chain")
def chain_command(
    min_value: int = typer.Argument(..., metavar="MIN", help="Smallest allowed value"),
    max_value: int = typer.Argument(..., metavar="MAX", help="Largest allowed value"),
    count: int = typer.Option(1, "--count", "-n", help="How many numbers (1-100)"),
    unique: bool = typer.Option(False, "--unique", "-u", help="No repeated numbers"),
    session: str = typer.Option(
        "default", "--session", "-s", help="Session whose generator state to use"
    ),
    reseed: bool = typer.Option(
        False, "--reseed", help="Discard the session state and draw a fresh seed"
    ),
):
    """Draw from a seed-once, derive-many hash-chain generator.

    The session state (seed + counter) is saved after every draw, so the
    next invocation continues the same stream.

    Examples:
        truedraw chain 1 6 -n 10
        truedraw chain 1 100 -n 5 --session alice --reseed
    """
    out = Output(console=console, json_mode=get_json_mode())
    generator = get_generator()

    try:
        result = generator.generate_chained(
            session, min_value, max_value, count, unique, reseed=reseed
        )
    except DrawRequestError as e:
        out.error(str(e), exit_code=ExitCode.VALIDATION_ERROR)
        raise typer.Exit(out.finish())

    prng = generator.chains.load(session)
    counter = prng.counter if prng else None

    out.success(
        format_numbers(result.numbers),
        numbers=result.numbers,
        source=result.source,
        session=session,
        counter=counter,
    )
    out.text(
        f"  [dim]source: {result.provenance.display_name} · "
        f"session: {session} · counter: {counter}[/dim]"
    )
    if result.provenance == Provenance.CSPRNG:
        out.warning(
            f"Session {session!r} is seeded from the local CSPRNG",
            suggestion="Use --reseed once the quantum or atmospheric service is reachable",
        )
    raise typer.Exit(out.finish())
