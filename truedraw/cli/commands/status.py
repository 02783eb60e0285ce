"""Status command: pool and store health (read-only)."""

from datetime import datetime

import typer

from ..app import app, console, get_generator, get_json_mode
from ..utils import ExitCode, Output, format_age


@app.command("status")
def status_command():
    """Show seed pool and store status.

    Reports whether a pool exists, how many values remain, which source
    filled it and how old it is. Never modifies the pool.
    """
    out = Output(console=console, json_mode=get_json_mode())
    status = get_generator().system_status()
    pool = status.pool

    if status.store.status != "connected":
        out.error(
            f"Pool store unavailable: {status.store.error}",
            suggestion="Check that --db or DB_PATH points to a writable location",
            exit_code=ExitCode.STORE_ERROR,
        )

    if out.json_mode:
        out.set_data("store", status.store.model_dump())
        out.set_data("pool", pool.model_dump(mode="json"))
        out.set_data("providers", status.providers)
        raise typer.Exit(out.finish())

    rows = [["exists", "yes" if pool.exists else "no"]]
    if pool.exists:
        rows.extend(
            [
                ["remaining", str(pool.remaining)],
                ["source", pool.provenance.display_name if pool.provenance else "-"],
                [
                    "created",
                    datetime.fromtimestamp(pool.created_at).isoformat(timespec="seconds")
                    if pool.created_at
                    else "-",
                ],
                ["age", format_age(pool.age_minutes)],
            ]
        )
    out.table("Seed Pool", ["Field", "Value"], rows)
    out.table(
        "Providers",
        ["Tier", "Endpoint"],
        [[name, url] for name, url in status.providers.items()] + [["csprng", "local"]],
    )
    raise typer.Exit(out.finish())
