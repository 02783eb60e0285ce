"""Config command for viewing and managing truedraw configuration."""

import typer

from ... import config as config_module
from ...config import coerce_value, get_config, reset_config
from ..app import app, console


VALID_KEYS = {
    "pool.size",
    "pool.refill_threshold",
    "pool.ttl_seconds",
    "pool.max_commit_attempts",
    "providers.quantum_url",
    "providers.quantum_timeout",
    "providers.quantum_max_batch",
    "providers.atmospheric_url",
    "providers.atmospheric_timeout",
    "defaults.db_path",
    "defaults.log_provider_calls",
}


@app.command("config")
def config_command(
    action: str = typer.Argument(
        ...,
        help="Action: show, set, reset",
    ),
    key: str | None = typer.Argument(
        None,
        help="Config key (e.g. pool.size, providers.quantum_timeout)",
    ),
    value: str | None = typer.Argument(
        None,
        help="Value to set",
    ),
):
    """View or modify truedraw configuration.

    Examples:
        truedraw config show
        truedraw config set pool.size 2000
        truedraw config set providers.atmospheric_timeout 15
        truedraw config reset
    """
    if action == "show":
        _show_config()
    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage:[/red] truedraw config set <key> <value>")
            console.print()
            console.print("Available keys:")
            for k in sorted(VALID_KEYS):
                console.print(f"  {k}")
            raise typer.Exit(1)
        _set_config(key, value)
    elif action == "reset":
        _reset_config()
    else:
        console.print(f"[red]Unknown action:[/red] {action}")
        console.print("Valid actions: show, set, reset")
        raise typer.Exit(1)


def _show_config():
    """Display current resolved configuration."""
    config = get_config()

    console.print()
    console.print("[bold]truedraw Configuration[/bold]")
    console.print("─" * 40)

    for section_name, section in config.to_dict().items():
        console.print()
        console.print(f"[bold cyan]{section_name.capitalize()}[/bold cyan]")
        width = max(len(k) for k in section)
        for k, v in section.items():
            console.print(f"  {k.ljust(width)} = {v}")

    console.print()
    config_file = config_module.CONFIG_FILE
    if config_file.exists():
        console.print(f"Config file: {config_file}")
    else:
        console.print(f"Config file: [dim]not created yet[/dim] ({config_file})")
    console.print()


def _set_config(key: str, value: str):
    """Set a config value and save."""
    if key not in VALID_KEYS:
        console.print(f"[red]Unknown key:[/red] {key}")
        console.print()
        console.print("Available keys:")
        for k in sorted(VALID_KEYS):
            console.print(f"  {k}")
        raise typer.Exit(1)

    config = get_config()
    section_name, field_name = key.split(".", 1)
    target = getattr(config, section_name)

    try:
        setattr(target, field_name, coerce_value(getattr(target, field_name), value))
    except ValueError:
        console.print(f"[red]Invalid value for {key}:[/red] {value}")
        raise typer.Exit(1)

    config.save()
    reset_config()  # Clear cached singleton so next get_config() reloads

    console.print(f"[green]✓[/green] Set {key} = {value}")
    console.print(f"  Saved to {config_module.CONFIG_FILE}")


def _reset_config():
    """Reset config to defaults."""
    config_file = config_module.CONFIG_FILE
    if config_file.exists():
        config_file.unlink()
        reset_config()
        console.print("[green]✓[/green] Config reset to defaults")
        console.print(f"  Removed {config_file}")
    else:
        console.print("Config already at defaults (no config file exists)")
