"""Configuration commands for the gkp CLI."""

import os

import typer
from rich.console import Console
from rich.table import Table

from gemini_key_proxy.core.config import ConfigError, get_config, validate_all
from gemini_key_proxy.core.config.schema import ConfigSchema
from gemini_key_proxy.core.key_list import mask_key

app = typer.Typer(help="Configuration management")


@app.command()
def show() -> None:
    """Show the effective configuration (secrets masked)."""
    console = Console()
    try:
        config = get_config()
    except ConfigError as e:
        console.print(f"[red]❌ {e}[/red]")
        console.print("Run [cyan]gkp config validate[/cyan] to list every problem.")
        raise typer.Exit(code=1) from e

    table = Table(title="Gemini Key Proxy Configuration")
    table.add_column("Variable", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Source", style="dim")

    for _name, spec in sorted(ConfigSchema.all_specs().items()):
        raw = os.environ.get(spec.name)
        if raw is None or not raw.strip():
            value = "<not-set>" if spec.default is None else str(spec.default)
            source = "default"
        else:
            value = mask_key(raw) if spec.secret else raw
            source = "env"
        table.add_row(spec.name, value, source)

    console.print(table)
    auth = "[yellow]disabled[/yellow]" if config.open_mode else "[green]enabled[/green]"
    console.print(
        f"Default key list: [bold]{config.default_key_count}[/bold] key(s); client auth {auth}"
    )


@app.command()
def validate() -> None:
    """Validate environment variables and report every problem found."""
    console = Console()
    errors = validate_all()
    if not errors:
        console.print("[green]✅ Configuration is valid[/green]")
        return

    for error in errors:
        console.print(f"[red]❌ {error.env_var}: {error.message}[/red]")
    raise typer.Exit(code=1)


@app.command()
def docs() -> None:
    """Print Markdown documentation for all environment variables."""
    typer.echo(ConfigSchema.generate_markdown_docs())
