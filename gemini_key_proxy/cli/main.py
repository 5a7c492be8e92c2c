"""Main CLI entry point for gemini-key-proxy."""

import typer
from rich.console import Console

from gemini_key_proxy.cli.commands import config, start

app = typer.Typer(
    name="gkp",
    help="Gemini Key Proxy CLI - run and inspect the key-rotating proxy",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(config.app, name="config", help="Configuration management")
app.command(name="start", help="Start the proxy server")(start.start)


@app.command()
def version() -> None:
    """Show version information."""
    from gemini_key_proxy import __version__

    console = Console()
    console.print(f"[bold cyan]gkp[/bold cyan] version [green]{__version__}[/green]")


if __name__ == "__main__":
    app()
