"""``gkp start``: run the proxy under uvicorn."""

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from gemini_key_proxy.core.config import ConfigError, get_config
from gemini_key_proxy.core.logging import configure_root_logging


def start(
    host: str = typer.Option(None, "--host", help="Bind address (defaults to HOST)"),
    port: int = typer.Option(None, "--port", help="Listen port (defaults to PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes (development)"),
) -> None:
    """Start the key-rotating proxy."""
    console = Console()
    try:
        config = get_config()
    except ConfigError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1) from e

    bind_host = host or config.host
    bind_port = port or config.port

    summary = Table(title="Gemini Key Proxy", show_header=False)
    summary.add_column(style="cyan")
    summary.add_column(style="green")
    summary.add_row("Listening on", f"http://{bind_host}:{bind_port}")
    summary.add_row("Upstream", config.upstream_base_url)
    client_auth = "disabled (open mode)" if config.open_mode else config.proxy_api_key_hash
    summary.add_row("Client auth", client_auth)
    summary.add_row("Default keys", str(config.default_key_count))
    summary.add_row("Log level", config.log_level)
    console.print(summary)

    configure_root_logging(config.log_level)
    uvicorn.run(
        "gemini_key_proxy.main:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_level=config.log_level.lower(),
        access_log=config.log_level == "DEBUG",
    )
