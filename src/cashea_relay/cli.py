"""Typer CLI for Cashea-Relay."""

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(name="cashea-relay", help="Cashea-Relay: Cashea down-payment to Shopify order relay")
console = Console()

_SECRET_FIELDS = {"cashea_api_key", "shopify_access_token"}


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(8080, help="Bind port"),
):
    """Start the Cashea-Relay API server."""
    import uvicorn
    from cashea_relay.app import create_app

    console.print(f"[bold green]Starting Cashea-Relay on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


@app.command()
def config():
    """Show the effective settings with secrets masked."""
    from cashea_relay.common.config import get_settings

    settings = get_settings()
    table = Table(title="Cashea-Relay settings")
    table.add_column("Setting")
    table.add_column("Value")
    for name, value in settings.model_dump().items():
        if name in _SECRET_FIELDS:
            value = "****" if value else "[red]<unset>[/red]"
        table.add_row(name, str(value))
    console.print(table)


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check Cashea-Relay server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(f"[bold green]{data['status']}[/bold green] v{data['version']}")
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
