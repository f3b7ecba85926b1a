"""Health check commands."""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from resticmetrics.adapters.prometheus import PushGatewayClient
from resticmetrics.core.config import Settings

console = Console()
app = typer.Typer(help="Sink health checks.")


@app.command()
def pushgateway(
    url: Optional[str] = typer.Option(None, "--url", help="Push gateway URL (default: settings)."),
):
    """Check that the push gateway answers its health endpoint."""
    settings = Settings()
    target = url or settings.push_url
    if not target:
        console.print("[red]No push gateway configured[/red] (use --url or RESTICMETRICS_PUSH_URL)")
        raise typer.Exit(2)

    with PushGatewayClient(
        target, job=settings.push_job, timeout=settings.push_timeout_seconds
    ) as client:
        ok = client.healthy()

    table = Table(title="Health Check")
    table.add_column("Service", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details")
    table.add_row(
        "Push gateway",
        "[green]OK[/green]" if ok else "[red]FAILED[/red]",
        client.base_url,
    )
    console.print(table)

    if not ok:
        raise typer.Exit(1)
