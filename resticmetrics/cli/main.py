"""resticmetrics CLI - Main entry point."""

import logging
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from resticmetrics import __version__
from resticmetrics.cli.commands import check, publish
from resticmetrics.core.config import Settings, parse_log_level

console = Console()

app = typer.Typer(
    name="resticmetrics",
    help="resticmetrics CLI - Publish resticprofile run metrics to Prometheus.",
    no_args_is_help=True,
)

# Register commands
app.command("publish")(publish.publish)
app.add_typer(check.app, name="check")


def resolve_log_level(log_level: Optional[str]) -> str:
    """Command line level, else the one from settings (env or .env)."""
    if log_level is not None:
        try:
            return parse_log_level(log_level)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--log-level")
    try:
        return Settings().log_level
    except ValidationError as e:
        raise typer.BadParameter(f"invalid settings: {e}")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (default: RESTICMETRICS_LOG_LEVEL or INFO)."
    ),
):
    """Publish resticprofile run metrics to Prometheus."""
    configure_logging(resolve_log_level(log_level))


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold]resticmetrics[/bold] v{__version__}")


if __name__ == "__main__":
    app()
