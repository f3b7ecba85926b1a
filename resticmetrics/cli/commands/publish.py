"""Publish command: record one command outcome and export it."""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from resticmetrics.application import create_metrics_publisher, create_publish_results_use_case
from resticmetrics.application.use_cases import PublishCommand
from resticmetrics.core.config import Settings
from resticmetrics.core.errors import MetricsRegistrationError
from resticmetrics.domain.labels import merge_labels
from resticmetrics.domain.models import ExportFormat, Status, Summary

logger = logging.getLogger(__name__)
console = Console()


def parse_labels(values: Optional[List[str]]) -> dict[str, str]:
    """Parse repeated ``key=value`` options."""
    labels: dict[str, str] = {}
    for value in values or []:
        key, sep, label_value = value.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"expected key=value, got {value!r}", param_hint="--label")
        labels[key.strip()] = label_value
    return labels


def load_summary(path: Optional[Path]) -> Summary:
    if path is None:
        return Summary()
    try:
        return Summary.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise typer.BadParameter(f"cannot read {path}: {e}", param_hint="--summary")
    except ValidationError as e:
        raise typer.BadParameter(f"invalid summary in {path}: {e}", param_hint="--summary")


def resolve_status(status: str, exit_code: Optional[int]) -> Status:
    if exit_code is not None:
        return Status.from_exit_code(exit_code)
    try:
        return Status.parse(status)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--status")


def load_settings(overrides: dict, labels: dict[str, str]) -> Settings:
    """Settings from env/.env, with command line values taking precedence."""
    settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
    if labels:
        settings = settings.model_copy(
            update={"labels": merge_labels(dict(settings.labels), labels)}
        )
    return settings


def publish(
    command: str = typer.Argument(..., help="Command that was run (backup, check, forget, ...)."),
    status: str = typer.Option(
        "success", "--status", "-s", help="Command status: failed, warning, success (or 0-2)."
    ),
    exit_code: Optional[int] = typer.Option(
        None, "--exit-code", help="restic exit code, overrides --status."
    ),
    summary_file: Optional[Path] = typer.Option(
        None, "--summary", help="JSON run summary produced by the backup engine."
    ),
    profile: Optional[str] = typer.Option(None, "--profile", "-n", help="Profile name."),
    group: Optional[str] = typer.Option(None, "--group", "-g", help="Group name."),
    label: Optional[List[str]] = typer.Option(
        None, "--label", "-l", help="Extra label as key=value (repeatable)."
    ),
    restic_version: Optional[str] = typer.Option(None, "--restic-version", help="restic version."),
    save_to: Optional[str] = typer.Option(None, "--save-to", help="Write metrics to this file."),
    push_url: Optional[str] = typer.Option(None, "--push", help="Push gateway URL."),
    push_format: Optional[ExportFormat] = typer.Option(
        None, "--push-format", help="Push encoding."
    ),
    push_job: Optional[str] = typer.Option(None, "--job", help="Push gateway job name."),
    print_metrics: bool = typer.Option(
        False, "--print", help="Print the text exposition to stdout."
    ),
):
    """Record a command outcome and export the metrics."""
    run_status = resolve_status(status, exit_code)
    summary = load_summary(summary_file)
    extra_labels = parse_labels(label)

    try:
        settings = load_settings(
            {
                "profile": profile,
                "group": group,
                "restic_version": restic_version,
                "save_to_file": save_to,
                "push_url": push_url,
                "push_format": push_format,
                "push_job": push_job,
            },
            extra_labels,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(2)

    for issue in settings.validate_settings():
        logger.warning(issue)

    try:
        metrics = create_metrics_publisher(settings)
    except MetricsRegistrationError as e:
        console.print(f"[red]Cannot declare metrics:[/red] {e}")
        raise typer.Exit(2)

    try:
        use_case = create_publish_results_use_case(settings, metrics=metrics)
        report = use_case.execute(
            PublishCommand(command=command, status=run_status, summary=summary)
        )
        if print_metrics:
            typer.echo(metrics.export(), nl=False)
    finally:
        metrics.close()

    if report.saved_to:
        console.print(f"[green]Saved:[/green] {report.saved_to}")
    if report.pushed:
        console.print(f"[green]Pushed:[/green] {settings.push_url}")
    for error in report.errors:
        console.print(f"[red]FAILED:[/red] {error}")

    if not report.ok:
        raise typer.Exit(1)
