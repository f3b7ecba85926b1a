"""Publish Results Use Case.

Architecture Hexagonale: Use Case qui enregistre le résultat d'une
commande puis exporte les métriques vers chaque sink configuré.
"""

import logging
from dataclasses import dataclass, field

from resticmetrics.core.errors import MetricsExportError
from resticmetrics.domain.models import Status, Summary
from resticmetrics.ports.metrics import MetricsPort

logger = logging.getLogger(__name__)


@dataclass
class PublishCommand:
    """Command pour publier le résultat d'une commande."""

    command: str
    status: Status
    summary: Summary = field(default_factory=Summary)


@dataclass
class PublishReport:
    """Résultat de la publication."""

    saved_to: str | None = None
    pushed: bool = False
    errors: list[MetricsExportError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class PublishResultsUseCase:
    """Use Case: Publier les métriques d'une exécution.

    Chaque sink est tenté indépendamment: un échec d'écriture du fichier
    n'empêche pas l'envoi au push gateway, et inversement.
    """

    def __init__(
        self,
        metrics: MetricsPort,
        save_to: str | None = None,
        push: bool = False,
    ):
        self.metrics = metrics
        self.save_to = save_to
        self.push = push

    def execute(self, command: PublishCommand) -> PublishReport:
        """Enregistre le résultat et exporte vers les sinks configurés."""
        self.metrics.record_results(command.command, command.status, command.summary)

        report = PublishReport()

        if self.save_to:
            try:
                self.metrics.save_to(self.save_to)
                report.saved_to = self.save_to
            except MetricsExportError as e:
                logger.error(f"Saving metrics failed: {e}")
                report.errors.append(e)

        if self.push:
            try:
                self.metrics.push()
                report.pushed = True
            except MetricsExportError as e:
                logger.error(f"Pushing metrics failed: {e}")
                report.errors.append(e)

        return report
