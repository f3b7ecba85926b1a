"""Prometheus Metrics Adapter - Implémentation prometheus_client.

Architecture Hexagonale: Adapter qui implémente l'interface MetricsPort
en publiant les métriques d'un profil dans un registre Prometheus isolé,
exportable vers un fichier texte ou un push gateway.
"""

import logging
import platform
import time
from typing import Callable, Mapping, Optional

import httpx
from prometheus_client import CollectorRegistry, Gauge, write_to_textfile
from prometheus_client.exposition import generate_latest

from resticmetrics import __version__
from resticmetrics.adapters.prometheus.backup_metrics import (
    NAMESPACE,
    BackupMetrics,
    new_backup_metrics,
)
from resticmetrics.adapters.prometheus.pushgateway import PushGatewayClient
from resticmetrics.core.errors import (
    MetricsExportError,
    MetricsRegistrationError,
    PushGatewayError,
    TextfileExportError,
)
from resticmetrics.domain.labels import (
    COMMAND_LABEL,
    PYTHON_VERSION_LABEL,
    VERSION_LABEL,
    build_identity_labels,
    clone_labels,
    merge_labels,
    reserved_collisions,
)
from resticmetrics.domain.models import COMMAND_BACKUP, ExportFormat, Status, Summary
from resticmetrics.ports.metrics import MetricsPort

logger = logging.getLogger(__name__)

COMMAND_SUBSYSTEM = "command"


# =============================================================================
# Prometheus Metrics Adapter
# =============================================================================


class PrometheusMetricsAdapter(MetricsPort):
    """Adapter prometheus_client pour les métriques d'un profil.

    Chaque instance possède son propre CollectorRegistry: plusieurs
    publishers (ou les tests) ne partagent jamais le registre global.
    Les labels d'identité sont des dimensions de chaque série.
    """

    def __init__(
        self,
        profile: str,
        group: str = "",
        version: str = __version__,
        restic_version: str = "unknown",
        labels: Optional[Mapping[str, str]] = None,
        push_url: str = "",
        push_format: ExportFormat = ExportFormat.TEXT,
        push_job: str = NAMESPACE,
        push_timeout: float = PushGatewayClient.DEFAULT_TIMEOUT,
        http_client: Optional[httpx.Client] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the registry and declare every gauge.

        Args:
            profile: Profile name (always present as a label)
            group: Group name, added as a label when non-empty
            version: resticprofile version for the build info gauge
            restic_version: restic version for the restic build info gauge
            labels: Extra identity labels, overriding profile/group on collision
            push_url: Push gateway URL; push() is unavailable when empty
            push_format: Encoding used by push()
            push_job: Job name of the pushed group
            push_timeout: Push request timeout in seconds
            http_client: Optional httpx client used for pushes
            clock: Source of the command completion timestamp

        Raises:
            MetricsRegistrationError: on invalid or duplicate metric declarations
        """
        self._labels = build_identity_labels(profile, group, labels)
        collisions = reserved_collisions(self._labels)
        if collisions:
            raise MetricsRegistrationError(
                f"identity labels clash with reserved labels: {', '.join(collisions)}"
            )
        keys = list(self._labels)

        self._clock = clock
        self.registry = CollectorRegistry(auto_describe=True)

        try:
            self.info = Gauge(
                "build_info",
                "resticprofile build information.",
                labelnames=keys + [PYTHON_VERSION_LABEL, VERSION_LABEL],
                namespace=NAMESPACE,
                registry=None,
            )
            self.restic_info = Gauge(
                "restic_build_info",
                "restic build information.",
                labelnames=keys + [VERSION_LABEL],
                registry=None,
            )

            self.backup: BackupMetrics = new_backup_metrics(keys)

            self.command_duration = self._command_gauge(
                "duration_seconds", "Command execute duration (in seconds).", keys
            )
            self.command_status = self._command_gauge(
                "status", "Command execute status: 0=fail, 1=warning, 2=success.", keys
            )
            self.command_time = self._command_gauge(
                "time_seconds", "Last command run timestamp (unixtime).", keys
            )
        except ValueError as e:
            raise MetricsRegistrationError(f"invalid metric declaration: {e}") from e

        self._register(
            self.info,
            self.restic_info,
            *self.backup.collectors(),
            self.command_duration,
            self.command_status,
            self.command_time,
        )

        # build information is known right away
        self.info.labels(
            **merge_labels(
                clone_labels(self._labels),
                {PYTHON_VERSION_LABEL: platform.python_version(), VERSION_LABEL: version},
            )
        ).set(1)
        self.restic_info.labels(
            **merge_labels(clone_labels(self._labels), {VERSION_LABEL: restic_version})
        ).set(1)

        self._pusher: Optional[PushGatewayClient] = None
        if push_url:
            self._pusher = PushGatewayClient(
                push_url,
                job=push_job,
                grouping_key=self._labels,
                format=push_format,
                timeout=push_timeout,
                http_client=http_client,
            )

        logger.debug(f"Metrics registry ready for labels {self._labels}")

    @staticmethod
    def _command_gauge(name: str, documentation: str, keys: list[str]) -> Gauge:
        return Gauge(
            name,
            documentation,
            labelnames=keys + [COMMAND_LABEL],
            namespace=NAMESPACE,
            subsystem=COMMAND_SUBSYSTEM,
            registry=None,
        )

    def _register(self, *collectors) -> None:
        """Register every collector, failing on the first conflict."""
        for collector in collectors:
            try:
                self.registry.register(collector)
            except ValueError as e:
                raise MetricsRegistrationError(f"metric registration failed: {e}") from e

    @property
    def labels(self) -> dict[str, str]:
        return clone_labels(self._labels)

    @property
    def pusher(self) -> Optional[PushGatewayClient]:
        return self._pusher

    def record_results(self, command: str, status: Status, summary: Summary) -> None:
        """Enregistre le résultat d'une commande."""
        series = merge_labels(clone_labels(self._labels), {COMMAND_LABEL: command})
        self.command_duration.labels(**series).set(summary.duration_seconds)
        self.command_status.labels(**series).set(int(status))
        self.command_time.labels(**series).set(int(self._clock()))

        if command == COMMAND_BACKUP:
            self.backup.set_from(summary, self._labels)

        logger.debug(f"Recorded {command} results: status={Status(status).name}")

    def save_to(self, path: str) -> None:
        """Écrit le registre au format texte (écriture atomique)."""
        try:
            write_to_textfile(str(path), self.registry)
        except OSError as e:
            raise TextfileExportError(f"cannot write metrics to {path}: {e}", path=str(path)) from e
        logger.info(f"Metrics saved to {path}")

    def push(self) -> None:
        """Envoie le registre au push gateway configuré."""
        if self._pusher is None:
            raise MetricsExportError("no push gateway configured")
        self._pusher.push(self.registry)
        logger.info(f"Metrics pushed to {self._pusher.url}")

    def export(self) -> str:
        """Exporte les métriques au format texte Prometheus."""
        return generate_latest(self.registry).decode("utf-8")

    def close(self) -> None:
        if self._pusher is not None:
            self._pusher.close()


# =============================================================================
# InMemory Metrics Adapter (pour les tests)
# =============================================================================


class InMemoryMetricsAdapter(MetricsPort):
    """Adapter en mémoire pour les métriques (pour les tests).

    Stocke les résultats et les exports dans des structures simples pour
    faciliter les assertions dans les tests.
    """

    def __init__(
        self,
        profile: str = "default",
        group: str = "",
        labels: Optional[Mapping[str, str]] = None,
        fail_save: bool = False,
        fail_push: bool = False,
    ):
        """Initialise le stockage en mémoire."""
        self._labels = build_identity_labels(profile, group, labels)
        self.results: list[tuple[str, Status, Summary]] = []
        self.saved_to: list[str] = []
        self.push_count = 0
        self.fail_save = fail_save
        self.fail_push = fail_push

    @property
    def labels(self) -> dict[str, str]:
        return clone_labels(self._labels)

    def record_results(self, command: str, status: Status, summary: Summary) -> None:
        """Enregistre le résultat d'une commande."""
        self.results.append((command, status, summary))

    def save_to(self, path: str) -> None:
        """Mémorise le chemin ou simule un échec d'écriture."""
        if self.fail_save:
            raise TextfileExportError(f"cannot write metrics to {path}", path=str(path))
        self.saved_to.append(str(path))

    def push(self) -> None:
        """Compte les envois ou simule un gateway injoignable."""
        if self.fail_push:
            raise PushGatewayError("push gateway unreachable")
        self.push_count += 1

    def export(self) -> str:
        """Exporte les métriques (format simplifié pour debug)."""
        lines = [
            f"labels: {self._labels}",
            f"results_count: {len(self.results)}",
            f"saved_count: {len(self.saved_to)}",
            f"push_count: {self.push_count}",
        ]
        return "\n".join(lines)

    def clear(self) -> None:
        """Vide toutes les métriques."""
        self.results.clear()
        self.saved_to.clear()
        self.push_count = 0

    # Helpers pour les tests
    def last_status(self, command: str) -> Optional[Status]:
        """Dernier statut enregistré pour une commande."""
        for recorded, status, _ in reversed(self.results):
            if recorded == command:
                return status
        return None
