"""Gauges describing the outcome of a backup run."""

from dataclasses import dataclass, fields
from typing import Sequence

from prometheus_client import Gauge

from resticmetrics.domain.models import Summary


NAMESPACE = "resticprofile"
BACKUP_SUBSYSTEM = "backup"


def _gauge(name: str, documentation: str, label_names: Sequence[str]) -> Gauge:
    return Gauge(
        name,
        documentation,
        labelnames=list(label_names),
        namespace=NAMESPACE,
        subsystem=BACKUP_SUBSYSTEM,
        registry=None,
    )


@dataclass
class BackupMetrics:
    files_new: Gauge
    files_changed: Gauge
    files_unmodified: Gauge
    dir_new: Gauge
    dir_changed: Gauge
    dir_unmodified: Gauge
    files_total: Gauge
    bytes_added: Gauge
    bytes_added_packed: Gauge
    bytes_total: Gauge

    def collectors(self) -> list[Gauge]:
        return [getattr(self, f.name) for f in fields(self)]

    def set_from(self, summary: Summary, labels: dict[str, str]) -> None:
        """Copy the counters of ``summary`` into the gauges."""
        self.files_new.labels(**labels).set(summary.files_new)
        self.files_changed.labels(**labels).set(summary.files_changed)
        self.files_unmodified.labels(**labels).set(summary.files_unmodified)

        self.dir_new.labels(**labels).set(summary.dirs_new)
        self.dir_changed.labels(**labels).set(summary.dirs_changed)
        self.dir_unmodified.labels(**labels).set(summary.dirs_unmodified)

        self.files_total.labels(**labels).set(summary.files_total)
        self.bytes_added.labels(**labels).set(summary.bytes_added)
        self.bytes_added_packed.labels(**labels).set(summary.bytes_added_packed)
        self.bytes_total.labels(**labels).set(summary.bytes_total)


def new_backup_metrics(label_names: Sequence[str]) -> BackupMetrics:
    """Declare the backup gauges, all labelled with ``label_names``."""
    return BackupMetrics(
        files_new=_gauge(
            "files_new", "Number of new files added to the backup.", label_names
        ),
        files_changed=_gauge(
            "files_changed", "Number of files with changes.", label_names
        ),
        files_unmodified=_gauge(
            "files_unmodified", "Number of files unmodified since last backup.", label_names
        ),
        dir_new=_gauge(
            "dir_new", "Number of new directories added to the backup.", label_names
        ),
        dir_changed=_gauge(
            "dir_changed", "Number of directories with changes.", label_names
        ),
        dir_unmodified=_gauge(
            "dir_unmodified", "Number of directories unmodified since last backup.", label_names
        ),
        files_total=_gauge(
            "files_processed",
            "Total number of files scanned by the backup for changes.",
            label_names,
        ),
        bytes_added=_gauge(
            "added_bytes", "Total number of bytes added to the repository.", label_names
        ),
        bytes_added_packed=_gauge(
            "added_bytes_packed",
            "Total number of bytes added to the repository after compression.",
            label_names,
        ),
        bytes_total=_gauge(
            "processed_bytes", "Total number of bytes scanned for changes.", label_names
        ),
    )
