"""Domain Layer - logique pure.

Architecture Hexagonale: le Domain ne dépend d'aucun adapter ni d'aucune
lib de métriques. Il décrit le résumé d'une exécution, son statut et les
labels d'identité d'un profil.
"""

from resticmetrics.domain.models import (
    COMMAND_BACKUP,
    ExportFormat,
    Status,
    Summary,
)
from resticmetrics.domain.labels import (
    build_identity_labels,
    clone_labels,
    merge_labels,
)


__all__ = [
    "COMMAND_BACKUP",
    "ExportFormat",
    "Status",
    "Summary",
    "build_identity_labels",
    "clone_labels",
    "merge_labels",
]
