"""Use Cases - Application Layer orchestration.

Architecture Hexagonale: Les Use Cases orchestrent les appels au Domain
et aux Ports pour implémenter les cas d'utilisation de l'application.
"""

from resticmetrics.application.use_cases.publish_results import (
    PublishResultsUseCase,
    PublishCommand,
    PublishReport,
)


__all__ = [
    "PublishResultsUseCase",
    "PublishCommand",
    "PublishReport",
]
