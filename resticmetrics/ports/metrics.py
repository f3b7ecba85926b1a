"""Metrics Port - Interface abstraite pour la publication de métriques.

Architecture Hexagonale: Port (interface) pour les métriques d'exécution
d'un profil (durée, statut, compteurs de backup).
"""

from abc import ABC, abstractmethod

from resticmetrics.domain.models import Status, Summary


class MetricsPort(ABC):
    """Interface abstraite pour la publication de métriques.

    Cette interface définit le contrat pour enregistrer le résultat d'une
    commande et exporter l'état courant des métriques. Les adapters
    (Prometheus, InMemory) implémentent cette interface.
    """

    @property
    @abstractmethod
    def labels(self) -> dict[str, str]:
        """Labels d'identité appliqués à toutes les séries (copie)."""
        pass

    @abstractmethod
    def record_results(self, command: str, status: Status, summary: Summary) -> None:
        """Enregistre le résultat d'une commande.

        Args:
            command: Nom de la commande (backup, check, forget, ...)
            status: Statut de la commande
            summary: Résumé de l'exécution (compteurs, durée)
        """
        pass

    @abstractmethod
    def save_to(self, path: str) -> None:
        """Écrit les métriques dans un fichier au format texte.

        Args:
            path: Chemin du fichier (écrasé s'il existe)

        Raises:
            TextfileExportError: si le fichier ne peut pas être écrit
        """
        pass

    @abstractmethod
    def push(self) -> None:
        """Envoie les métriques au push gateway configuré.

        Raises:
            PushGatewayError: si le gateway est injoignable ou refuse l'envoi
        """
        pass

    @abstractmethod
    def export(self) -> str:
        """Exporte les métriques dans le format du backend.

        Returns:
            Chaîne contenant les métriques formatées
        """
        pass
