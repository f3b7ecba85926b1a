"""Factory - Dependency Injection / Wiring.

Architecture Hexagonale: Le Factory assemble les dépendances pour créer
les Use Cases avec leurs ports concrets (adapters), à partir des Settings.
"""

from typing import Any

from resticmetrics.adapters.prometheus import PrometheusMetricsAdapter
from resticmetrics.application.use_cases import PublishResultsUseCase
from resticmetrics.core.config import Settings, get_settings
from resticmetrics.ports.metrics import MetricsPort


def create_metrics_publisher(
    settings: Settings | None = None,
    **overrides: Any,
) -> PrometheusMetricsAdapter:
    """Factory pour créer le publisher Prometheus d'un profil.

    Args:
        settings: Settings à utiliser (défaut: get_settings())
        **overrides: Arguments passés tels quels à PrometheusMetricsAdapter
            (ex: http_client, clock, version)

    Returns:
        Publisher prêt à enregistrer des résultats
    """
    settings = settings or get_settings()

    options: dict[str, Any] = {
        "profile": settings.profile,
        "group": settings.group,
        "restic_version": settings.restic_version,
        "labels": settings.labels,
        "push_url": settings.push_url,
        "push_format": settings.push_format,
        "push_job": settings.push_job,
        "push_timeout": settings.push_timeout_seconds,
    }
    options.update(overrides)

    return PrometheusMetricsAdapter(**options)


def create_publish_results_use_case(
    settings: Settings | None = None,
    metrics: MetricsPort | None = None,
    **overrides: Any,
) -> PublishResultsUseCase:
    """Factory pour créer le use case PublishResults.

    Args:
        settings: Settings à utiliser (défaut: get_settings())
        metrics: Instance optionnelle de MetricsPort (sinon créée depuis les settings)
        **overrides: Transmis à create_metrics_publisher

    Returns:
        Instance du use case prête à l'emploi
    """
    settings = settings or get_settings()

    if metrics is None:
        metrics = create_metrics_publisher(settings, **overrides)

    return PublishResultsUseCase(
        metrics=metrics,
        save_to=settings.save_to_file or None,
        push=bool(settings.push_url),
    )
