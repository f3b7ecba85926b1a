"""Adapters Layer - Driven Adapters (implementations).

Architecture Hexagonale: Les Adapters implémentent les Ports (interfaces).
Implémentations natives utilisant directement les libs (prometheus_client, httpx).

Structure:
- prometheus/ : Adapters pour les métriques Prometheus (textfile, push gateway)
"""

from resticmetrics.adapters.prometheus import (
    PrometheusMetricsAdapter,
    InMemoryMetricsAdapter,
    PushGatewayClient,
)


__all__ = [
    # Metrics Adapters
    "PrometheusMetricsAdapter",
    "InMemoryMetricsAdapter",
    # Push Gateway
    "PushGatewayClient",
]
