"""Prometheus Adapters - Implémentations prometheus_client.

Architecture Hexagonale: Ces adapters implémentent le Port MetricsPort
pour exporter les métriques au format Prometheus (fichier texte ou
push gateway).
"""

from resticmetrics.adapters.prometheus.metrics_adapter import (
    PrometheusMetricsAdapter,
    InMemoryMetricsAdapter,
)
from resticmetrics.adapters.prometheus.pushgateway import PushGatewayClient


__all__ = [
    "PrometheusMetricsAdapter",
    "InMemoryMetricsAdapter",
    "PushGatewayClient",
]
