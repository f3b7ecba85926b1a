"""Ports Layer - Abstract Interfaces.

Architecture Hexagonale: Les Ports définissent les interfaces abstraites
que les Adapters implémentent.
"""

from resticmetrics.ports.metrics import MetricsPort


__all__ = [
    "MetricsPort",
]
