"""resticmetrics - Prometheus metrics for resticprofile runs."""

__version__ = "0.1.0"
