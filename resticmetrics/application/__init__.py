from resticmetrics.application.factory import (
    create_metrics_publisher,
    create_publish_results_use_case,
)


__all__ = [
    "create_metrics_publisher",
    "create_publish_results_use_case",
]
