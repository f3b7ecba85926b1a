from resticmetrics.core.config import Settings, get_settings
from resticmetrics.core.errors import (
    MetricsError,
    MetricsRegistrationError,
    MetricsExportError,
    TextfileExportError,
    PushGatewayError,
)


__all__ = [
    "Settings",
    "get_settings",
    "MetricsError",
    "MetricsRegistrationError",
    "MetricsExportError",
    "TextfileExportError",
    "PushGatewayError",
]
