"""resticmetrics exceptions."""

from typing import Optional


class MetricsError(Exception):
    """Base exception for resticmetrics."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code:
            return f"[{self.status_code}] {self.message}"
        return self.message


class MetricsRegistrationError(MetricsError):
    """Raised when a metric cannot be declared or registered."""
    pass


class MetricsExportError(MetricsError):
    """Raised when a registry snapshot cannot be exported."""
    pass


class TextfileExportError(MetricsExportError):
    """Raised when the snapshot cannot be written to a file."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.path = path


class PushGatewayError(MetricsExportError):
    """Raised when the push gateway is unreachable or rejects the push."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.url = url
