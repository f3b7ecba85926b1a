"""Push Gateway client.

Sends a registry snapshot to a Prometheus push gateway. prometheus_client
builds the grouping key URL and the text body; requests go out through
httpx, with the body swapped for length-delimited protobuf when asked.
"""

import logging
from typing import Callable, Mapping, Optional

import httpx
from prometheus_client import CollectorRegistry
from prometheus_client.exposition import CONTENT_TYPE_LATEST, generate_latest, pushadd_to_gateway

from resticmetrics.adapters.prometheus.protobuf import (
    CONTENT_TYPE_PROTOBUF_DELIMITED,
    generate_delimited,
)
from resticmetrics.core.errors import PushGatewayError
from resticmetrics.domain.models import ExportFormat

logger = logging.getLogger(__name__)

_GROUP_PATH = "/metrics/job"


class PushGatewayClient:
    """Client for a single push gateway group (job + grouping key)."""

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        url: str,
        job: str,
        grouping_key: Optional[Mapping[str, str]] = None,
        format: ExportFormat = ExportFormat.TEXT,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the push gateway client.

        Args:
            url: Push gateway base URL (scheme defaults to http)
            job: Job name of the pushed group
            grouping_key: Additional labels identifying the group
            format: Encoding of the pushed body
            timeout: Request timeout in seconds
            http_client: Optional httpx client (owned by the caller)
        """
        self.gateway = url.strip()
        self.job = job
        self.grouping_key = dict(grouping_key or {})
        self.format = ExportFormat(format)
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout)
        self._url = self._resolve_url()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self) -> None:
        """Close the underlying client if it was created here."""
        if self._owns_client:
            self._client.close()

    def _resolve_url(self) -> str:
        """Let prometheus_client build the group URL without sending anything."""
        captured = {}

        def capture(url, method, timeout, headers, data):
            captured["url"] = url
            return lambda: None

        pushadd_to_gateway(
            self.gateway,
            job=self.job,
            registry=CollectorRegistry(),
            grouping_key=self.grouping_key,
            handler=capture,
        )
        return captured["url"]

    @property
    def url(self) -> str:
        return self._url

    @property
    def base_url(self) -> str:
        return self._url.partition(_GROUP_PATH)[0]

    def encode(self, registry: CollectorRegistry) -> tuple[bytes, str]:
        """Return the request body and its content type."""
        if self.format == ExportFormat.PROTOBUF:
            return generate_delimited(registry), CONTENT_TYPE_PROTOBUF_DELIMITED
        return generate_latest(registry), CONTENT_TYPE_LATEST

    def _handler(self, registry: CollectorRegistry) -> Callable:
        """Build a prometheus_client push handler sending through httpx."""

        def handle(url, method, timeout, headers, data):
            def send():
                request_headers = dict(headers)
                body = data
                if self.format == ExportFormat.PROTOBUF:
                    body, request_headers["Content-Type"] = self.encode(registry)

                try:
                    response = self._client.request(
                        method, url, content=body, headers=request_headers, timeout=timeout
                    )
                except httpx.HTTPError as e:
                    raise PushGatewayError(f"push gateway unreachable: {e}", url=url) from e

                if not response.is_success:
                    self._handle_error(response, url)

                logger.debug(f"Pushed {len(body)} bytes ({self.format.value}) to {url}")

            return send

        return handle

    def push(self, registry: CollectorRegistry) -> None:
        """POST the registry snapshot, replacing same-named metrics in the group."""
        pushadd_to_gateway(
            self.gateway,
            job=self.job,
            registry=registry,
            grouping_key=self.grouping_key,
            timeout=self.timeout,
            handler=self._handler(registry),
        )

    def healthy(self) -> bool:
        """Check the gateway's health endpoint."""
        try:
            response = self._client.get(f"{self.base_url}/-/healthy", timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.warning(f"Push gateway health check failed: {e}")
            return False
        return response.is_success

    def _handle_error(self, response: httpx.Response, url: str) -> None:
        """Handle HTTP error responses."""
        detail = response.text.strip() or response.reason_phrase
        raise PushGatewayError(
            f"push gateway rejected metrics: {detail}",
            url=url,
            status_code=response.status_code,
        )
