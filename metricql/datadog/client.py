"""
Datadog API Client - runs compiled metric queries.

GET {api_url}/query?from=<unix>&to=<unix>&query=<compiled query>
with the DD-API-KEY / DD-APPLICATION-KEY headers.
"""

from typing import Optional

import httpx
from pydantic import ValidationError

from metricql.core.config import MetricQLConfig
from metricql.core.errors import ConfigError, RequestTimeoutError, TransportError
from metricql.domain import CompiledQuery, QueryResult
from metricql.utils.log_utils import get_logger

logger = get_logger(__name__)


class DatadogClient:
    """Client for the Datadog v1 timeseries query endpoint."""

    def __init__(
        self,
        config: MetricQLConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not config.datadog_api_key or not config.datadog_app_key:
            raise ConfigError("DD_API_KEY and DD_APP_KEY are required", cause="missing-credential")
        self.api_key = config.datadog_api_key
        self.app_key = config.datadog_app_key
        self.base_url = config.datadog_api_url.rstrip("/")
        self.timeout = config.backend_timeout
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                transport=self._transport,
                headers={
                    "Accept": "application/json",
                    "DD-API-KEY": self.api_key,
                    "DD-APPLICATION-KEY": self.app_key,
                },
            )
        return self._client

    def query_metrics(self, compiled: CompiledQuery) -> QueryResult:
        """
        Run a compiled query.

        Raises:
            RequestTimeoutError: no answer within the backend timeout
            TransportError: network failure, non-200 status (body attached)
                or an unreadable response body
        """
        url = f"{self.base_url}/query"
        params = {
            "from": str(compiled.from_ts),
            "to": str(compiled.to_ts),
            "query": compiled.query,
        }
        logger.info(f"[DatadogClient] Querying {compiled.query} from={compiled.from_ts} to={compiled.to_ts}")

        try:
            response = self._get_client().get(url, params=params)
        except httpx.TimeoutException as e:
            logger.error(f"[DatadogClient] Query timeout after {self.timeout}s")
            raise RequestTimeoutError(f"Datadog query timed out after {self.timeout:.0f}s") from e
        except httpx.HTTPError as e:
            logger.error(f"[DatadogClient] Query error: {e}")
            raise TransportError(f"failed to execute request: {e}") from e

        if response.status_code != 200:
            logger.error(f"[DatadogClient] Query failed: HTTP {response.status_code}")
            raise TransportError(
                f"error response from API (HTTP {response.status_code}): {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            return QueryResult.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise TransportError(
                f"failed to decode response: {e}",
                status_code=response.status_code,
                body=response.text,
            ) from e

    def close(self):
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
