from metricql.core.config import MetricQLConfig
from metricql.core.errors import (
    MetricQLError,
    ConfigError,
    NotFoundError,
    ParseError,
    TransportError,
    RequestTimeoutError,
)

__all__ = [
    "MetricQLConfig",
    "MetricQLError",
    "ConfigError",
    "NotFoundError",
    "ParseError",
    "TransportError",
    "RequestTimeoutError",
]
