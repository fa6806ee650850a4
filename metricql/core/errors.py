"""
Error taxonomy for metricql.

Every failure a collaborator can see is a MetricQLError subclass, so the CLI,
REPL and HTTP layers catch one type and report it.
"""

from typing import Optional


class MetricQLError(Exception):
    """Base class for all metricql failures."""


class ConfigError(MetricQLError):
    """Ontology or configuration could not be used.

    cause is one of "read-failure", "parse-failure", "missing-credential".
    """

    def __init__(self, message: str, cause: str = "parse-failure"):
        super().__init__(message)
        self.cause = cause


class NotFoundError(MetricQLError):
    """A name was not declared in the ontology.

    kind is one of "alias", "service", "view", "metric", "aggregation", "filter".
    """

    def __init__(self, kind: str, name: str, message: Optional[str] = None):
        super().__init__(message or f"{kind} '{name}' not found")
        self.kind = kind
        self.name = name


class ParseError(MetricQLError):
    """A duration or a structured query could not be parsed."""


class TransportError(MetricQLError):
    """Network failure or a non-success response from a remote service."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class RequestTimeoutError(MetricQLError, TimeoutError):
    """An outbound call exceeded its time budget."""
