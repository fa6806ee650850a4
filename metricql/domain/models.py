"""
Domain models for the ontology graph, resolved queries and backend results.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from metricql.core.constants import (
    DEFAULT_AGGREGATION,
    DEFAULT_TIME_WINDOW,
    SUPPORTED_AGGREGATIONS,
)


# =============================================================================
# Ontology graph
# =============================================================================

class MetricType(str, Enum):
    """Common Datadog metric types. Ontologies may declare others."""
    GAUGE = "gauge"
    COUNTER = "counter"
    RATE = "rate"
    COUNT = "count"
    DISTRIBUTION = "distribution"
    HISTOGRAM = "histogram"


class ViewType(str, Enum):
    """Common view types. Ontologies may declare others."""
    PERCENTILE = "percentile"
    AVERAGE = "average"
    SUM = "sum"
    COUNT = "count"
    MAX = "max"
    MIN = "min"
    RATE = "rate"


class OntologyModel(BaseModel):
    """Immutable after load; unknown YAML keys are ignored."""
    model_config = ConfigDict(frozen=True, extra="ignore", use_enum_values=True)


class View(OntologyModel):
    """A named way of looking at a metric (p99, avg, error_rate...)."""
    type: str
    aggregation: str
    filter: Optional[str] = None
    percentiles: List[str] = Field(default_factory=list)
    unit: Optional[str] = None
    example_query: Optional[str] = None

    @field_validator("aggregation")
    @classmethod
    def _check_aggregation(cls, value: str) -> str:
        if value not in SUPPORTED_AGGREGATIONS:
            raise ValueError(
                f"unsupported aggregation '{value}', expected one of {list(SUPPORTED_AGGREGATIONS)}"
            )
        return value


class Metric(OntologyModel):
    description: str = ""
    type: str
    tags: List[str] = Field(default_factory=list)
    supports: Dict[str, View] = Field(default_factory=dict)


class Service(OntologyModel):
    description: str = ""
    tags: Dict[str, str] = Field(default_factory=dict)
    team: str = ""
    metrics: List[str] = Field(default_factory=list)


class Team(OntologyModel):
    on_call: str = ""
    services: List[str] = Field(default_factory=list)


class OntologyContext(OntologyModel):
    """
    Root aggregate of the ontology document.

    Service.metrics and Team.services are weak references by name; a
    dangling name is tolerated and skipped by every consumer.
    """
    services: Dict[str, Service] = Field(default_factory=dict)
    metrics: Dict[str, Metric] = Field(default_factory=dict)
    teams: Dict[str, Team] = Field(default_factory=dict)
    aliases: Dict[str, str] = Field(default_factory=dict)

    def service_metrics(self, service_name: str) -> List[str]:
        """Names of the metrics a service declares that actually exist."""
        service = self.services.get(service_name)
        if service is None:
            return []
        return [name for name in service.metrics if name in self.metrics]

    def team_for(self, service_name: str) -> Optional[Team]:
        service = self.services.get(service_name)
        if service is None or not service.team:
            return None
        return self.teams.get(service.team)


# =============================================================================
# Resolved / compiled queries
# =============================================================================

class MetricQuery(BaseModel):
    """What the user wants to see, independent of backend syntax."""
    metric_name: str = ""
    aggregation: str = DEFAULT_AGGREGATION
    filters: Dict[str, str] = Field(default_factory=dict)
    time_window: str = DEFAULT_TIME_WINDOW


class CompiledQuery(BaseModel):
    """Backend query string plus the UNIX-second bounds it covers."""
    query: str
    from_ts: int
    to_ts: int
    time_window: str


class ResolvedMetric(BaseModel):
    """A (metric, view) pair found for a service through the ontology."""
    service: str
    metric_name: str
    metric: Metric
    view_key: str
    view: View


# =============================================================================
# Backend results
# =============================================================================

class Series(BaseModel):
    model_config = ConfigDict(extra="ignore")

    metric: str = ""
    pointlist: List[List[Optional[float]]] = Field(default_factory=list)
    scope: str = ""
    expression: str = ""
    display_name: str = ""


class QueryResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    series: List[Series] = Field(default_factory=list)
