from .models import (
    MetricType,
    ViewType,
    View,
    Metric,
    Service,
    Team,
    OntologyContext,
    MetricQuery,
    CompiledQuery,
    ResolvedMetric,
    Series,
    QueryResult,
)

__all__ = [
    "MetricType",
    "ViewType",
    "View",
    "Metric",
    "Service",
    "Team",
    "OntologyContext",
    "MetricQuery",
    "CompiledQuery",
    "ResolvedMetric",
    "Series",
    "QueryResult",
]
