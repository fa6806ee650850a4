"""
Translator Output Validator - the mandatory gate between an LLM and the compiler.

Provides:
- parse_translator_output: strict schema parse of the translator's JSON answer
- validate_query: checks every name in a MetricQuery against the ontology

A query that fails either step is reported and dropped; it never reaches
the backend with a metric, aggregation or tag the ontology does not declare.
"""

import json
import re
from typing import Dict, Optional, Set

from pydantic import ValidationError

from metricql.core.constants import DEFAULT_TIME_WINDOW
from metricql.core.errors import NotFoundError, ParseError
from metricql.domain import MetricQuery, OntologyContext
from metricql.domain.base import PascalCaseModel
from metricql.utils.log_utils import get_logger

logger = get_logger(__name__)

_CODE_FENCE = re.compile(r'^```(?:json)?\s*(.*?)\s*```$', re.DOTALL)

# Datadog tag values: letters, digits and _ - : . / only. Anything else could
# close the scope braces and splice a second query into the compiled string.
_TAG_VALUE = re.compile(r'[A-Za-z0-9_\-:./]+')


class TranslatorQuery(PascalCaseModel):
    """Wire shape: {"MetricName", "Aggregation", "Filters", "TimeWindow"}."""
    metric_name: str
    aggregation: str
    filters: Optional[Dict[str, str]] = None
    time_window: Optional[str] = None


def parse_translator_output(text: str) -> MetricQuery:
    """
    Parse the translator's free text into a MetricQuery.

    Markdown code fences around the JSON are tolerated. MetricName and
    Aggregation are required; null Filters/TimeWindow take the defaults.

    Raises:
        ParseError: not JSON, not an object, missing/unknown/mistyped fields
    """
    body = (text or "").strip()
    fenced = _CODE_FENCE.match(body)
    if fenced:
        body = fenced.group(1)

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise ParseError(f"translator output is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ParseError(f"translator output must be a JSON object, got {type(data).__name__}")

    try:
        parsed = TranslatorQuery.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"translator output does not match the query schema: {e}") from e

    if not parsed.metric_name or not parsed.aggregation:
        raise ParseError("translator output is missing MetricName or Aggregation")

    return MetricQuery(
        metric_name=parsed.metric_name,
        aggregation=parsed.aggregation,
        filters=parsed.filters or {},
        time_window=parsed.time_window or DEFAULT_TIME_WINDOW,
    )


def _known_tag_keys(ctx: OntologyContext, metric_name: str) -> Set[str]:
    keys = set(ctx.metrics[metric_name].tags)
    for service in ctx.services.values():
        if metric_name in service.metrics:
            keys.update(service.tags)
    return keys


def validate_query(query: MetricQuery, ctx: OntologyContext) -> MetricQuery:
    """
    Check a MetricQuery against the ontology vocabulary.

    - metric must be declared under `metrics`
    - aggregation must be offered by one of that metric's views
    - every filter key must be a metric tag or a tag of a service using it
    - every filter value must be a plain tag value (no braces, commas or spaces)

    Returns:
        The same query, unchanged

    Raises:
        NotFoundError: kind "metric", "aggregation" or "filter"
        ParseError: a filter value that is not a valid tag value
    """
    metric = ctx.metrics.get(query.metric_name)
    if metric is None:
        raise NotFoundError("metric", query.metric_name)

    aggregations = {view.aggregation for view in metric.supports.values()}
    if query.aggregation not in aggregations:
        raise NotFoundError(
            "aggregation", query.aggregation,
            f"aggregation '{query.aggregation}' not supported by metric "
            f"'{query.metric_name}' (supports: {', '.join(sorted(aggregations)) or 'none'})",
        )

    known_keys = _known_tag_keys(ctx, query.metric_name)
    for key in sorted(query.filters):
        if key not in known_keys:
            raise NotFoundError(
                "filter", key,
                f"tag '{key}' not declared for metric '{query.metric_name}'",
            )
        if not _TAG_VALUE.fullmatch(query.filters[key]):
            raise ParseError(f"invalid value for tag '{key}': {query.filters[key]!r}")

    logger.info(f"[Validator] Accepted {query.aggregation}:{query.metric_name} filters={query.filters}")
    return query
