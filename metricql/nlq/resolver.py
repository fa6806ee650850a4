"""
Ontology-validated resolution.

Resolves a (service, alias) pair to a declared metric and view, and finds
that pair in free text. Anything the ontology does not declare is reported
as NotFoundError, so only real metrics/views reach the compiler.
"""

from typing import Dict, Iterable, Optional, Tuple

from metricql.core.constants import DEFAULT_TIME_WINDOW
from metricql.core.errors import NotFoundError
from metricql.domain import MetricQuery, OntologyContext, ResolvedMetric
from metricql.nlq.param_extractor import extract_time_window
from metricql.utils.log_utils import get_logger

logger = get_logger(__name__)


def resolve_via_ontology(
    ctx: OntologyContext,
    service_name: str,
    alias: str,
) -> ResolvedMetric:
    """
    Find the first metric of a service that supports the aliased view.

    Args:
        ctx: Loaded ontology
        service_name: Service declared under `services`
        alias: Natural-language token declared under `aliases`

    Returns:
        ResolvedMetric with the metric and view

    Raises:
        NotFoundError: kind "alias", "service" or "view"
    """
    view_key = ctx.aliases.get(alias.lower())
    if view_key is None:
        raise NotFoundError("alias", alias)

    service = ctx.services.get(service_name)
    if service is None:
        raise NotFoundError("service", service_name)

    # Declared order matters: the first supporting metric wins
    for metric_name in ctx.service_metrics(service_name):
        metric = ctx.metrics[metric_name]
        view = metric.supports.get(view_key)
        if view is not None:
            return ResolvedMetric(
                service=service_name,
                metric_name=metric_name,
                metric=metric,
                view_key=view_key,
                view=view,
            )

    raise NotFoundError(
        "view", view_key,
        f"view '{view_key}' not supported by any metric of service '{service_name}'",
    )


def parse_scope(scope: str) -> Dict[str, str]:
    """Parse a "key:value,key:value" scope (as found on a view) into tags."""
    tags: Dict[str, str] = {}
    for part in scope.split(","):
        key, sep, value = part.strip().partition(":")
        if sep and key and value:
            tags[key.strip()] = value.strip()
    return tags


def _longest_match(text: str, candidates: Iterable[str]) -> Optional[str]:
    # Longest name first, then alphabetical, so "unicorn-api" beats "unicorn"
    for candidate in sorted(candidates, key=lambda c: (-len(c), c)):
        if candidate and candidate.lower() in text:
            return candidate
    return None


def match_prompt_entities(ctx: OntologyContext, prompt: str) -> Tuple[str, str]:
    """
    Find the service name and alias mentioned in a prompt.

    Returns:
        (service_name, alias); alias is "" when none appears

    Raises:
        NotFoundError: kind "service" when no declared service appears
    """
    lower = prompt.lower()

    service_name = _longest_match(lower, ctx.services)
    if service_name is None:
        raise NotFoundError("service", prompt, f"no service found in prompt: {prompt}")

    alias = _longest_match(lower, ctx.aliases) or ""
    return service_name, alias


def resolve_prompt_via_ontology(ctx: OntologyContext, prompt: str) -> Tuple[MetricQuery, ResolvedMetric]:
    """
    Resolve free text into a MetricQuery that only uses declared vocabulary.

    The view supplies the aggregation, the service tags the filters; the
    time window comes from the prompt (default 1h).
    """
    service_name, alias = match_prompt_entities(ctx, prompt)
    resolved = resolve_via_ontology(ctx, service_name, alias)
    logger.info(
        f"[Resolver] {prompt!r} -> service={service_name} alias={alias} "
        f"metric={resolved.metric_name} view={resolved.view_key}"
    )

    filters = dict(ctx.services[service_name].tags)
    filters.update(parse_scope(resolved.view.filter or ""))

    query = MetricQuery(
        metric_name=resolved.metric_name,
        aggregation=resolved.view.aggregation,
        filters=filters,
        time_window=extract_time_window(prompt) or DEFAULT_TIME_WINDOW,
    )
    return query, resolved
