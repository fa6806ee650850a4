"""
NLQ Parameter Extractor - heuristic resolution of a prompt into a MetricQuery.

No LLM required - all extraction uses ordered keyword and pattern matching.
Each axis (aggregation, metric, filters, time window) is extracted
independently and falls back to a documented default, so resolve_heuristic
never fails:
- aggregation -> "avg"
- metric name -> "" (caller reports "no metric identified")
- filters     -> {}
- time window -> "1h"
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from metricql.core.constants import DEFAULT_AGGREGATION, DEFAULT_TIME_WINDOW
from metricql.domain import MetricQuery, OntologyContext


# Ordered: first match wins. The short English words are matched on word
# boundaries so "minutes" is not "min" and "account" is not "count".
AGGREGATION_KEYWORDS: List[Tuple[str, str]] = [
    (r'p99|99th', "p99"),
    (r'p95|95th', "p95"),
    (r'average|avg', "avg"),
    (r'\bsums?\b', "sum"),
    (r'\bcounts?\b', "count"),
    (r'\bmax(?:imum)?\b', "max"),
    (r'\bmin(?:imum)?\b', "min"),
]

# Ordered: first match wins. Plain substring checks.
METRIC_KEYWORDS: List[Tuple[Tuple[str, ...], str]] = [
    (("latency", "response time"), "request.dist.time"),
    (("error rate", "error count", "errors"), "request.dist.errors"),
    (("throughput", "requests per second", "rps"), "request.dist.time"),
]

# Ordered: first match wins.
TIME_WINDOW_PATTERNS: List[Tuple[str, str]] = [
    (r'\b(?:last|past)\s+(\d+)\s+minutes?\b', "minutes"),
    (r'\b(?:last|past)\s+(\d+)\s+hours?\b', "hours"),
    (r'\b(?:last|past)\s+(\d+)\s+days?\b', "days"),
    (r'\b(?:last|past)\s+hour\b', "1h"),
    (r'\b(?:last|past)\s+day\b', "24h"),
    (r'\b(?:last|past)\s+minute\b', "1m"),
]


@dataclass(frozen=True)
class FilterRule:
    """A prompt token that, when present, scopes the query with tags."""
    token: str
    tags: Dict[str, str] = field(default_factory=dict)


DEFAULT_FILTER_RULES: List[FilterRule] = [
    FilterRule(token="unicorn", tags={"kube_deployment": "unicorn"}),
]


def filter_rules_from_ontology(ctx: OntologyContext) -> List[FilterRule]:
    """One rule per service: its name scopes the query with its tags."""
    return [
        FilterRule(token=name.lower(), tags=dict(service.tags))
        for name, service in sorted(ctx.services.items())
        if service.tags
    ]


def extract_aggregation(prompt: str) -> str:
    prompt_lower = prompt.lower()
    for pattern, aggregation in AGGREGATION_KEYWORDS:
        if re.search(pattern, prompt_lower):
            return aggregation
    return DEFAULT_AGGREGATION


def extract_metric_name(prompt: str) -> str:
    """Returns "" when no metric keyword appears."""
    prompt_lower = prompt.lower()
    for keywords, metric_name in METRIC_KEYWORDS:
        if any(keyword in prompt_lower for keyword in keywords):
            return metric_name
    return ""


def extract_filters(
    prompt: str,
    rules: Optional[Sequence[FilterRule]] = None,
) -> Dict[str, str]:
    """
    Extract tag filters from known identifiers in the prompt.

    Rules are tried longest token first (ties broken alphabetically). A
    rule whose match overlaps text already claimed by a longer token is
    skipped, so "unicorn-api" never also triggers "unicorn". The first
    rule to set a tag key keeps it.
    """
    prompt_lower = prompt.lower()
    rules = DEFAULT_FILTER_RULES if rules is None else rules
    claimed: List[Tuple[int, int]] = []
    filters: Dict[str, str] = {}

    for rule in sorted(rules, key=lambda r: (-len(r.token), r.token)):
        if not rule.token:
            continue
        span = _free_occurrence(prompt_lower, rule.token.lower(), claimed)
        if span is None:
            continue
        claimed.append(span)
        for key, value in rule.tags.items():
            filters.setdefault(key, value)

    return filters


def _free_occurrence(
    text: str, token: str, claimed: List[Tuple[int, int]]
) -> Optional[Tuple[int, int]]:
    start = text.find(token)
    while start != -1:
        end = start + len(token)
        if not any(start < c_end and c_start < end for c_start, c_end in claimed):
            return start, end
        start = text.find(token, start + 1)
    return None


def extract_time_window(prompt: str) -> Optional[str]:
    """
    Extract a duration string from phrases like "last 15 minutes".

    Returns None if no phrase matched (caller applies the default).
    """
    prompt_lower = prompt.lower()
    for pattern, window in TIME_WINDOW_PATTERNS:
        match = re.search(pattern, prompt_lower)
        if not match:
            continue
        if window == "minutes":
            return f"{int(match.group(1))}m"
        if window == "hours":
            return f"{int(match.group(1))}h"
        if window == "days":
            return f"{int(match.group(1)) * 24}h"
        return window
    return None


def resolve_heuristic(
    prompt: str,
    filter_rules: Optional[Sequence[FilterRule]] = None,
) -> MetricQuery:
    """
    Resolve a prompt into a best-effort MetricQuery without any external call.

    Args:
        prompt: Natural language question
        filter_rules: Token -> tags table (default: DEFAULT_FILTER_RULES)

    Returns:
        MetricQuery; never raises for any string input
    """
    return MetricQuery(
        metric_name=extract_metric_name(prompt),
        aggregation=extract_aggregation(prompt),
        filters=extract_filters(prompt, filter_rules),
        time_window=extract_time_window(prompt) or DEFAULT_TIME_WINDOW,
    )
