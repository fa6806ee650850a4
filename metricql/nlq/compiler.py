"""
Query Compiler - turns a MetricQuery into a Datadog query string and time range.

Provides:
- parse_duration: Go-style duration strings ("15m", "1h30m", "500ms")
- build_query_string: "<aggregation>:<metric>{<tag>:<value>,...}"
- compile_query: query string plus UNIX-second bounds

Compilation never fails: an unusable time window degrades to one hour.
Filters are emitted sorted by tag key; an empty filter set still emits
empty braces, e.g. "avg:my.metric{}".
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from metricql.core.constants import DEFAULT_TIME_WINDOW
from metricql.core.errors import ParseError
from metricql.domain import CompiledQuery, MetricQuery
from metricql.utils.log_utils import get_logger

logger = get_logger(__name__)

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
    "w": 604800.0,
}

_COMPONENT = re.compile(r'(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h|d|w)')

DEFAULT_WINDOW = timedelta(hours=1)
# Same ceiling as a Go time.Duration (~292 years)
_MAX_SECONDS = 292 * 365 * 86400


def parse_duration(duration: str) -> timedelta:
    """
    Parse a duration such as "15m", "1h30m", "1.5h" or "24h".

    Raises:
        ParseError: empty, unknown unit, trailing garbage, or not positive
    """
    text = (duration or "").strip()
    if not text:
        raise ParseError("empty duration")

    sign = 1
    if text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    pos = 0
    total = 0.0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if not match:
            raise ParseError(f"invalid duration: {duration!r}")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()

    if pos == 0:
        raise ParseError(f"invalid duration: {duration!r}")

    seconds = sign * total
    if seconds <= 0:
        raise ParseError(f"duration must be positive: {duration!r}")
    if seconds > _MAX_SECONDS:
        raise ParseError(f"duration too large: {duration!r}")
    return timedelta(seconds=seconds)


def build_query_string(query: MetricQuery) -> str:
    scope = ",".join(f"{key}:{value}" for key, value in sorted(query.filters.items()))
    return f"{query.aggregation}:{query.metric_name}{{{scope}}}"


def compile_query(query: MetricQuery, now: Optional[datetime] = None) -> CompiledQuery:
    """
    Compile a resolved query.

    Args:
        query: Resolved query
        now: Reference time (defaults to the current UTC time)

    Returns:
        CompiledQuery with to_ts = now and from_ts = now - window
    """
    now = now or datetime.now(timezone.utc)
    try:
        window = parse_duration(query.time_window)
        applied = query.time_window
    except ParseError as e:
        logger.warning(f"[Compiler] {e}; falling back to {DEFAULT_TIME_WINDOW}")
        window = DEFAULT_WINDOW
        applied = DEFAULT_TIME_WINDOW

    to_ts = int(now.timestamp())
    from_ts = int((now - window).timestamp())

    compiled = CompiledQuery(
        query=build_query_string(query),
        from_ts=from_ts,
        to_ts=to_ts,
        time_window=applied,
    )
    logger.info(f"[Compiler] {compiled.query} from={from_ts} to={to_ts}")
    return compiled
