"""
Result Summarizer - one-line summary of a Datadog query result.

Only the first series is consulted; multi-series results are not aggregated.
"""

from datetime import datetime, timezone
from typing import List, Optional, Union

from metricql.core.constants import DEFAULT_UNIT
from metricql.domain import QueryResult

NO_DATA_MESSAGE = "No data found for the given query"
NO_POINTS_MESSAGE = "No data points found for the given query"

TIMESTAMP_FORMAT = "%d %b %y %H:%M UTC"

# Datadog returns pointlist timestamps in milliseconds; anything above this
# cannot be seconds (year ~5138).
_MILLISECOND_THRESHOLD = 1e11


def _last_point(pointlist: List[List[Optional[float]]]) -> Optional[List[float]]:
    points = [
        p for p in pointlist
        if len(p) >= 2 and p[0] is not None and p[1] is not None
    ]
    if not points:
        return None
    return max(points, key=lambda p: p[0])


def format_timestamp(ts: float) -> str:
    if ts > _MILLISECOND_THRESHOLD:
        ts = ts / 1000.0
    return datetime.fromtimestamp(int(ts), tz=timezone.utc).strftime(TIMESTAMP_FORMAT)


def summarize(result: Union[QueryResult, dict], unit: str = DEFAULT_UNIT) -> str:
    """
    Summarize the chronologically last point of the first series.

    Args:
        result: Backend response (model or raw JSON dict)
        unit: Suffix appended to the value

    Returns:
        NO_DATA_MESSAGE, NO_POINTS_MESSAGE, or
        "<display name> | <expression> | <timestamp> | <value> <unit>"
    """
    if isinstance(result, dict):
        result = QueryResult.model_validate(result)

    if not result.series:
        return NO_DATA_MESSAGE

    series = result.series[0]
    point = _last_point(series.pointlist)
    if point is None:
        return NO_POINTS_MESSAGE

    ts, value = point[0], point[1]
    suffix = f" {unit}" if unit else ""
    return (
        f"{series.display_name or series.metric} | {series.expression} | "
        f"{format_timestamp(ts)} | {value:.2f}{suffix}"
    )
