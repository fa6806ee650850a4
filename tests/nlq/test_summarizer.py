"""
Unit tests for the result summarizer.
"""

from metricql.domain import QueryResult
from metricql.nlq.summarizer import (
    NO_DATA_MESSAGE,
    NO_POINTS_MESSAGE,
    format_timestamp,
    summarize,
)

SERIES = {
    "metric": "request.dist.time",
    "display_name": "request.dist.time",
    "expression": "p99:request.dist.time{kube_deployment:unicorn}",
    "scope": "kube_deployment:unicorn",
}


class TestSummarize:

    def test_no_series(self):
        assert summarize({"series": []}) == NO_DATA_MESSAGE

    def test_missing_series_key(self):
        assert summarize({}) == NO_DATA_MESSAGE

    def test_no_points(self):
        assert summarize({"series": [dict(SERIES, pointlist=[])]}) == NO_POINTS_MESSAGE

    def test_only_null_points(self):
        result = {"series": [dict(SERIES, pointlist=[[1714564800, None]])]}
        assert summarize(result) == NO_POINTS_MESSAGE

    def test_last_point_two_decimals(self):
        result = {"series": [dict(SERIES, pointlist=[
            [1714564740, 10.0],
            [1714564800, 123.456],
        ])]}
        summary = summarize(result)
        assert "123.46 ms" in summary
        assert "10.00" not in summary
        assert "request.dist.time" in summary
        assert "p99:request.dist.time{kube_deployment:unicorn}" in summary
        assert "01 May 24 12:00 UTC" in summary
        assert "\n" not in summary

    def test_chronologically_last_point(self):
        """Points out of order still summarize the newest one."""
        result = {"series": [dict(SERIES, pointlist=[
            [1714564800, 7.0],
            [1714564740, 3.0],
        ])]}
        assert "7.00 ms" in summarize(result)

    def test_trailing_null_value_skipped(self):
        result = {"series": [dict(SERIES, pointlist=[
            [1714564740, 3.5],
            [1714564800, None],
        ])]}
        assert "3.50 ms" in summarize(result)

    def test_only_first_series_used(self):
        result = {"series": [
            dict(SERIES, pointlist=[[1714564800, 1.0]]),
            dict(SERIES, display_name="other", pointlist=[[1714564800, 99.0]]),
        ]}
        summary = summarize(result)
        assert "1.00 ms" in summary
        assert "other" not in summary

    def test_custom_unit(self):
        result = QueryResult.model_validate({"series": [dict(SERIES, pointlist=[[1714564800, 2]])]})
        assert summarize(result, unit="errors/s").endswith("2.00 errors/s")

    def test_no_unit(self):
        result = {"series": [dict(SERIES, pointlist=[[1714564800, 2]])]}
        assert summarize(result, unit="").endswith("| 2.00")


class TestFormatTimestamp:

    def test_seconds(self):
        assert format_timestamp(1714564800) == "01 May 24 12:00 UTC"

    def test_milliseconds(self):
        """Datadog pointlists carry milliseconds."""
        assert format_timestamp(1714564800000.0) == "01 May 24 12:00 UTC"
