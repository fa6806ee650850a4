"""
Unit tests for ontology-validated resolution and the prompt-to-entity matcher.
"""

from pathlib import Path

import pytest

from metricql.core.errors import NotFoundError
from metricql.engine.ontology import load_ontology
from metricql.nlq.resolver import (
    match_prompt_entities,
    parse_scope,
    resolve_prompt_via_ontology,
    resolve_via_ontology,
)

FIXTURE_ONTOLOGY = Path(__file__).parent.parent / "fixtures" / "ontology.yaml"


class TestResolveViaOntology:
    """Tests for (service, alias) -> (metric, view)."""

    def setup_method(self):
        self.ctx = load_ontology(FIXTURE_ONTOLOGY)

    def test_resolves_first_supporting_metric(self):
        resolved = resolve_via_ontology(self.ctx, "unicorn", "p99")
        assert resolved.metric_name == "request.dist.time"
        assert resolved.view_key == "p99"
        assert resolved.view.aggregation == "p99"
        assert resolved.metric.type == "distribution"

    def test_declared_order_wins(self):
        """unicorn-api lists request.dist.errors first, still only time supports p99."""
        resolved = resolve_via_ontology(self.ctx, "unicorn-api", "99th")
        assert resolved.metric_name == "request.dist.time"

    def test_alias_is_case_insensitive(self):
        resolved = resolve_via_ontology(self.ctx, "unicorn", "AVERAGE")
        assert resolved.view_key == "avg"

    def test_unknown_alias(self):
        with pytest.raises(NotFoundError) as exc:
            resolve_via_ontology(self.ctx, "unicorn", "p42")
        assert exc.value.kind == "alias"

    def test_empty_alias(self):
        with pytest.raises(NotFoundError) as exc:
            resolve_via_ontology(self.ctx, "unicorn", "")
        assert exc.value.kind == "alias"

    def test_unknown_service(self):
        with pytest.raises(NotFoundError) as exc:
            resolve_via_ontology(self.ctx, "nope", "p99")
        assert exc.value.kind == "service"
        assert exc.value.name == "nope"

    def test_no_metric_supports_view(self):
        """p50 is a valid alias but no metric offers that view."""
        with pytest.raises(NotFoundError) as exc:
            resolve_via_ontology(self.ctx, "unicorn", "p50")
        assert exc.value.kind == "view"

    def test_dangling_metrics_are_skipped(self):
        """batch only references a metric that does not exist."""
        with pytest.raises(NotFoundError) as exc:
            resolve_via_ontology(self.ctx, "batch", "p99")
        assert exc.value.kind == "view"


class TestMatchPromptEntities:
    """Tests for deterministic substring matching."""

    def setup_method(self):
        self.ctx = load_ontology(FIXTURE_ONTOLOGY)

    def test_matches_service_and_alias(self):
        assert match_prompt_entities(self.ctx, "p99 latency for unicorn") == ("unicorn", "p99")

    def test_longest_service_wins(self):
        service, _ = match_prompt_entities(self.ctx, "p99 for unicorn-api")
        assert service == "unicorn-api"

    def test_longest_alias_wins(self):
        """'error rate' beats the shorter aliases it does not contain."""
        _, alias = match_prompt_entities(self.ctx, "error rate for unicorn, p99 please")
        assert alias == "error rate"

    def test_no_alias(self):
        assert match_prompt_entities(self.ctx, "how is unicorn doing") == ("unicorn", "")

    def test_no_service(self):
        with pytest.raises(NotFoundError) as exc:
            match_prompt_entities(self.ctx, "p99 latency for checkout")
        assert exc.value.kind == "service"

    def test_case_insensitive(self):
        assert match_prompt_entities(self.ctx, "P99 for UNICORN") == ("unicorn", "p99")


class TestResolvePromptViaOntology:
    """Tests for prompt -> MetricQuery through the ontology."""

    def setup_method(self):
        self.ctx = load_ontology(FIXTURE_ONTOLOGY)

    def test_builds_query_from_view_and_service(self):
        query, resolved = resolve_prompt_via_ontology(
            self.ctx, "99th percentile latency for unicorn over the last 15 minutes"
        )
        assert query.metric_name == "request.dist.time"
        assert query.aggregation == "p99"
        assert query.filters == {"kube_deployment": "unicorn"}
        assert query.time_window == "15m"
        assert resolved.view.unit == "ms"

    def test_view_filter_is_merged(self):
        query, _ = resolve_prompt_via_ontology(self.ctx, "error rate for unicorn-api")
        assert query.metric_name == "request.dist.errors"
        assert query.aggregation == "avg"
        assert query.filters == {"kube_deployment": "unicorn-api", "status_class": "5xx"}
        assert query.time_window == "1h"


class TestParseScope:

    def test_pairs(self):
        assert parse_scope("env:prod, region:us-west") == {"env": "prod", "region": "us-west"}

    def test_ignores_malformed(self):
        assert parse_scope("") == {}
        assert parse_scope("*,novalue:,:nokey") == {}
