"""
Tests for QueryPipeline across the three resolution modes.

Collaborators (translator, Datadog) are stand-ins; the ontology is the
shared fixture.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from metricql.core.config import MetricQLConfig
from metricql.core.errors import ConfigError, NotFoundError, ParseError
from metricql.domain import QueryResult
from metricql.engine.ontology import OntologyStore
from metricql.nlq.pipeline import QueryPipeline

FIXTURE_ONTOLOGY = Path(__file__).parent.parent / "fixtures" / "ontology.yaml"
NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
NOW_TS = int(NOW.timestamp())


class StubTranslator:
    def __init__(self, output):
        self.output = output
        self.calls = []

    def translate(self, grounding, prompt):
        self.calls.append((grounding, prompt))
        return self.output


class StubBackend:
    def __init__(self, result):
        self.result = result
        self.queries = []

    def query_metrics(self, compiled):
        self.queries.append(compiled)
        return QueryResult.model_validate(self.result)

    def close(self):
        pass


def make_pipeline(mode="heuristic", ontology=FIXTURE_ONTOLOGY, **kwargs) -> QueryPipeline:
    config = MetricQLConfig(mode=mode, ontology_path=str(ontology))
    return QueryPipeline(config, clock=lambda: NOW, **kwargs)


class TestHeuristicMode:

    def test_resolves_and_compiles(self):
        resolution = make_pipeline().resolve("99th percentile latency for unicorn over the last 15 minutes")
        assert resolution.mode == "heuristic"
        assert resolution.compiled.query == "p99:request.dist.time{kube_deployment:unicorn}"
        assert resolution.compiled.from_ts == NOW_TS - 900
        assert resolution.compiled.to_ts == NOW_TS

    def test_ontology_services_become_filters(self):
        resolution = make_pipeline().resolve("errors for unicorn-api")
        assert resolution.query.filters == {"kube_deployment": "unicorn-api"}

    def test_no_metric_identified(self):
        with pytest.raises(NotFoundError) as exc:
            make_pipeline().resolve("how is unicorn doing")
        assert exc.value.kind == "metric"

    def test_works_without_ontology(self, tmp_path):
        pipeline = make_pipeline(ontology=tmp_path / "missing.yaml")
        resolution = pipeline.resolve("avg latency for unicorn")
        assert resolution.compiled.query == "avg:request.dist.time{kube_deployment:unicorn}"


class TestOntologyMode:

    def test_resolves_through_views(self):
        resolution = make_pipeline("ontology").resolve("p99 latency for unicorn last hour")
        assert resolution.compiled.query == "p99:request.dist.time{kube_deployment:unicorn}"
        assert resolution.resolved.view_key == "p99"
        assert resolution.unit == "ms"

    def test_unknown_service(self):
        with pytest.raises(NotFoundError) as exc:
            make_pipeline("ontology").resolve("p99 latency for checkout")
        assert exc.value.kind == "service"

    def test_missing_ontology(self, tmp_path):
        with pytest.raises(ConfigError) as exc:
            make_pipeline("ontology", ontology=tmp_path / "missing.yaml").resolve("p99 for unicorn")
        assert exc.value.cause == "read-failure"


class TestLLMMode:

    def test_validated_translation(self):
        translator = StubTranslator(
            '{"MetricName": "request.dist.time", "Aggregation": "p99", '
            '"Filters": {"kube_deployment": "unicorn-api"}, "TimeWindow": "24h"}'
        )
        resolution = make_pipeline("llm", translator=translator).resolve("p99 latency for unicorn-api today")
        assert resolution.compiled.query == "p99:request.dist.time{kube_deployment:unicorn-api}"
        assert resolution.compiled.from_ts == NOW_TS - 86400
        assert resolution.unit == "ms"
        grounding, prompt = translator.calls[0]
        assert '"services"' in grounding
        assert prompt == "p99 latency for unicorn-api today"

    def test_hallucinated_metric_rejected(self):
        translator = StubTranslator('{"MetricName": "made.up", "Aggregation": "avg"}')
        with pytest.raises(NotFoundError) as exc:
            make_pipeline("llm", translator=translator).resolve("anything")
        assert exc.value.kind == "metric"

    def test_unparseable_answer(self):
        translator = StubTranslator("Sorry, I can't help with that.")
        with pytest.raises(ParseError):
            make_pipeline("llm", translator=translator).resolve("anything")


class TestRun:

    def test_summarizes_backend_result(self):
        backend = StubBackend({"series": [{
            "metric": "request.dist.time",
            "display_name": "request.dist.time",
            "expression": "p99:request.dist.time{kube_deployment:unicorn}",
            "pointlist": [[NOW_TS - 60, 120.0], [NOW_TS, 142.123]],
        }]})
        summary = make_pipeline(backend=backend).run("p99 latency for unicorn")
        assert "142.12 ms" in summary
        assert backend.queries[0].query == "p99:request.dist.time{kube_deployment:unicorn}"

    def test_mode_override(self):
        backend = StubBackend({"series": []})
        pipeline = make_pipeline(backend=backend)
        assert pipeline.run("error rate for unicorn", mode="ontology") == "No data found for the given query"
        assert backend.queries[0].query == "avg:request.dist.errors{kube_deployment:unicorn,status_class:5xx}"

    def test_unknown_mode(self):
        with pytest.raises(ConfigError):
            make_pipeline().resolve("p99 latency", mode="magic")

    def test_shared_snapshot(self):
        store = OntologyStore(FIXTURE_ONTOLOGY)
        pipeline = QueryPipeline(MetricQLConfig(mode="ontology"), store=store)
        pipeline.resolve("p99 for unicorn")
        ctx = store.get()
        pipeline.resolve("avg for unicorn")
        assert store.get() is ctx
