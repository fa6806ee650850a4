"""
Query Pipeline - prompt text to summary.

prompt -> resolver (heuristic | ontology | llm) -> MetricQuery
       -> compiler -> CompiledQuery -> Datadog -> summarizer

One prompt is handled at a time; nothing is shared between prompts except
the read-only ontology snapshot held by the OntologyStore.
"""

from datetime import datetime
from typing import Callable, Optional

from pydantic import BaseModel

from metricql.core.config import MetricQLConfig
from metricql.core.errors import ConfigError, NotFoundError
from metricql.datadog.client import DatadogClient
from metricql.domain import CompiledQuery, MetricQuery, ResolvedMetric
from metricql.engine.context_projector import build_grounding_document
from metricql.engine.ontology import OntologyStore
from metricql.nlq.compiler import compile_query
from metricql.nlq.param_extractor import filter_rules_from_ontology, resolve_heuristic, DEFAULT_FILTER_RULES
from metricql.nlq.resolver import resolve_prompt_via_ontology
from metricql.nlq.summarizer import summarize
from metricql.nlq.translator import LLMTranslator
from metricql.nlq.validator import parse_translator_output, validate_query
from metricql.utils.log_utils import get_logger

logger = get_logger(__name__)


class Resolution(BaseModel):
    """Outcome of resolving and compiling one prompt."""
    prompt: str
    mode: str
    query: MetricQuery
    compiled: CompiledQuery
    unit: str
    resolved: Optional[ResolvedMetric] = None
    translator_output: Optional[str] = None


class QueryPipeline:
    """
    Orchestrates resolution, compilation and execution of prompts.

    Collaborators are created lazily so compile-only use needs no
    credentials: the translator on the first llm-mode prompt, the Datadog
    client on the first run().
    """

    def __init__(
        self,
        config: MetricQLConfig,
        store: Optional[OntologyStore] = None,
        translator: Optional[LLMTranslator] = None,
        backend: Optional[DatadogClient] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        self.store = store or OntologyStore(config.ontology_path, hot_reload=config.hot_reload)
        self._translator = translator
        self._backend = backend
        self._clock = clock

    @property
    def translator(self) -> LLMTranslator:
        if self._translator is None:
            self._translator = LLMTranslator(self.config)
        return self._translator

    @property
    def backend(self) -> DatadogClient:
        if self._backend is None:
            self._backend = DatadogClient(self.config)
        return self._backend

    # ------------------------------------------------------------------
    # Resolution strategies
    # ------------------------------------------------------------------

    def _resolve_heuristic(self, prompt: str) -> Resolution:
        try:
            rules = filter_rules_from_ontology(self.store.get()) or DEFAULT_FILTER_RULES
        except ConfigError as e:
            # The heuristic path works without an ontology
            logger.warning(f"[Pipeline] Ontology unavailable, using default filter rules: {e}")
            rules = DEFAULT_FILTER_RULES

        query = resolve_heuristic(prompt, rules)
        if not query.metric_name:
            raise NotFoundError("metric", "", f"no metric identified in prompt: {prompt}")
        return self._compiled(prompt, "heuristic", query, self.config.unit)

    def _resolve_ontology(self, prompt: str) -> Resolution:
        ctx = self.store.get()
        query, resolved = resolve_prompt_via_ontology(ctx, prompt)
        return self._compiled(
            prompt, "ontology", query, resolved.view.unit or self.config.unit,
            resolved=resolved,
        )

    def _resolve_llm(self, prompt: str) -> Resolution:
        ctx = self.store.get()
        grounding = build_grounding_document(ctx)
        output = self.translator.translate(grounding, prompt)
        query = validate_query(parse_translator_output(output), ctx)
        return self._compiled(
            prompt, "llm", query, self._unit_for(ctx, query),
            translator_output=output,
        )

    def _unit_for(self, ctx, query: MetricQuery) -> str:
        metric = ctx.metrics.get(query.metric_name)
        if metric is not None:
            for view in metric.supports.values():
                if view.aggregation == query.aggregation and view.unit:
                    return view.unit
        return self.config.unit

    def _compiled(self, prompt: str, mode: str, query: MetricQuery, unit: str, **extra) -> Resolution:
        return Resolution(
            prompt=prompt,
            mode=mode,
            query=query,
            compiled=compile_query(query, now=self._clock() if self._clock else None),
            unit=unit,
            **extra,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(self, prompt: str, mode: Optional[str] = None) -> Resolution:
        """
        Resolve and compile a prompt without calling the backend.

        Raises:
            MetricQLError subclasses (ConfigError, NotFoundError, ParseError,
            TransportError, RequestTimeoutError)
        """
        mode = mode or self.config.mode
        if mode == "heuristic":
            return self._resolve_heuristic(prompt)
        if mode == "ontology":
            return self._resolve_ontology(prompt)
        if mode == "llm":
            return self._resolve_llm(prompt)
        raise ConfigError(f"unknown resolution mode: {mode}", cause="parse-failure")

    def run(self, prompt: str, mode: Optional[str] = None) -> str:
        """Resolve, compile, execute against Datadog and summarize."""
        resolution = self.resolve(prompt, mode)
        result = self.backend.query_metrics(resolution.compiled)
        return summarize(result, unit=resolution.unit)

    def close(self):
        if self._backend is not None:
            self._backend.close()
