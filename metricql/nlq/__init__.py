"""
NLQ (Natural Language Query) module - prompt resolution and compilation.

Key components:
- resolve_heuristic: keyword/pattern resolution, no external calls
- resolve_via_ontology / match_prompt_entities: ontology-validated resolution
- LLMTranslator + parse_translator_output + validate_query: LLM path and its gate
- compile_query: MetricQuery -> Datadog query string and time range
- summarize: last point of a result as one line
- QueryPipeline: the whole flow
"""

from metricql.nlq.param_extractor import FilterRule, resolve_heuristic
from metricql.nlq.resolver import match_prompt_entities, resolve_via_ontology
from metricql.nlq.validator import parse_translator_output, validate_query
from metricql.nlq.compiler import build_query_string, compile_query, parse_duration
from metricql.nlq.summarizer import summarize
from metricql.nlq.pipeline import QueryPipeline, Resolution

__all__ = [
    "FilterRule",
    "resolve_heuristic",
    "match_prompt_entities",
    "resolve_via_ontology",
    "parse_translator_output",
    "validate_query",
    "build_query_string",
    "compile_query",
    "parse_duration",
    "summarize",
    "QueryPipeline",
    "Resolution",
]
