"""
Query Routes - resolve, compile and run prompts over HTTP.

Error mapping:
    NotFoundError       -> 404
    ParseError          -> 422
    TransportError      -> 502
    RequestTimeoutError -> 504
    ConfigError         -> 500
"""
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from metricql import __version__
from metricql.core.errors import (
    ConfigError,
    MetricQLError,
    NotFoundError,
    ParseError,
    RequestTimeoutError,
    TransportError,
)
from metricql.domain.base import CamelCaseModel
from metricql.engine.context_projector import project_context
from metricql.nlq.pipeline import QueryPipeline
from metricql.nlq.summarizer import summarize

router = APIRouter(tags=["metricql"])


class PromptRequest(BaseModel):
    prompt: str
    mode: Optional[Literal["heuristic", "ontology", "llm"]] = None


class ResolveResponse(CamelCaseModel):
    prompt: str
    mode: str
    metric_name: str
    aggregation: str
    filters: Dict[str, str]
    time_window: str
    query: str
    from_ts: int
    to_ts: int
    unit: str
    view_key: Optional[str] = None


class RunResponse(ResolveResponse):
    summary: str


def _status_for(error: MetricQLError) -> int:
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ParseError):
        return 422
    if isinstance(error, RequestTimeoutError):
        return 504
    if isinstance(error, TransportError):
        return 502
    if isinstance(error, ConfigError):
        return 500
    return 400


def _http_error(error: MetricQLError) -> HTTPException:
    detail: Dict[str, Any] = {"error": type(error).__name__, "message": str(error)}
    if isinstance(error, NotFoundError):
        detail["kind"] = error.kind
    if isinstance(error, TransportError) and error.body is not None:
        detail["body"] = error.body
    return HTTPException(status_code=_status_for(error), detail=detail)


def _pipeline(request: Request) -> QueryPipeline:
    return request.app.state.pipeline


def _resolve_fields(resolution) -> Dict[str, Any]:
    return {
        "prompt": resolution.prompt,
        "mode": resolution.mode,
        "metric_name": resolution.query.metric_name,
        "aggregation": resolution.query.aggregation,
        "filters": resolution.query.filters,
        "time_window": resolution.compiled.time_window,
        "query": resolution.compiled.query,
        "from_ts": resolution.compiled.from_ts,
        "to_ts": resolution.compiled.to_ts,
        "unit": resolution.unit,
        "view_key": resolution.resolved.view_key if resolution.resolved else None,
    }


@router.get("/")
def root():
    return {"status": "metricql API is running", "version": __version__}


@router.get("/api/ontology/context")
def ontology_context(request: Request):
    """Grounding document the translator receives."""
    try:
        return project_context(_pipeline(request).store.get())
    except MetricQLError as e:
        raise _http_error(e)


@router.post("/api/query/resolve", response_model=ResolveResponse, response_model_by_alias=True)
def resolve_prompt(body: PromptRequest, request: Request):
    """Resolve and compile a prompt without calling Datadog."""
    try:
        resolution = _pipeline(request).resolve(body.prompt, body.mode)
    except MetricQLError as e:
        raise _http_error(e)
    return ResolveResponse(**_resolve_fields(resolution))


@router.post("/api/query/run", response_model=RunResponse, response_model_by_alias=True)
def run_prompt(body: PromptRequest, request: Request):
    """Resolve, compile, query Datadog and summarize the result."""
    pipeline = _pipeline(request)
    try:
        resolution = pipeline.resolve(body.prompt, body.mode)
        result = pipeline.backend.query_metrics(resolution.compiled)
    except MetricQLError as e:
        raise _http_error(e)
    return RunResponse(
        **_resolve_fields(resolution),
        summary=summarize(result, unit=resolution.unit),
    )
