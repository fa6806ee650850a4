"""
Ontology Store - loads the service/metric/team graph from YAML.

The document has four top-level sections (services, metrics, teams,
aliases). Loading is all-or-nothing: a document that cannot be read or does
not match the expected shape raises ConfigError and no context is returned.
"""

import threading
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from metricql.core.errors import ConfigError
from metricql.domain import MetricType, OntologyContext, ViewType
from metricql.utils.log_utils import get_logger

logger = get_logger(__name__)


def parse_ontology(text: str, source: str = "<string>") -> OntologyContext:
    """
    Parse an ontology document.

    Args:
        text: YAML document text
        source: Name used in error messages

    Returns:
        The fully populated OntologyContext

    Raises:
        ConfigError: cause "parse-failure" for malformed YAML or schema violations
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse ontology {source}: {e}", cause="parse-failure") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"ontology {source} must be a mapping, got {type(data).__name__}",
            cause="parse-failure",
        )

    # Empty sections ("services:" with nothing under it) load as null
    for section in ("services", "metrics", "teams", "aliases"):
        if data.get(section) is None and section in data:
            data[section] = {}

    try:
        ctx = OntologyContext.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid ontology {source}: {e}", cause="parse-failure") from e

    # Alias lookups are case-insensitive
    if any(alias != alias.lower() for alias in ctx.aliases):
        ctx = ctx.model_copy(update={
            "aliases": {alias.lower(): view for alias, view in ctx.aliases.items()}
        })

    _warn_dangling(ctx, source)
    _note_custom_types(ctx, source)

    return ctx


def _warn_dangling(ctx: OntologyContext, source: str) -> None:
    dangling = [
        f"{svc}->{metric}"
        for svc, service in ctx.services.items()
        for metric in service.metrics
        if metric not in ctx.metrics
    ]
    dangling += [
        f"{svc}->team:{service.team}"
        for svc, service in ctx.services.items()
        if service.team and ctx.team_for(svc) is None
    ]
    dangling += [
        f"team:{team_name}->{svc}"
        for team_name, team in ctx.teams.items()
        for svc in team.services
        if svc not in ctx.services
    ]
    if dangling:
        logger.warning(f"[Ontology] Dangling references in {source}: {', '.join(dangling)}")


def _note_custom_types(ctx: OntologyContext, source: str) -> None:
    # Types outside the common Datadog set are accepted as declared
    metric_types = {t.value for t in MetricType}
    view_types = {t.value for t in ViewType}
    for name, metric in ctx.metrics.items():
        if metric.type not in metric_types:
            logger.info(f"[Ontology] {source}: metric {name} has custom type '{metric.type}'")
        for view_key, view in metric.supports.items():
            if view.type not in view_types:
                logger.info(f"[Ontology] {source}: view {name}.{view_key} has custom type '{view.type}'")


def load_ontology(path: Union[str, Path]) -> OntologyContext:
    """
    Load an ontology document from disk.

    Raises:
        ConfigError: cause "read-failure" when the file cannot be read,
            "parse-failure" when its content is invalid
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to read ontology file {path}: {e}", cause="read-failure") from e

    ctx = parse_ontology(text, source=str(path))
    logger.info(
        f"[Ontology] Loaded {path}: {len(ctx.services)} services, "
        f"{len(ctx.metrics)} metrics, {len(ctx.teams)} teams, {len(ctx.aliases)} aliases"
    )
    return ctx


class OntologyStore:
    """
    Holds the ontology snapshot used by the pipeline.

    By default the document is read once and the same immutable context is
    handed to every caller. With hot_reload the file is re-read on every
    get(), so edits show up on the next prompt.
    """

    def __init__(self, path: Union[str, Path], hot_reload: bool = False):
        self.path = Path(path)
        self.hot_reload = hot_reload
        self._snapshot: Optional[OntologyContext] = None
        self._lock = threading.Lock()

    def get(self) -> OntologyContext:
        if self.hot_reload:
            return load_ontology(self.path)
        if self._snapshot is None:
            with self._lock:
                if self._snapshot is None:
                    self._snapshot = load_ontology(self.path)
        return self._snapshot

    def reload(self) -> OntologyContext:
        """Replace the snapshot with a fresh read; the old one stays valid for holders."""
        ctx = load_ontology(self.path)
        with self._lock:
            self._snapshot = ctx
        return ctx
