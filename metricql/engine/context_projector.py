"""
Context Projector - reduces the ontology to what a translator needs.

Only the fields relevant to query construction survive: per service its
name, team and tags, and per referenced metric its name, type and views.
Services and metrics are sorted by name so the document is stable.
"""

import json
from typing import Any, Dict, List

from metricql.domain import OntologyContext, View


def _project_view(view: View) -> Dict[str, Any]:
    # Empty optional fields are dropped, the document only carries what is set
    projected = view.model_dump(exclude_none=True)
    return {key: value for key, value in projected.items() if value not in ("", [])}


def project_context(ctx: OntologyContext) -> Dict[str, List[Dict[str, Any]]]:
    """
    Build the grounding projection of an ontology.

    Dangling metric references on a service are skipped silently.

    Returns:
        {"services": [{name, team, tags, metrics: [{name, type, supports}]}]}
    """
    services = []
    for name in sorted(ctx.services):
        service = ctx.services[name]
        metrics = []
        for metric_name in ctx.service_metrics(name):
            metric = ctx.metrics[metric_name]
            metrics.append({
                "name": metric_name,
                "type": metric.type,
                "supports": {
                    view_key: _project_view(view)
                    for view_key, view in sorted(metric.supports.items())
                },
            })
        services.append({
            "name": name,
            "team": service.team,
            "tags": dict(sorted(service.tags.items())),
            "metrics": sorted(metrics, key=lambda m: m["name"]),
        })
    return {"services": services}


def build_grounding_document(ctx: OntologyContext) -> str:
    """Serialize the projection as the canonical JSON grounding document."""
    return json.dumps(project_context(ctx), indent=2, sort_keys=True)
