from metricql.engine.ontology import OntologyStore, load_ontology, parse_ontology
from metricql.engine.context_projector import project_context, build_grounding_document

__all__ = [
    "OntologyStore",
    "load_ontology",
    "parse_ontology",
    "project_context",
    "build_grounding_document",
]
