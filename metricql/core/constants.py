"""
Centralized constants for metricql.

Every value reads from an environment variable with a default, so a local
run needs nothing beyond the two Datadog keys (and an OpenAI key in llm mode).
"""
import os

# --- Ontology ---
ONTOLOGY_PATH = os.getenv("METRICQL_ONTOLOGY_PATH", "config/ontology.yaml")
HOT_RELOAD = os.getenv("METRICQL_HOT_RELOAD", "false").lower() in ("1", "true", "yes")

# --- Resolution mode: heuristic | ontology | llm ---
RESOLUTION_MODE = os.getenv("METRICQL_MODE", "heuristic")

# --- Datadog ---
DATADOG_API_URL = os.getenv("DD_API_URL", "https://api.datadoghq.com/api/v1")
BACKEND_TIMEOUT = float(os.getenv("METRICQL_BACKEND_TIMEOUT", "10.0"))

# --- LLM translator ---
LLM_MODEL_NAME = os.getenv("METRICQL_LLM_MODEL", "gpt-4.1")
LLM_TEMPERATURE = float(os.getenv("METRICQL_LLM_TEMPERATURE", "0.2"))
TRANSLATOR_TIMEOUT = float(os.getenv("METRICQL_TRANSLATOR_TIMEOUT", "30.0"))

# --- Summaries ---
DEFAULT_UNIT = os.getenv("METRICQL_UNIT", "ms")

# --- Query defaults ---
DEFAULT_AGGREGATION = "avg"
DEFAULT_TIME_WINDOW = "1h"

# Aggregation tokens the Datadog query dialect accepts in front of a metric.
SUPPORTED_AGGREGATIONS = (
    "avg", "sum", "min", "max", "count",
    "p50", "p75", "p90", "p95", "p99",
)

REPL_PROMPT = "metricql > "
REPL_HISTORY_FILE = os.getenv("METRICQL_HISTORY_FILE", "/tmp/metricql.repl.history")
REPL_HISTORY_LENGTH = int(os.getenv("METRICQL_HISTORY_LENGTH", "1000"))
