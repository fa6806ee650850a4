"""
Runtime configuration passed explicitly to clients and the pipeline.
"""

import os
from typing import Literal, Optional

from pydantic import BaseModel, Field

from metricql.core import constants
from metricql.core.errors import ConfigError

ResolutionMode = Literal["heuristic", "ontology", "llm"]


class MetricQLConfig(BaseModel):
    """All settings a metricql process needs, gathered in one place."""

    ontology_path: str = constants.ONTOLOGY_PATH
    hot_reload: bool = constants.HOT_RELOAD
    mode: ResolutionMode = "heuristic"

    datadog_api_key: Optional[str] = None
    datadog_app_key: Optional[str] = None
    datadog_api_url: str = constants.DATADOG_API_URL
    backend_timeout: float = Field(default=constants.BACKEND_TIMEOUT, gt=0)

    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    llm_model: str = constants.LLM_MODEL_NAME
    llm_temperature: float = constants.LLM_TEMPERATURE
    translator_timeout: float = Field(default=constants.TRANSLATOR_TIMEOUT, gt=0)

    unit: str = constants.DEFAULT_UNIT

    @classmethod
    def from_env(cls, **overrides) -> "MetricQLConfig":
        """Build a config from the environment; keyword arguments win."""
        values = {
            "mode": constants.RESOLUTION_MODE,
            "datadog_api_key": os.getenv("DD_API_KEY"),
            "datadog_app_key": os.getenv("DD_APP_KEY"),
            "openai_api_key": os.getenv("OPENAI_API_KEY"),
            "openai_base_url": os.getenv("OPENAI_BASE_URL"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def require_credentials(self, backend: bool = True) -> None:
        """
        Fail fast when a credential needed for the configured mode is missing.

        Args:
            backend: Also require the Datadog keys (False for compile-only runs)

        Raises:
            ConfigError: cause "missing-credential"
        """
        missing = []
        if backend:
            if not self.datadog_api_key:
                missing.append("DD_API_KEY")
            if not self.datadog_app_key:
                missing.append("DD_APP_KEY")
        if self.mode == "llm" and not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if missing:
            raise ConfigError(
                f"missing required credentials: {', '.join(missing)}",
                cause="missing-credential",
            )
