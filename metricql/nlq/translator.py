"""
LLM Translator - asks a chat model to turn a prompt into a structured query.

The model sees the grounding document (projected ontology) in the system
message and the raw prompt as the user message, and is expected to answer
with a JSON object. Its answer is returned as text; parsing and validation
live in metricql.nlq.validator.
"""

from typing import Any, Optional

import openai
from openai import OpenAI

from metricql.core.config import MetricQLConfig
from metricql.core.errors import ConfigError, RequestTimeoutError, TransportError
from metricql.utils.log_utils import get_logger

logger = get_logger(__name__)


SYSTEM_PROMPT = """You are an observability expert specializing in Datadog metrics. You are acting as an assistant to help users generate metric queries based on natural language prompts.

Based on the provided system context, translate the user's question into a structured JSON object described in the metric query.

Use this format:
{
    "MetricName": "string",
    "Aggregation": "string",
    "Filters": { "tag_key": "value" },
    "TimeWindow": "1h"
}

Only use valid metrics, aggregations, and filters based on the CONTEXT.
Do not invent fields. If you are unsure, return nulls.
"""


def build_messages(grounding: str, prompt: str) -> list:
    return [
        {"role": "system", "content": f"{SYSTEM_PROMPT}\n\nCONTEXT:\n{grounding}"},
        {"role": "user", "content": prompt},
    ]


class LLMTranslator:
    """Chat-completions client bound to one model and one time budget."""

    def __init__(self, config: MetricQLConfig, client: Optional[Any] = None):
        self.model = config.llm_model
        self.temperature = config.llm_temperature
        self.timeout = config.translator_timeout
        if client is not None:
            self.client = client
            return
        if not config.openai_api_key:
            raise ConfigError("OPENAI_API_KEY is required in llm mode", cause="missing-credential")
        self.client = OpenAI(
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
            timeout=self.timeout,
            max_retries=0,
        )

    def translate(self, grounding: str, prompt: str) -> str:
        """
        Send the grounded prompt and return the model's raw answer.

        Raises:
            RequestTimeoutError: the call exceeded the translator timeout
            TransportError: any other API or network failure, or an empty answer
        """
        logger.info(f"[Translator] Translating with {self.model}: {prompt!r}")
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=build_messages(grounding, prompt),
                temperature=self.temperature,
                timeout=self.timeout,
            )
        except openai.APITimeoutError as e:
            raise RequestTimeoutError(f"translator timed out after {self.timeout:.0f}s") from e
        except openai.APIStatusError as e:
            raise TransportError(
                f"translator returned HTTP {e.status_code}",
                status_code=e.status_code,
                body=e.response.text if e.response is not None else None,
            ) from e
        except openai.APIError as e:
            raise TransportError(f"translator request failed: {e}") from e

        if not response.choices or not response.choices[0].message.content:
            raise TransportError("translator returned an empty answer")

        output = response.choices[0].message.content
        logger.info(f"[Translator] Response: {output}")
        return output
