"""
Base Pydantic models with camelCase / PascalCase serialization support.
"""

from pydantic import BaseModel, ConfigDict
from humps import camelize, pascalize


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    return camelize(string)


def to_pascal(string: str) -> str:
    """Convert snake_case to PascalCase."""
    return pascalize(string)


class CamelCaseModel(BaseModel):
    """
    Base model that serializes to camelCase for API responses.

    Usage:
        class MyModel(CamelCaseModel):
            my_field: str  # Serializes as "myField" in JSON
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,  # Allow both snake_case and camelCase on input
        from_attributes=True,
    )


class PascalCaseModel(BaseModel):
    """
    Base model for the translator wire format ("MetricName", "TimeWindow").

    Unknown keys are rejected so a malformed translator answer never
    slips through as a partially filled query.
    """
    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        extra="forbid",
    )
