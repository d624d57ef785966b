"""
Base schema: camelCase on the wire, snake_case in Python.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RequestModel(CamelModel):
    """Request bodies reject fields they do not declare."""

    model_config = ConfigDict(extra="forbid")
