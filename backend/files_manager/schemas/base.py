"""Pydantic base with camelCase aliases.

Python code stays snake_case; request and response JSON is camelCase,
matching the keys clients already send (parentId, isPublic, userId).
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class ErrorResponse(CamelModel):
    error: str
