"""Shared Pydantic building blocks: camelCase models and the response envelope."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Model serialized with camelCase keys; accepts either case on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(BaseModel, Generic[T]):
    """Standard `{success, message, data}` envelope."""

    success: bool = True
    message: str | None = None
    data: T | None = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
