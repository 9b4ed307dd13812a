"""Pydantic models for post submissions and API envelopes."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

HEALTH_MESSAGE = "Post API Working"
CREATED_MESSAGE = "Post Created Successfully"


class PostDTO(BaseModel):
    """Validated post submission, ready for persistence."""

    model_config = ConfigDict(frozen=True, strict=True)

    title: str
    content: str
    price: int


class PostRead(BaseModel):
    """A persisted post as returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    price: int
    created_at: datetime
    updated_at: datetime


class PostCreatedResponse(BaseModel):
    status: Literal[True] = True
    message: str = CREATED_MESSAGE
    data: PostRead


class PostApiStatus(BaseModel):
    status: Literal[True] = True
    message: str = HEALTH_MESSAGE


class ErrorEnvelope(BaseModel):
    """Body of every failed ``/posts`` response."""

    status: Literal[False] = False
    message: str
    errors: list[dict[str, str]] | None = None
    line: int | None = None
