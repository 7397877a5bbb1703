"""Envelope schemas used to document responses."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Uniform response wrapper."""

    code: int = 200
    data: T | None = None
    message: str = "success"


class ErrorEnvelope(BaseModel):
    """Uniform error wrapper."""

    code: int
    message: str


class Page(BaseModel, Generic[T]):
    """Paginated list."""

    list: list[T]
    total: int
    pageNum: int
    pageSize: int
    totalPages: int
