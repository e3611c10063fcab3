"""Pydantic models for the distill API."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Failure body: the error kind and a human-readable detail."""

    error: str
    detail: str


class HealthResponse(BaseModel):
    status: str
    models: list[str]
