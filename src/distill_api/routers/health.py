"""Health check endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from annotate_text.model_registry import ModelRegistry
from distill_api.dependencies import get_registry
from distill_api.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(registry: Annotated[ModelRegistry, Depends(get_registry)]):
    """Liveness check, with the spaCy models loaded so far."""
    return HealthResponse(status="ok", models=registry.loaded())
