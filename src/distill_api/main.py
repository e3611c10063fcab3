"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from common.cli_helpers import setup_logging
from common.errors import DistillError
from distill_api.dependencies import get_registry
from distill_api.routers import distill, health
from distill_api.schemas import ErrorResponse
from distill_page.config import get_config

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "malformed_input": 400,
    "extraction_failed": 500,
    "source_unreachable": 502,
    "model_unavailable": 503,
    "timeout": 504,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_config()
    if config.models.preload:
        get_registry().preload(config.model_keys())
    yield


app = FastAPI(
    title="Page Distiller",
    description="Main-content extraction and named-entity recognition for web pages",
    version="1.0.0",
    lifespan=lifespan,
)

# Register routers
app.include_router(health.router)
app.include_router(distill.router)


@app.exception_handler(DistillError)
async def distill_error_handler(request: Request, exc: DistillError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    logger.warning("%s %s failed (%s): %s", request.method, request.url.path, exc.kind, exc)
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=exc.kind, detail=str(exc)).model_dump(),
    )


def main():
    """Run the API server."""
    import uvicorn

    setup_logging()
    config = get_config()
    uvicorn.run(
        "distill_api.main:app",
        host=config.server.host,
        port=config.server.port,
    )


if __name__ == "__main__":
    main()
