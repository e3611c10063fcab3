"""Distill endpoints: fetch a page by URL, or post its HTML."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from annotate_text.model_registry import ModelRegistry
from distill_api.dependencies import get_registry, request_deadline
from distill_api.schemas import ErrorResponse
from distill_page.config import Config, get_config
from distill_page.distill_page import run
from extract_content.fetch_page import declared_charset
from extract_content.models import RawDocument

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/distill",
    tags=["distill"],
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)


@router.get("")
def distill_url(
    url: Annotated[str, Query(description="URL of the page to distill")],
    registry: Annotated[ModelRegistry, Depends(get_registry)],
    config: Annotated[Config, Depends(get_config)],
) -> JSONResponse:
    """Fetch a page and return its title, content and named entities."""
    logger.info("GET /distill url=%s", url)
    record = run(url, registry, config, deadline=request_deadline(config))
    return JSONResponse(record.to_dict())


@router.post("")
async def distill_html(
    request: Request,
    registry: Annotated[ModelRegistry, Depends(get_registry)],
    config: Annotated[Config, Depends(get_config)],
) -> JSONResponse:
    """Distill the HTML sent as the request body.

    The encoding comes from the Content-Type charset when present and is
    sniffed from the markup otherwise.
    """
    body = await request.body()
    logger.info("POST %s (%d bytes)", request.url.path, len(body))

    raw = RawDocument(content=body, encoding=declared_charset(request.headers.get("content-type")))
    record = await run_in_threadpool(run, raw, registry, config, request_deadline(config))
    return JSONResponse(record.to_dict())
