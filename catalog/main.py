from __future__ import annotations

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import RedirectResponse
from typing import AsyncIterator
import time
import uuid

from catalog.core.config import settings
from catalog.core.health_check import run_readiness_check, ReadinessResponse
from catalog.core.logger import service_logger
from catalog.schemas.listing import ListingResponse
from catalog.services.catalog_client import CatalogApiClient
from catalog.services.domains import COURSES, PRODUCTS, CatalogDomain
from catalog.services.listing import load_listing
from catalog.services.path_codec import path_segments


app = FastAPI(title="Catalog Listing Service", version="0.1.0")
from fastapi.middleware.cors import CORSMiddleware

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.perf_counter()
    request_id = str(uuid.uuid4())
    # Attach request ID to state for logging
    request.state.request_id = request_id

    response: Response = await call_next(request)

    process_time = time.perf_counter() - start_time
    service_logger.log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=process_time * 1000,
        request_id=request_id
    )
    response.headers["X-Process-Time"] = str(process_time)
    response.headers["X-Request-ID"] = request_id
    return response


async def get_catalog_client() -> AsyncIterator[CatalogApiClient]:
    """One backend client per request, closed once the response is built."""
    client = CatalogApiClient()
    try:
        yield client
    finally:
        await client.aclose()


@app.get("/health", tags=["meta"])
def health() -> dict:
    return {"status": "ok"}


@app.get("/health/live", tags=["meta"])
def health_live() -> dict:
    return {"status": "ok"}


@app.get("/health/ready", response_model=ReadinessResponse, tags=["meta"])
def health_ready() -> ReadinessResponse:
    return run_readiness_check()


def _raw_path(request: Request) -> str:
    # Segments must stay percent-encoded so an encoded "/" inside a facet
    # value is not taken for a separator.
    raw = request.scope.get("raw_path")
    if raw:
        return raw.decode("latin-1").split("?", 1)[0]
    return request.url.path


async def _listing(domain: CatalogDomain, request: Request, client: CatalogApiClient):
    outcome = await load_listing(
        client,
        domain,
        path_segments(domain, _raw_path(request)),
        dict(request.query_params),
    )
    if outcome.redirect is not None:
        return RedirectResponse(outcome.redirect, status_code=settings.REDIRECT_STATUS_CODE)
    return outcome.response


@app.get("/tienda", response_model=ListingResponse, tags=["catalog"])
@app.get("/tienda/{filters:path}", response_model=ListingResponse, tags=["catalog"])
async def tienda(request: Request, client: CatalogApiClient = Depends(get_catalog_client)):
    """Product listing; legacy URLs answer with a redirect to the canonical path."""
    return await _listing(PRODUCTS, request, client)


@app.get("/cursos", response_model=ListingResponse, tags=["catalog"])
@app.get("/cursos/{filters:path}", response_model=ListingResponse, tags=["catalog"])
async def cursos(request: Request, client: CatalogApiClient = Depends(get_catalog_client)):
    """Course listing; legacy URLs answer with a redirect to the canonical path."""
    return await _listing(COURSES, request, client)
