from __future__ import annotations
from pydantic import BaseModel
from typing import Dict
from urllib.parse import urlsplit

class DependencyStatus(BaseModel):
    status: str
    details: str | None = None

class ReadinessResponse(BaseModel):
    status: str
    dependencies: Dict[str, DependencyStatus]

def check_catalog_backend() -> DependencyStatus:
    from catalog.core.config import settings
    url = settings.CATALOG_API_URL
    parts = urlsplit(url) if url else None
    if parts is None or parts.scheme not in ("http", "https") or not parts.netloc:
        return DependencyStatus(status="error", details=f"CATALOG_API_URL is not a valid http(s) URL: {url!r}")
    return DependencyStatus(
        status="ok",
        details=f"Catalog backend at {parts.netloc}, attempt timeout {settings.ATTEMPT_TIMEOUT_SECONDS}s",
    )

def run_readiness_check() -> ReadinessResponse:
    backend_status = check_catalog_backend()

    total_status = "ready"
    if backend_status.status == "error":
        total_status = "not_ready"

    return ReadinessResponse(
        status=total_status,
        dependencies={
            "catalog_backend": backend_status,
        }
    )
