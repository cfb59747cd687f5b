from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from catalog.core.config import settings
from catalog.schemas.filters import FilterState
from catalog.schemas.results import Facets, ResultPage
from catalog.services.domains import CatalogDomain


logger = logging.getLogger(__name__)


class CatalogBackendError(Exception):
    """The catalog backend answered with a non-2xx status."""

    def __init__(self, status_code: int, url: str, body: str = "") -> None:
        super().__init__(f"Catalog backend returned {status_code} for {url}")
        self.status_code = status_code
        self.url = url
        self.body = body


def _param_value(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def facet_params(domain: CatalogDomain, state: FilterState) -> Dict[str, str]:
    params: Dict[str, str] = {}
    if state.q:
        params["q"] = state.q
    if state.taxonomy is not None:
        params[domain.taxonomy_field] = _param_value(state.taxonomy)
    if state.secondary is not None:
        params[domain.secondary_field] = _param_value(state.secondary)
    if state.min_price is not None:
        params["minPrice"] = str(state.min_price)
    if state.max_price is not None:
        params["maxPrice"] = str(state.max_price)
    return params


def listing_params(domain: CatalogDomain, state: FilterState) -> Dict[str, str]:
    params = facet_params(domain, state)
    # The backend expects an explicit sort even for the default order.
    params["sort"] = state.effective_sort.value
    params["page"] = str(state.page)
    params["perPage"] = str(state.per_page)
    return params


class CatalogApiClient:
    """
    Thin async wrapper around the catalog backend's listing and facet
    endpoints. One instance per incoming request; close it with `aclose()`.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url or settings.CATALOG_API_URL
        self.timeout_seconds = timeout_seconds or settings.CATALOG_API_TIMEOUT_SECONDS
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def list_items(self, domain: CatalogDomain, state: FilterState) -> ResultPage:
        data = await self._get_json(domain.listing_endpoint, listing_params(domain, state))
        return ResultPage.from_backend(
            data, requested_page=state.page, per_page=state.per_page
        )

    async def get_facets(self, domain: CatalogDomain, state: FilterState) -> Facets:
        data = await self._get_json(domain.facets_endpoint, facet_params(domain, state))
        return Facets.from_backend(data, domain.dimensions)

    async def _get_json(self, endpoint: str, params: Dict[str, str]) -> Any:
        response = await self._client.get(endpoint, params=params)
        if not response.is_success:
            logger.debug("Catalog backend body: %s", response.text[:500])
            raise CatalogBackendError(
                response.status_code, str(response.request.url), response.text[:500]
            )
        return response.json()
