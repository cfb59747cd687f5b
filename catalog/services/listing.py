from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional

from catalog.schemas.filters import FilterState, Sort
from catalog.schemas.listing import FilterChip, ListingResponse, PageLink, SortOption
from catalog.schemas.results import Facets, PaginationMeta, ResultPage
from catalog.services.catalog_client import CatalogApiClient
from catalog.services.domains import SORT_LABELS, CatalogDomain
from catalog.services.facet_resolver import effective_state, resolve_facets
from catalog.services.legacy_redirect import legacy_redirect
from catalog.services.path_codec import build_path, build_path_reset_page, parse_segments
from catalog.services.retrieval import fetch_facets, fetch_listing


logger = logging.getLogger(__name__)

# Page links shown on each side of the current page.
PAGE_WINDOW = 5


@dataclass
class ListingOutcome:
    redirect: Optional[str] = None
    response: Optional[ListingResponse] = None


async def load_listing(
    client: CatalogApiClient,
    domain: CatalogDomain,
    segments: Iterable[str],
    query: Mapping[str, str],
    per_page: Optional[int] = None,
) -> ListingOutcome:
    """
    Full listing flow for one request: legacy redirect check, parse,
    facets, active-filter validation, listing, facet repair, view.

    Facets and listing are fetched one after the other, not concurrently:
    the listing query is built from the state validated against the facets.
    """
    segments = list(segments)
    target = legacy_redirect(domain, segments, query)
    if target is not None:
        logger.info("Redirecting legacy %s URL to %s", domain.name, target)
        return ListingOutcome(redirect=target)

    state = parse_segments(domain, segments, query, per_page)
    server_facets = await fetch_facets(client, domain, state)
    effective = effective_state(domain, state, server_facets)
    page = await fetch_listing(client, domain, effective)
    facets = resolve_facets(domain, server_facets, page.items)

    return ListingOutcome(response=build_view(domain, state, effective, page, facets))


def _facet_label(facets: Facets, dimension: str, domain: CatalogDomain, value: Any) -> str:
    key = value.value if isinstance(value, Enum) else str(value)
    facet = facets.find(dimension, key)
    if facet is not None and facet.label and facet.label != facet.id:
        return facet.label
    return domain.label_for(value)


def _price_label(state: FilterState) -> str:
    if state.min_price is not None and state.max_price is not None:
        return f"Precio: {state.min_price}–{state.max_price}"
    if state.min_price is not None:
        return f"Precio: desde {state.min_price}"
    return f"Precio: hasta {state.max_price}"


def build_chips(domain: CatalogDomain, state: FilterState, facets: Facets) -> List[FilterChip]:
    chips: List[FilterChip] = []
    for dimension, field, label in (
        (domain.taxonomy_dimension, domain.taxonomy_field, domain.taxonomy_label),
        (domain.secondary_dimension, domain.secondary_field, domain.secondary_label),
    ):
        value = getattr(state, field)
        if value is None:
            continue
        chips.append(
            FilterChip(
                label=f"{label}: {_facet_label(facets, dimension, domain, value)}",
                href=build_path_reset_page(domain, state.replace(**{field: None})),
            )
        )
    if state.has_price:
        chips.append(
            FilterChip(
                label=_price_label(state),
                href=build_path_reset_page(
                    domain, state.replace(min_price=None, max_price=None)
                ),
            )
        )
    if state.q:
        chips.append(
            FilterChip(
                label=f"Búsqueda: “{state.q}”",
                href=build_path_reset_page(domain, state.replace(q="")),
            )
        )
    return chips


def build_title(domain: CatalogDomain, state: FilterState, facets: Facets) -> str:
    parts = [domain.title]
    if state.taxonomy is not None:
        parts.append(_facet_label(facets, domain.taxonomy_dimension, domain, state.taxonomy))
    if state.secondary is not None:
        parts.append(_facet_label(facets, domain.secondary_dimension, domain, state.secondary))
    if state.sort is not None:
        parts.append(f"Orden {SORT_LABELS[state.sort]}")
    if state.page > 1:
        parts.append(f"Página {state.page}")
    return " · ".join(parts)


def build_page_links(domain: CatalogDomain, state: FilterState, meta: PaginationMeta) -> List[PageLink]:
    if meta.pages <= 1:
        return []
    first = max(1, meta.page - PAGE_WINDOW)
    last = min(meta.pages, meta.page + PAGE_WINDOW)
    numbers = sorted({1, meta.pages, *range(first, last + 1)})
    return [
        PageLink(
            page=number,
            href=build_path(domain, state.replace(page=number)),
            active=number == meta.page,
        )
        for number in numbers
    ]


def build_view(
    domain: CatalogDomain,
    state: FilterState,
    effective: FilterState,
    page: ResultPage,
    facets: Facets,
) -> ListingResponse:
    meta = page.meta or PaginationMeta(page=state.page)

    return ListingResponse(
        domain=domain.name,
        state=state.model_dump(mode="json"),
        effective_state=effective.model_dump(mode="json"),
        items=page.items,
        facets=facets,
        meta=meta,
        applied_relaxation=page.applied_relaxation,
        canonical=build_path(domain, state),
        title=build_title(domain, state, facets),
        robots="noindex,follow" if state.page > 1 else None,
        chips=build_chips(domain, state, facets),
        clear_href=domain.base_path if state.active_filter_count() else None,
        sort_options=[
            SortOption(
                value=sort,
                label=SORT_LABELS[sort],
                href=build_path_reset_page(domain, state.replace(sort=sort)),
                active=state.effective_sort is sort,
            )
            for sort in Sort
        ],
        pages=build_page_links(domain, state, meta),
    )
