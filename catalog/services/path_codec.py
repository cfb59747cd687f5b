"""
Canonical path <-> FilterState codec.

Building is order-significant (taxonomy, secondary facet, sort, page), parsing
is order-tolerant: any segment is recognised by its prefix wherever it
appears, and unknown segments are ignored so older links keep resolving.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, quote, unquote, urlencode, urlsplit

from catalog.schemas.filters import FilterState
from catalog.services.domains import PAGE_PREFIX, SORT_PREFIX, CatalogDomain


def _encode(value: str) -> str:
    return quote(value, safe="")


def split_segment(segment: str) -> Optional[Tuple[str, str]]:
    """Split `"categoria-cuidado-facial"` into `("categoria", "cuidado-facial")`."""
    idx = segment.find("-")
    if idx <= 0:
        return None
    value = unquote(segment[idx + 1 :])
    if not value.strip():
        return None
    return segment[:idx], value


def _segment_values(segments: Optional[Iterable[str]]) -> Dict[str, str]:
    found: Dict[str, str] = {}
    for segment in segments or []:
        if not segment:
            continue
        pair = split_segment(segment)
        if pair is None:
            continue
        key, value = pair
        # First occurrence of a prefix wins.
        found.setdefault(key, value)
    return found


def path_segments(domain: CatalogDomain, path: str) -> List[str]:
    """Segments after the domain's base path, still percent-encoded."""
    rest = path
    if rest == domain.base_path or rest.startswith(domain.base_path + "/"):
        rest = rest[len(domain.base_path) :]
    return [segment for segment in rest.split("/") if segment]


def parse_segments(
    domain: CatalogDomain,
    segments: Optional[Iterable[str]],
    query: Optional[Mapping[str, str]] = None,
    per_page: Optional[int] = None,
) -> FilterState:
    kv = _segment_values(segments)
    query = query or {}
    return domain.new_state(
        **{
            domain.taxonomy_field: kv.get(domain.taxonomy_prefix),
            domain.secondary_field: kv.get(domain.secondary_prefix),
            "sort": kv.get(SORT_PREFIX),
            "page": kv.get(PAGE_PREFIX),
            "q": query.get("q"),
            "min_price": query.get("minPrice"),
            "max_price": query.get("maxPrice"),
            "per_page": per_page or domain.per_page,
        }
    )


def parse_url(
    domain: CatalogDomain, url: str, per_page: Optional[int] = None
) -> FilterState:
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query))
    return parse_segments(domain, path_segments(domain, parts.path), query, per_page)


def query_params(state: FilterState) -> List[Tuple[str, str]]:
    """The value-type parameters that stay in the query string."""
    params: List[Tuple[str, str]] = []
    if state.q:
        params.append(("q", state.q))
    if state.min_price is not None:
        params.append(("minPrice", str(state.min_price)))
    if state.max_price is not None:
        params.append(("maxPrice", str(state.max_price)))
    return params


def build_path(domain: CatalogDomain, state: FilterState) -> str:
    segments: List[str] = []
    if state.taxonomy is not None:
        segments.append(
            f"{domain.taxonomy_prefix}-{_encode(domain.encode_taxonomy(state.taxonomy))}"
        )
    if state.secondary is not None:
        segments.append(f"{domain.secondary_prefix}-{_encode(state.secondary)}")
    if state.sort is not None:
        segments.append(f"{SORT_PREFIX}-{state.sort.value}")
    if state.page > 1:
        segments.append(f"{PAGE_PREFIX}-{state.page}")

    path = domain.base_path
    if segments:
        path = f"{path}/{'/'.join(segments)}"

    params = query_params(state)
    return f"{path}?{urlencode(params)}" if params else path


def build_path_reset_page(domain: CatalogDomain, state: FilterState) -> str:
    """Build for a filter change: pagination always starts over."""
    return build_path(domain, state.replace(page=1))
