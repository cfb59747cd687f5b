from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional
from urllib.parse import unquote

from catalog.schemas.filters import clean_text
from catalog.services.domains import CatalogDomain
from catalog.services.path_codec import build_path, parse_segments


LEGACY_PAGE_PARAM = "page"
LEGACY_SORT_PARAM = "sort"


def legacy_pairs(domain: CatalogDomain, segments: Iterable[str]) -> Dict[str, str]:
    """
    Read deprecated key/value segment pairs, e.g.
    `/tienda/marca/skinlab/categoria/serum` or `/cursos/nivel/basico/tag/x`.
    """
    keys = (domain.taxonomy_prefix, domain.secondary_prefix)
    segs: List[str] = list(segments)
    found: Dict[str, str] = {}
    i = 0
    while i < len(segs):
        key = segs[i]
        if key in keys and i + 1 < len(segs):
            value = clean_text(unquote(segs[i + 1]))
            if value:
                found.setdefault(key, value)
            i += 2
            continue
        i += 1
    return found


def legacy_redirect(
    domain: CatalogDomain,
    segments: Optional[Iterable[str]],
    query: Optional[Mapping[str, str]],
) -> Optional[str]:
    """
    Canonical path for a URL still using a legacy filter shape, else None.

    Legacy shapes: key/value pair segments, facet filters or `page` passed as
    query parameters, and any `sort` query parameter. Canonical pretty
    segments already present win over pair segments, which win over query
    parameters; a `sort` parameter overrides an `orden-` segment.
    """
    segs = list(segments or [])
    query = query or {}

    pairs = legacy_pairs(domain, segs)
    query_facets = {
        key: query[key]
        for key in (domain.taxonomy_prefix, domain.secondary_prefix)
        if clean_text(query.get(key))
    }
    has_page = LEGACY_PAGE_PARAM in query
    has_sort = LEGACY_SORT_PARAM in query

    if not (pairs or query_facets or has_page or has_sort):
        return None

    state = parse_segments(domain, segs, query)

    changes: Dict[str, object] = {}
    for prefix, field in (
        (domain.taxonomy_prefix, domain.taxonomy_field),
        (domain.secondary_prefix, domain.secondary_field),
    ):
        if getattr(state, field) is None:
            value = pairs.get(prefix) or query_facets.get(prefix)
            if value:
                changes[field] = value
    if has_page and state.page == 1:
        changes["page"] = query[LEGACY_PAGE_PARAM]
    if has_sort:
        changes["sort"] = query[LEGACY_SORT_PARAM]

    return build_path(domain, state.replace(**changes))
