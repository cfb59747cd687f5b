from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

import polars as pl

from catalog.schemas.filters import FilterState, clean_text
from catalog.schemas.results import Facet, Facets
from catalog.services.domains import CatalogDomain


logger = logging.getLogger(__name__)

_NAME_KEYS = ("nombre", "label", "name")
_OBJECT_KEYS = _NAME_KEYS + ("slug", "id")

_ROW_SCHEMA = {"dimension": pl.Utf8, "id": pl.Utf8, "slug": pl.Utf8, "label": pl.Utf8}


def _item_values(raw: Any) -> List[Tuple[str, Optional[str], str]]:
    """
    `(id, slug, label)` triples for one item attribute.

    Handles plain strings (`"Acme"`), objects (`{"nombre": "Acme", "slug":
    "acme"}`), lists of either, and tag maps keyed by tag name.
    """
    if raw is None:
        return []
    if isinstance(raw, list):
        values: List[Tuple[str, Optional[str], str]] = []
        for entry in raw:
            values.extend(_item_values(entry))
        return values
    if isinstance(raw, Mapping):
        if not any(key in raw for key in _OBJECT_KEYS):
            return [value for key in raw for value in _item_values(key)]
        name = next((clean_text(raw.get(key)) for key in _NAME_KEYS if clean_text(raw.get(key))), None)
        slug = clean_text(raw.get("slug"))
        ident = name or slug or clean_text(raw.get("id"))
        if not ident:
            return []
        return [(ident, slug, name or ident)]
    text = clean_text(raw.value if isinstance(raw, Enum) else raw)
    return [(text, None, text)] if text else []


def derive_facets(domain: CatalogDomain, items: Iterable[Mapping[str, Any]]) -> Facets:
    """
    Count distinct taxonomy/secondary values across the given items.

    Counts are local to these items only. Each dimension is ordered by count
    descending, ties by first appearance.
    """
    rows: List[Dict[str, Optional[str]]] = []
    for item in items:
        seen: Set[Tuple[str, str]] = set()
        for dimension, key in (
            (domain.taxonomy_dimension, domain.taxonomy_item_key),
            (domain.secondary_dimension, domain.secondary_item_key),
        ):
            for ident, slug, label in _item_values(item.get(key)):
                if (dimension, ident) in seen:
                    continue
                seen.add((dimension, ident))
                rows.append({"dimension": dimension, "id": ident, "slug": slug, "label": label})

    if not rows:
        return Facets.empty(domain.dimensions)

    counts = (
        pl.DataFrame(rows, schema=_ROW_SCHEMA)
        .group_by(["dimension", "id"], maintain_order=True)
        .agg(
            pl.len().alias("count"),
            pl.col("slug").drop_nulls().first().alias("slug"),
            pl.col("label").first().alias("label"),
        )
        .sort("count", descending=True, maintain_order=True)
    )

    dimensions: Dict[str, List[Facet]] = {name: [] for name in domain.dimensions}
    for row in counts.to_dicts():
        dimensions[row["dimension"]].append(
            Facet(id=row["id"], slug=row["slug"], label=row["label"], count=row["count"])
        )
    return Facets(dimensions=dimensions)


def resolve_facets(
    domain: CatalogDomain,
    server_facets: Facets,
    items: Iterable[Mapping[str, Any]],
) -> Facets:
    """
    Server facets when the backend returned any; otherwise facets derived
    from the current page of items.

    An all-empty server response is treated as "facets unavailable", which
    cannot be told apart from a legitimately empty facet set.
    """
    if not server_facets.all_empty():
        return server_facets

    derived = derive_facets(domain, items)
    if derived.all_empty():
        return Facets(dimensions=derived.dimensions, price=server_facets.price)

    logger.info("Server facets empty for %s; using page-local counts", domain.name)
    return Facets(
        dimensions=derived.dimensions,
        price=server_facets.price,
        derived_from_items=True,
    )


def _facet_key(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def effective_state(
    domain: CatalogDomain, state: FilterState, facets: Facets
) -> FilterState:
    """
    Drop selected taxonomy/secondary values that no facet offers.

    Only server facets are authoritative: page-local or missing facets leave
    the state untouched, and a dimension absent from the backend body never
    rejects a value.
    """
    if facets.derived_from_items or facets.all_empty():
        return state

    changes: Dict[str, Any] = {}
    for dimension, field in (
        (domain.taxonomy_dimension, domain.taxonomy_field),
        (domain.secondary_dimension, domain.secondary_field),
    ):
        value = getattr(state, field)
        if value is None or not facets.reported(dimension):
            continue
        if facets.find(dimension, _facet_key(value)) is None:
            changes[field] = None

    if not changes:
        return state
    logger.info(
        "Ignoring %s filters not offered by facets: %s",
        domain.name,
        sorted(changes),
    )
    return state.replace(**changes)
