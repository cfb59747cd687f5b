from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from catalog.schemas.filters import clean_text, to_floor_int, to_number


logger = logging.getLogger(__name__)


class Facet(BaseModel):
    """One selectable value of a facet dimension with its match count."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(
        min_length=1, validation_alias=AliasChoices("id", "nivel", "tag", "value")
    )
    slug: Optional[str] = None
    label: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("label", "nombre")
    )
    count: int = Field(default=0, ge=0)

    @field_validator("id", mode="before")
    @classmethod
    def _clean_id(cls, v: Any) -> Any:
        # Empty ids are left as-is so validation rejects the entry.
        return clean_text(v) or v

    @field_validator("slug", "label", mode="before")
    @classmethod
    def _clean_optional_text(cls, v: Any) -> Optional[str]:
        return clean_text(v)

    @field_validator("count", mode="before")
    @classmethod
    def _clean_count(cls, v: Any) -> int:
        number = to_floor_int(v)
        return max(0, number) if number is not None else 0

    @model_validator(mode="after")
    def _default_label(self) -> "Facet":
        if self.label is None:
            self.label = self.id
        return self

    def matches(self, value: str) -> bool:
        wanted = value.casefold()
        return any(
            candidate is not None and candidate.casefold() == wanted
            for candidate in (self.slug, self.id)
        )


class PriceRange(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None

    @field_validator("min", "max", mode="before")
    @classmethod
    def _clean_bound(cls, v: Any) -> Optional[float]:
        return to_number(v)


def _parse_facet_list(raw: Any, dimension: str) -> List[Facet]:
    if not isinstance(raw, list):
        return []
    facets: List[Facet] = []
    for entry in raw:
        try:
            facets.append(Facet.model_validate(entry))
        except ValidationError:
            logger.debug("Skipping malformed %s facet entry: %r", dimension, entry)
    return facets


class Facets(BaseModel):
    dimensions: Dict[str, List[Facet]] = Field(default_factory=dict)
    price: Optional[PriceRange] = None
    derived_from_items: bool = Field(
        default=False,
        description="True when counts were computed from the current page only.",
    )
    missing: List[str] = Field(
        default_factory=list,
        description="Dimensions the backend body did not include at all.",
    )

    def get(self, dimension: str) -> List[Facet]:
        return self.dimensions.get(dimension, [])

    def reported(self, dimension: str) -> bool:
        return dimension in self.dimensions and dimension not in self.missing

    def all_empty(self) -> bool:
        return not any(self.dimensions.values())

    def find(self, dimension: str, value: str) -> Optional[Facet]:
        for facet in self.get(dimension):
            if facet.matches(value):
                return facet
        return None

    @classmethod
    def empty(cls, dimension_names: Sequence[str]) -> "Facets":
        return cls(dimensions={name: [] for name in dimension_names})

    @classmethod
    def from_backend(
        cls, payload: Any, dimension_names: Sequence[str]
    ) -> "Facets":
        """
        Build facets from a backend body such as
        `{"marcas": [...], "categorias": [...], "price": {"min": 0, "max": 9}}`.

        Missing or non-list dimensions become empty lists and are listed in
        `missing`; a body that is not an object raises ValueError.
        """
        if not isinstance(payload, Mapping):
            raise ValueError(f"Facets body must be an object, got {type(payload).__name__}")

        dimensions = {
            name: _parse_facet_list(payload.get(name), name) for name in dimension_names
        }
        missing = [
            name for name in dimension_names if not isinstance(payload.get(name), list)
        ]

        price = None
        raw_price = payload.get("price")
        if isinstance(raw_price, Mapping):
            price = PriceRange.model_validate(raw_price)
        elif "minPrice" in payload or "maxPrice" in payload:
            price = PriceRange(min=payload.get("minPrice"), max=payload.get("maxPrice"))

        return cls(dimensions=dimensions, price=price, missing=missing)


def _first_present(*values: Any) -> Optional[int]:
    for value in values:
        number = to_floor_int(value)
        if number is not None:
            return number
    return None


class PaginationMeta(BaseModel):
    page: int = 1
    pages: int = 1
    total: Optional[int] = None
    per_page: Optional[int] = None

    @classmethod
    def from_backend(
        cls,
        payload: Mapping[str, Any],
        default_page: int = 1,
        default_per_page: Optional[int] = None,
    ) -> "PaginationMeta":
        """
        Normalize pagination info that different endpoints report under
        different names (`page`/`currentPage`, `pages`/`totalPages`,
        `total`/`totalItems`/`itemCount`), either inside `meta` or at the
        top level of the body.
        """
        raw = payload.get("meta")
        meta: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}

        page = _first_present(meta.get("currentPage"), meta.get("page"), payload.get("page"))
        total = _first_present(
            meta.get("total"), meta.get("totalItems"), meta.get("itemCount"), payload.get("total")
        )
        per_page = _first_present(meta.get("perPage"), payload.get("perPage"), default_per_page)
        pages = _first_present(meta.get("totalPages"), meta.get("pages"))
        if pages is None and total is not None and per_page:
            pages = math.ceil(total / per_page)

        return cls(
            page=max(1, page if page is not None else default_page),
            pages=max(1, pages or 1),
            total=max(0, total) if total is not None else None,
            per_page=per_page if per_page and per_page > 0 else None,
        )


class ResultPage(BaseModel):
    items: List[Dict[str, Any]] = Field(default_factory=list)
    meta: Optional[PaginationMeta] = None
    applied_relaxation: Optional[str] = Field(
        default=None,
        description="Name of the relaxation step that produced this page, if any.",
    )

    @classmethod
    def empty(cls) -> "ResultPage":
        return cls(items=[], meta=PaginationMeta(page=1, pages=1))

    @classmethod
    def from_backend(
        cls,
        payload: Any,
        requested_page: int = 1,
        per_page: Optional[int] = None,
    ) -> "ResultPage":
        if not isinstance(payload, Mapping):
            raise ValueError(f"Listing body must be an object, got {type(payload).__name__}")
        items = payload.get("items")
        if not isinstance(items, list):
            raise ValueError("Listing body has no 'items' list")

        return cls(
            items=[item for item in items if isinstance(item, dict)],
            meta=PaginationMeta.from_backend(
                payload, default_page=requested_page, default_per_page=per_page
            ),
        )
