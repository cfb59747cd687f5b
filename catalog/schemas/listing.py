from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from catalog.schemas.filters import Sort
from catalog.schemas.results import Facets, PaginationMeta


class FilterChip(BaseModel):
    label: str
    href: str = Field(description="Same listing with this filter removed, page reset.")


class SortOption(BaseModel):
    value: Sort
    label: str
    href: str
    active: bool = False


class PageLink(BaseModel):
    page: int
    href: str
    active: bool = False


class ListingResponse(BaseModel):
    domain: str
    state: Dict[str, Any] = Field(description="Filters as requested in the URL.")
    effective_state: Dict[str, Any] = Field(
        description="Filters actually sent to the listing backend."
    )
    items: List[Dict[str, Any]] = Field(default_factory=list)
    facets: Facets
    meta: PaginationMeta
    applied_relaxation: Optional[str] = None

    canonical: str
    title: str
    robots: Optional[str] = None
    chips: List[FilterChip] = Field(default_factory=list)
    clear_href: Optional[str] = None
    sort_options: List[SortOption] = Field(default_factory=list)
    pages: List[PageLink] = Field(default_factory=list)
