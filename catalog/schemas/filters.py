from __future__ import annotations

import math
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100


class Sort(str, Enum):
    RELEVANCIA = "relevancia"
    NOVEDADES = "novedades"
    PRECIO_ASC = "precio_asc"
    PRECIO_DESC = "precio_desc"
    RATING_DESC = "rating_desc"

    @classmethod
    def coerce(cls, value: Any) -> Optional["Sort"]:
        """
        Map raw input to a non-default sort.

        Unknown values and the implicit default (`relevancia`) both come back
        as None, so "absent" is the only representation of the default.
        """
        if value is None:
            return None
        if isinstance(value, cls):
            sort = value
        else:
            try:
                sort = cls(str(value).strip())
            except ValueError:
                return None
        return None if sort is cls.RELEVANCIA else sort


class Nivel(str, Enum):
    BASICO = "BASICO"
    INTERMEDIO = "INTERMEDIO"
    AVANZADO = "AVANZADO"

    @property
    def slug(self) -> str:
        return self.value.lower()

    @classmethod
    def coerce(cls, value: Any) -> Optional["Nivel"]:
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


def to_number(value: Any) -> Optional[float]:
    """Lenient numeric parse; anything non-finite or unparsable is None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_floor_int(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        number = to_number(value)
    except OverflowError:
        return None
    return None if number is None else math.floor(number)


def clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class FilterState(BaseModel):
    """
    Typed, validated filter/sort/page selection for one catalog surface.

    Every field validator runs in "before" mode and degrades bad input to
    the field's "no filter" value instead of raising, so a state can be built
    straight from untrusted URL data.
    """

    model_config = ConfigDict(frozen=True)

    # Names of the single-select facets; set by each catalog's subclass.
    TAXONOMY_FIELD: ClassVar[str]
    SECONDARY_FIELD: ClassVar[str]

    q: str = Field(default="", description="Free-text search term.")
    min_price: Optional[int] = Field(default=None, ge=0)
    max_price: Optional[int] = Field(default=None, ge=0)
    sort: Optional[Sort] = Field(
        default=None, description="None means the default relevance order."
    )
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE)

    @field_validator("q", mode="before")
    @classmethod
    def _clean_q(cls, v: Any) -> str:
        return clean_text(v) or ""

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def _clean_price(cls, v: Any) -> Optional[int]:
        number = to_floor_int(v)
        if number is None or number < 0:
            return None
        return number

    @field_validator("sort", mode="before")
    @classmethod
    def _clean_sort(cls, v: Any) -> Optional[Sort]:
        return Sort.coerce(v)

    @field_validator("page", mode="before")
    @classmethod
    def _clean_page(cls, v: Any) -> int:
        number = to_floor_int(v)
        return 1 if number is None else max(1, number)

    @field_validator("per_page", mode="before")
    @classmethod
    def _clean_per_page(cls, v: Any) -> int:
        number = to_floor_int(v)
        if number is None:
            return DEFAULT_PER_PAGE
        return min(MAX_PER_PAGE, max(1, number))

    @property
    def taxonomy(self) -> Any:
        return getattr(self, self.TAXONOMY_FIELD)

    @property
    def secondary(self) -> Any:
        return getattr(self, self.SECONDARY_FIELD)

    @property
    def effective_sort(self) -> Sort:
        return self.sort or Sort.RELEVANCIA

    @property
    def has_price(self) -> bool:
        return self.min_price is not None or self.max_price is not None

    def active_filter_count(self) -> int:
        return sum(
            [
                self.taxonomy is not None,
                self.secondary is not None,
                self.min_price is not None,
                self.max_price is not None,
                bool(self.q),
            ]
        )

    def replace(self, **changes: Any) -> "FilterState":
        """Return a re-validated copy with `changes` applied."""
        data: Dict[str, Any] = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)


class ProductFilterState(FilterState):
    TAXONOMY_FIELD: ClassVar[str] = "categoria"
    SECONDARY_FIELD: ClassVar[str] = "marca"

    categoria: Optional[str] = Field(default=None, description="Category slug.")
    marca: Optional[str] = Field(default=None, description="Brand slug.")

    @field_validator("categoria", "marca", mode="before")
    @classmethod
    def _clean_facet(cls, v: Any) -> Optional[str]:
        return clean_text(v)


class CourseFilterState(FilterState):
    TAXONOMY_FIELD: ClassVar[str] = "nivel"
    SECONDARY_FIELD: ClassVar[str] = "tag"

    nivel: Optional[Nivel] = Field(default=None, description="Course level.")
    tag: Optional[str] = Field(default=None, description="Free-form course tag.")

    @field_validator("nivel", mode="before")
    @classmethod
    def _clean_nivel(cls, v: Any) -> Optional[Nivel]:
        return Nivel.coerce(v)

    @field_validator("tag", mode="before")
    @classmethod
    def _clean_tag(cls, v: Any) -> Optional[str]:
        return clean_text(v)
