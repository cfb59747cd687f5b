"""
Catalog surfaces sharing the listing engine.

Each `CatalogDomain` bundles the constants one surface needs (URL prefixes,
backend endpoints, facet dimension names, page size) so the codec,
redirector, retrieval and resolver code is written once and parameterised
by domain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Type

from catalog.core.config import settings
from catalog.schemas.filters import (
    CourseFilterState,
    FilterState,
    Nivel,
    ProductFilterState,
    Sort,
)


SORT_PREFIX = "orden"
PAGE_PREFIX = "pagina"

SORT_LABELS: Dict[Sort, str] = {
    Sort.RELEVANCIA: "Relevancia",
    Sort.NOVEDADES: "Novedades",
    Sort.PRECIO_ASC: "Precio: menor a mayor",
    Sort.PRECIO_DESC: "Precio: mayor a menor",
    Sort.RATING_DESC: "Mejor valorados",
}

NIVEL_LABELS: Dict[Nivel, str] = {
    Nivel.BASICO: "Básico",
    Nivel.INTERMEDIO: "Intermedio",
    Nivel.AVANZADO: "Avanzado",
}


@dataclass(frozen=True)
class CatalogDomain:
    name: str
    base_path: str
    title: str
    state_class: Type[FilterState]
    per_page: int

    # URL segment prefixes; "categoria" yields segments like "categoria-serum".
    taxonomy_prefix: str
    secondary_prefix: str

    # Backend endpoints, relative to settings.CATALOG_API_URL.
    listing_endpoint: str
    facets_endpoint: str

    # Facet dimension names in the facets body, and the item attribute
    # each one is derived from when the backend returns no facets.
    taxonomy_dimension: str
    secondary_dimension: str
    taxonomy_item_key: str
    secondary_item_key: str

    taxonomy_label: str
    secondary_label: str
    value_labels: Dict[Any, str] = field(default_factory=dict)

    @property
    def dimensions(self) -> tuple:
        return (self.taxonomy_dimension, self.secondary_dimension)

    @property
    def taxonomy_field(self) -> str:
        return self.state_class.TAXONOMY_FIELD

    @property
    def secondary_field(self) -> str:
        return self.state_class.SECONDARY_FIELD

    def new_state(self, **values: Any) -> FilterState:
        values.setdefault("per_page", self.per_page)
        return self.state_class.model_validate(values)

    def encode_taxonomy(self, value: Any) -> str:
        return value.slug if isinstance(value, Nivel) else str(value)

    def label_for(self, value: Any) -> str:
        return self.value_labels.get(value, str(value.value if isinstance(value, Nivel) else value))


PRODUCTS = CatalogDomain(
    name="tienda",
    base_path="/tienda",
    title="Tienda",
    state_class=ProductFilterState,
    per_page=settings.PRODUCTS_PAGE_SIZE,
    taxonomy_prefix="categoria",
    secondary_prefix="marca",
    listing_endpoint="/catalog/productos",
    facets_endpoint="/catalog/productos/filtros",
    taxonomy_dimension="categorias",
    secondary_dimension="marcas",
    taxonomy_item_key="categoria",
    secondary_item_key="marca",
    taxonomy_label="Categoría",
    secondary_label="Marca",
)

COURSES = CatalogDomain(
    name="cursos",
    base_path="/cursos",
    title="Cursos",
    state_class=CourseFilterState,
    per_page=settings.COURSES_PAGE_SIZE,
    taxonomy_prefix="nivel",
    secondary_prefix="tag",
    listing_endpoint="/catalog/cursos",
    facets_endpoint="/catalog/cursos/filtros",
    taxonomy_dimension="niveles",
    secondary_dimension="tags",
    taxonomy_item_key="nivel",
    secondary_item_key="tags",
    taxonomy_label="Nivel",
    secondary_label="Tag",
    value_labels=dict(NIVEL_LABELS),
)
