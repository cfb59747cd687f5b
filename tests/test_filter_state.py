import pytest
from pydantic import ValidationError

from catalog.schemas.filters import (
    DEFAULT_PER_PAGE,
    CourseFilterState,
    Nivel,
    ProductFilterState,
    Sort,
)


def test_numeric_clamping():
    state = ProductFilterState(min_price=-5, page=0, per_page=500)

    assert state.min_price is None
    assert state.page == 1
    assert state.per_page == 100


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12.9", 12),
        (" 30 ", 30),
        (7.5, 7),
        ("0", 0),
        ("-0.5", None),
        ("abc", None),
        ("", None),
        ("inf", None),
        ("nan", None),
        (None, None),
        ([1], None),
    ],
)
def test_price_bounds_are_floored_or_dropped(raw, expected):
    state = ProductFilterState(min_price=raw, max_price=raw)
    assert state.min_price == expected
    assert state.max_price == expected


def test_price_order_is_not_enforced():
    state = ProductFilterState(min_price="900", max_price="100")
    assert (state.min_price, state.max_price) == (900, 100)


@pytest.mark.parametrize(
    "raw, expected",
    [("2.7", 2), ("-3", 1), ("x", 1), (None, 1), (12, 12)],
)
def test_page_parsing(raw, expected):
    assert ProductFilterState(page=raw).page == expected


@pytest.mark.parametrize(
    "raw, expected",
    [("0", 1), ("50", 50), ("abc", DEFAULT_PER_PAGE), (100.9, 100)],
)
def test_per_page_parsing(raw, expected):
    assert ProductFilterState(per_page=raw).per_page == expected


def test_sort_default_and_unknown_values_are_absent():
    assert ProductFilterState(sort="relevancia").sort is None
    assert ProductFilterState(sort="bogus").sort is None
    assert ProductFilterState(sort=Sort.RELEVANCIA).sort is None
    assert ProductFilterState(sort=" precio_asc ").sort is Sort.PRECIO_ASC
    assert ProductFilterState(sort=Sort.RATING_DESC).sort is Sort.RATING_DESC
    assert ProductFilterState().effective_sort is Sort.RELEVANCIA


def test_nivel_accepts_slug_or_enum_and_rejects_unknown():
    assert CourseFilterState(nivel="basico").nivel is Nivel.BASICO
    assert CourseFilterState(nivel="Avanzado").nivel is Nivel.AVANZADO
    assert CourseFilterState(nivel=Nivel.INTERMEDIO).nivel is Nivel.INTERMEDIO
    assert CourseFilterState(nivel="experto").nivel is None
    assert Nivel.INTERMEDIO.slug == "intermedio"


def test_string_facets_are_trimmed_and_blank_is_absent():
    state = ProductFilterState(q="  hola  ", categoria="  ", marca=" acme ")

    assert state.q == "hola"
    assert state.categoria is None
    assert state.marca == "acme"
    assert ProductFilterState(q=None).q == ""


def test_untrusted_input_never_raises():
    state = ProductFilterState.model_validate(
        {"page": object(), "min_price": {"a": 1}, "categoria": 5, "sort": 3, "per_page": "many"}
    )

    assert state.page == 1
    assert state.min_price is None
    assert state.categoria == "5"
    assert state.sort is None
    assert state.per_page == DEFAULT_PER_PAGE


def test_replace_revalidates_and_keeps_type():
    state = CourseFilterState(nivel="basico", tag="cejas", page=4)
    changed = state.replace(page="-4", tag="  ")

    assert isinstance(changed, CourseFilterState)
    assert changed.page == 1
    assert changed.tag is None
    assert changed.nivel is Nivel.BASICO
    assert state.page == 4


def test_state_is_immutable_and_compared_by_value():
    a = ProductFilterState(categoria="serum", page=2)
    b = ProductFilterState(categoria=" serum ", page="2")

    assert a == b
    with pytest.raises(ValidationError):
        a.page = 3


def test_taxonomy_and_secondary_accessors():
    product = ProductFilterState(categoria="serum", marca="acme")
    course = CourseFilterState(nivel="avanzado", tag="ojos")

    assert (product.taxonomy, product.secondary) == ("serum", "acme")
    assert (course.taxonomy, course.secondary) == (Nivel.AVANZADO, "ojos")


def test_active_filter_count_ignores_sort_and_page():
    state = ProductFilterState(
        categoria="serum", min_price=10, q="crema", sort="novedades", page=3
    )
    assert state.active_filter_count() == 3
    assert ProductFilterState().active_filter_count() == 0
