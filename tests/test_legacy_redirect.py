from urllib.parse import parse_qsl, urlsplit

import pytest

from catalog.services.domains import COURSES, PRODUCTS
from catalog.services.legacy_redirect import legacy_pairs, legacy_redirect
from catalog.services.path_codec import path_segments


def test_canonical_urls_are_not_redirected():
    assert legacy_redirect(PRODUCTS, [], {}) is None
    assert legacy_redirect(PRODUCTS, ["categoria-serum", "pagina-2"], {"q": "crema"}) is None
    assert legacy_redirect(COURSES, ["nivel-basico"], {"minPrice": "10"}) is None


def test_query_facets_move_into_the_path():
    target = legacy_redirect(
        PRODUCTS, [], {"marca": "acme", "categoria": "serum", "q": "crema"}
    )
    assert target == "/tienda/categoria-serum/marca-acme?q=crema"


def test_pair_segments_are_rewritten():
    target = legacy_redirect(PRODUCTS, ["marca", "skinlab", "categoria", "serum"], {})
    assert target == "/tienda/categoria-serum/marca-skinlab"


def test_course_pair_segments_are_rewritten():
    target = legacy_redirect(COURSES, ["nivel", "Basico", "tag", "pestañas"], {})
    assert target == "/cursos/nivel-basico/tag-pesta%C3%B1as"


def test_sort_query_param_overrides_sort_segment():
    target = legacy_redirect(
        PRODUCTS, ["categoria-serum", "orden-novedades"], {"sort": "precio_asc", "minPrice": "10"}
    )
    assert target == "/tienda/categoria-serum/orden-precio_asc?minPrice=10"


def test_default_sort_param_is_dropped():
    assert legacy_redirect(PRODUCTS, ["orden-novedades"], {"sort": "relevancia"}) == "/tienda"


@pytest.mark.parametrize(
    "page, expected",
    [("3", "/tienda/pagina-3"), ("1", "/tienda"), ("abc", "/tienda")],
)
def test_page_query_param_moves_into_the_path(page, expected):
    assert legacy_redirect(PRODUCTS, [], {"page": page}) == expected


def test_page_segment_wins_over_page_param():
    assert legacy_redirect(PRODUCTS, ["pagina-4"], {"page": "9"}) == "/tienda/pagina-4"


def test_pretty_segment_wins_over_pair_and_query():
    target = legacy_redirect(PRODUCTS, ["marca-acme", "marca", "other"], {"marca": "third"})
    assert target == "/tienda/marca-acme"


def test_pair_segment_wins_over_query():
    target = legacy_redirect(PRODUCTS, ["marca", "pair"], {"marca": "query"})
    assert target == "/tienda/marca-pair"


def test_blank_query_facet_is_not_legacy():
    assert legacy_redirect(PRODUCTS, ["categoria-serum"], {"marca": "  "}) is None


def test_legacy_pairs_ignores_dangling_key():
    assert legacy_pairs(PRODUCTS, ["categoria", "serum", "marca"]) == {"categoria": "serum"}


@pytest.mark.parametrize(
    "domain, segments, query",
    [
        (PRODUCTS, ["marca", "L'Oréal"], {"page": "2", "q": "rimel"}),
        (PRODUCTS, [], {"categoria": "a/b", "sort": "rating_desc", "maxPrice": "300"}),
        (COURSES, ["tag", "cejas"], {"nivel": "avanzado", "sort": "novedades"}),
    ],
)
def test_redirect_target_is_canonical(domain, segments, query):
    target = legacy_redirect(domain, segments, query)
    parts = urlsplit(target)

    assert target is not None
    assert legacy_redirect(domain, path_segments(domain, parts.path), dict(parse_qsl(parts.query))) is None
