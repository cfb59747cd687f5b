import httpx
import pytest
from fastapi.testclient import TestClient

from catalog.main import app, get_catalog_client
from catalog.services.catalog_client import CatalogApiClient


client = TestClient(app)


PRODUCT_FACETS = {
    "categorias": [{"id": "2", "slug": "serum", "nombre": "Serum", "count": 5}],
    "marcas": [{"id": "7", "slug": "acme", "nombre": "Acme", "count": 3}],
    "price": {"min": 100, "max": 900},
}


def products_backend(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/filtros"):
        return httpx.Response(200, json=PRODUCT_FACETS)
    if "marca" in request.url.params:
        return httpx.Response(500, json={"message": "boom"})
    return httpx.Response(
        200,
        json={
            "items": [{"id": "p1", "titulo": "Serum X", "marca": "Acme"}],
            "meta": {"page": int(request.url.params.get("page", 1)), "pages": 3, "total": 20},
        },
    )


def courses_backend(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/filtros"):
        return httpx.Response(200, json={"niveles": [], "tags": []})
    return httpx.Response(
        200,
        json={
            "items": [
                {"id": "c1", "nivel": "AVANZADO", "tags": ["ojos"]},
                {"id": "c2", "nivel": "AVANZADO", "tags": ["ojos", "cejas"]},
            ],
            "meta": {"totalItems": 2},
        },
    )


def down_backend(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, text="unavailable")


def use_backend(handler):
    async def override():
        backend = CatalogApiClient(
            base_url="http://backend.test/api", transport=httpx.MockTransport(handler)
        )
        try:
            yield backend
        finally:
            await backend.aclose()

    app.dependency_overrides[get_catalog_client] = override


@pytest.fixture(autouse=True)
def clear_overrides():
    yield
    app.dependency_overrides.clear()


def test_health_endpoints():
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/health/live").status_code == 200

    ready = client.get("/health/ready")
    assert ready.status_code == 200
    assert "catalog_backend" in ready.json()["dependencies"]


def test_request_id_header():
    response = client.get("/health")
    assert response.headers.get("X-Request-ID")
    assert float(response.headers["X-Process-Time"]) >= 0


def test_product_listing_relaxes_failing_filter():
    use_backend(products_backend)

    response = client.get("/tienda/categoria-serum/marca-acme")
    data = response.json()

    assert response.status_code == 200
    assert data["domain"] == "tienda"
    assert data["applied_relaxation"] == "drop_secondary"
    assert data["items"][0]["id"] == "p1"
    assert data["canonical"] == "/tienda/categoria-serum/marca-acme"
    assert data["title"] == "Tienda · Serum · Acme"
    assert [chip["label"] for chip in data["chips"]] == ["Categoría: Serum", "Marca: Acme"]
    assert data["chips"][0]["href"] == "/tienda/marca-acme"
    assert data["clear_href"] == "/tienda"


def test_product_listing_pagination_view():
    use_backend(products_backend)

    data = client.get("/tienda/categoria-serum/pagina-2?q=crema").json()

    assert data["robots"] == "noindex,follow"
    assert data["state"]["page"] == 2
    assert [link["page"] for link in data["pages"]] == [1, 2, 3]
    assert data["pages"][0]["href"] == "/tienda/categoria-serum?q=crema"
    assert [link["active"] for link in data["pages"]] == [False, True, False]
    sort_hrefs = {option["value"]: option["href"] for option in data["sort_options"]}
    assert sort_hrefs["relevancia"] == "/tienda/categoria-serum?q=crema"
    assert sort_hrefs["precio_asc"] == "/tienda/categoria-serum/orden-precio_asc?q=crema"


def test_legacy_query_redirects_permanently():
    use_backend(down_backend)

    response = client.get("/tienda?marca=acme&sort=precio_asc", follow_redirects=False)

    assert response.status_code == 308
    assert response.headers["location"] == "/tienda/marca-acme/orden-precio_asc"


def test_legacy_pair_segments_redirect():
    response = client.get("/cursos/nivel/basico/tag/cejas", follow_redirects=False)

    assert response.status_code == 308
    assert response.headers["location"] == "/cursos/nivel-basico/tag-cejas"


def test_backend_down_still_renders_empty_listing():
    use_backend(down_backend)

    response = client.get("/tienda/categoria-serum?minPrice=10")
    data = response.json()

    assert response.status_code == 200
    assert data["items"] == []
    assert data["meta"]["page"] == 1
    assert data["meta"]["pages"] == 1
    assert data["applied_relaxation"] is None
    assert data["canonical"] == "/tienda/categoria-serum?minPrice=10"


def test_course_listing_derives_facets_from_items():
    use_backend(courses_backend)

    data = client.get("/cursos/nivel-avanzado").json()

    assert data["title"] == "Cursos · Avanzado"
    assert data["facets"]["derived_from_items"] is True
    tags = data["facets"]["dimensions"]["tags"]
    assert [(tag["id"], tag["count"]) for tag in tags] == [("ojos", 2), ("cejas", 1)]
    assert data["effective_state"]["nivel"] == "AVANZADO"


def test_encoded_slash_stays_inside_value():
    use_backend(courses_backend)

    data = client.get("/cursos/tag-a%2Fb").json()

    assert data["state"]["tag"] == "a/b"
    assert data["canonical"] == "/cursos/tag-a%2Fb"


def test_clear_link_only_with_active_filters():
    use_backend(products_backend)

    unfiltered = client.get("/tienda/orden-novedades").json()
    filtered = client.get("/tienda?q=crema").json()

    assert unfiltered["chips"] == []
    assert unfiltered["clear_href"] is None
    assert filtered["clear_href"] == "/tienda"
    assert filtered["chips"][0]["href"] == "/tienda"
