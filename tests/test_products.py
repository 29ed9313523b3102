from repositories import products
from seed import DEFAULT_PRODUCTS, seed_admin, seed_products

NEW_PRODUCT = {
    "title": "Copper Kalash",
    "description": "Sacred copper kalash",
    "image": "/uploads/products/kalash.jpg",
    "price": 1200,
    "stock": 25,
    "category": "kalash",
}


def test_public_listing_hides_inactive(make_product):
    make_product("Visible")
    make_product("Hidden", is_active=False)

    titles = [p["title"] for p in products.find_all()]
    assert titles == ["Visible"]
    assert len(products.find_all_for_admin()) == 2


def test_listing_filters(make_product):
    make_product("Brass Diya", category="diya", featured=True)
    make_product("Clay Diya", category="diya")
    make_product("Incense", category="incense", description="Sandal FRAGRANCE sticks")

    assert {p["title"] for p in products.find_all(category="diya")} == {"Brass Diya", "Clay Diya"}
    assert [p["title"] for p in products.find_all(featured=True)] == ["Brass Diya"]
    assert {p["title"] for p in products.find_all(search="diya")} == {"Brass Diya", "Clay Diya"}
    assert [p["title"] for p in products.find_all(search="fragrance")] == ["Incense"]
    assert products.find_all(category="diya", search="clay")[0]["title"] == "Clay Diya"


def test_search_is_literal(make_product):
    make_product("Diya (large)")
    make_product("Diya large")
    assert [p["title"] for p in products.find_all(search="(large)")] == ["Diya (large)"]


def test_products_endpoints(client, admin_headers):
    resp = client.post("/api/products", json=NEW_PRODUCT)
    assert resp.status_code == 401

    resp = client.post("/api/products", json=NEW_PRODUCT, headers=admin_headers)
    assert resp.status_code == 201
    product = resp.json()["product"]
    assert product["isActive"] is True
    assert product["featured"] is False

    resp = client.get("/api/products")
    assert resp.json()["count"] == 1

    resp = client.put(f"/api/products/{product['id']}", json={"isActive": False, "price": 1500}, headers=admin_headers)
    assert resp.json()["product"]["price"] == 1500
    assert client.get("/api/products").json()["count"] == 0
    assert client.get("/api/products/admin", headers=admin_headers).json()["count"] == 1

    resp = client.get(f"/api/products/{product['id']}")
    assert resp.json()["product"]["title"] == "Copper Kalash"

    resp = client.delete(f"/api/products/{product['id']}", headers=admin_headers)
    assert resp.json()["message"] == "Product deleted successfully"
    assert client.get(f"/api/products/{product['id']}").status_code == 404


def test_featured_query_param(client, make_product):
    make_product("Featured", featured=True)
    make_product("Plain")
    resp = client.get("/api/products", params={"featured": "true"})
    assert [p["title"] for p in resp.json()["products"]] == ["Featured"]
    assert client.get("/api/products", params={"featured": "false"}).json()["count"] == 2


def test_create_product_validation(client, admin_headers):
    resp = client.post("/api/products", json={**NEW_PRODUCT, "price": -1}, headers=admin_headers)
    assert resp.status_code == 400


def test_unknown_or_malformed_ids_are_404(client, admin_headers):
    assert client.get("/api/products/not-an-id").status_code == 404
    resp = client.put("/api/products/652f0c2b9d1e8a00ffffffff", json={"price": 1}, headers=admin_headers)
    assert resp.status_code == 404


def test_seed_is_idempotent(db):
    assert seed_admin() is True
    assert seed_admin() is False
    assert seed_products() == len(DEFAULT_PRODUCTS)
    assert seed_products() == 0
    assert db["admin"].count_documents({}) == 1


def test_update_rejects_blank_required_fields(client, admin_headers, make_product):
    product = make_product("Copper Kalash")

    for patch in ({"title": ""}, {"title": "   "}, {"image": ""}, {"description": " "}):
        resp = client.put(f"/api/products/{product['id']}", json=patch, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    stored = products.find_by_id(product["id"])
    assert stored["title"] == "Copper Kalash"
    assert stored["image"] == product["image"]


def test_create_rejects_whitespace_title_and_trims(client, admin_headers, db):
    resp = client.post("/api/products", json={**NEW_PRODUCT, "title": "   "}, headers=admin_headers)
    assert resp.status_code == 400
    assert db["product"].count_documents({}) == 0

    resp = client.post("/api/products", json={**NEW_PRODUCT, "title": "  Copper Kalash  "}, headers=admin_headers)
    assert resp.json()["product"]["title"] == "Copper Kalash"
