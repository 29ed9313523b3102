import mongomock
import pytest
from fastapi.testclient import TestClient

import database
from auth import get_password_hash
from main import app
from repositories import admins, products
from schemas import Admin, Product

BILLING = {
    "firstName": "Sita",
    "lastName": "Sharma",
    "email": "sita@example.com",
    "phone": "9800000000",
    "province": "Bagmati",
    "district": "Kathmandu",
    "city": "Kathmandu",
    "streetAddress": "Durbar Marg 1",
    "zipCode": "44600",
}


@pytest.fixture(autouse=True)
def db(monkeypatch):
    mock_db = mongomock.MongoClient().storefront_test
    monkeypatch.setattr(database, "db", mock_db)
    return mock_db


@pytest.fixture
def client(db):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_product(db):
    def _make(title="Brass Diya Set", price=500, **extra):
        data = {"description": f"{title} description", "image": "/uploads/products/p.jpg", **extra}
        return products.create(Product(title=title, price=price, **data))
    return _make


@pytest.fixture
def user_token(client):
    resp = client.post("/api/auth/register", json={
        "name": "Sita Sharma",
        "email": "sita@example.com",
        "password": "secret123",
    })
    assert resp.status_code == 201
    return resp.json()["token"]


@pytest.fixture
def user_headers(user_token):
    return {"Authorization": f"Bearer {user_token}"}


@pytest.fixture
def admin_headers(client):
    admins.create(Admin(username="admin", password=get_password_hash("Admin123"), email="admin@example.com"))
    resp = client.post("/api/admin/login", json={"username": "admin", "password": "Admin123"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}
