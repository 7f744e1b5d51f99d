import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

import haype.models  # noqa: F401
from haype.core.database import Base, SessionLocal, engine
from haype.main import app
from haype.models.user import UserRole
from haype.services.user_service import create_user

ADMIN_EMAIL = "admin@haype.com"
ADMIN_PASSWORD = "admin123"


def money(value) -> Decimal:
    """JSON money fields arrive as strings; compare them as Decimals."""
    return Decimal(str(value))


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    create_user(db, username="admin", email=ADMIN_EMAIL, password=ADMIN_PASSWORD, role=UserRole.administrator)
    return TestClient(app)


@pytest.fixture
def admin_headers(client):
    resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def operator_headers(client, admin_headers):
    resp = client.post(
        "/api/auth/register",
        json={"username": "op", "email": "op@example.com", "password": "secret1", "role": "Operator"},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    resp = client.post("/api/auth/login", json={"email": "op@example.com", "password": "secret1"})
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def api(client, admin_headers):
    """Small helper bound to an authenticated admin session."""

    class Api:
        def get(self, url, **kwargs):
            return client.get(url, headers=admin_headers, **kwargs)

        def post(self, url, json=None, **kwargs):
            return client.post(url, json=json, headers=admin_headers, **kwargs)

        def put(self, url, json=None):
            return client.put(url, json=json, headers=admin_headers)

        def delete(self, url):
            return client.delete(url, headers=admin_headers)

        def create(self, url, payload):
            resp = self.post(url, payload)
            assert resp.status_code == 201, resp.text
            return resp.json()

        def employee(self, name="Ali", category="driver", balance=0):
            return self.create("/api/employees", {"name": name, "category": category, "balance": balance})

        def car(self, name="Truck 1", plate="ABC-123", **extra):
            return self.create("/api/cars", {"name": name, "number_plate": plate, **extra})

        def customer(self, name="Acme", balance=0):
            return self.create("/api/customers", {"name": name, "balance": balance})

        def item(self, name="Gravel", price=10):
            return self.create("/api/items", {"name": name, "price": price})

    return Api()
