import os

# Must be set before the application modules are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["SEED_SAMPLE_DATA"] = "false"
os.environ["DEMO_PASSWORD"] = "mworx123"

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from supplies_inventory import models
from supplies_inventory.database import Base, SessionLocal, engine
from supplies_inventory.main import app

DEMO_PASSWORD = "mworx123"
ADMIN_EMAIL = "admin@mworx.com"
MANAGER_EMAIL = "manager@mworx.com"


def make_item(**overrides):
    """Build a detached InventoryItem row for pure-function tests."""
    fields = {
        "id": "item-1",
        "product_id": "MWX-001",
        "name": "A4 Premium Paper",
        "category": "Paper",
        "quantity": 250,
        "unit_price": Decimal("12.99"),
        "reorder_point": 50,
        "supplier": "Paper Plus Suppliers",
        "last_updated": datetime(2024, 1, 1),
        "created_at": datetime(2024, 1, 1),
        "updated_by": ADMIN_EMAIL,
    }
    fields.update(overrides)
    return models.InventoryItem(**fields)


def item_payload(**overrides):
    payload = {
        "product_id": "MWX-100",
        "name": "Cyan Ink",
        "category": "Ink & Toners",
        "quantity": 40,
        "unit_price": "24.50",
        "reorder_point": 20,
        "supplier": "Ink Solutions Ltd",
        "location": "Storage B-1",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db):
    with TestClient(app) as test_client:
        yield test_client


def login(client, email, password=DEMO_PASSWORD):
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def admin_headers(client):
    return login(client, ADMIN_EMAIL)


@pytest.fixture()
def manager_headers(client):
    return login(client, MANAGER_EMAIL)
