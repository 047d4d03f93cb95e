import mongomock
import pytest
from fastapi.testclient import TestClient

from database import INDEXES, get_db
from main import app


@pytest.fixture
def db():
    database = mongomock.MongoClient()["E_commerce_test"]
    # the in-memory store only enforces unique indexes
    for collection, keys, options in INDEXES:
        if options.get("unique"):
            database[collection].create_index(keys, **options)
    return database


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def lenient_client(db):
    """Client that returns 500 responses instead of re-raising server errors."""
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def customer_payload():
    return {
        "name": "Alice",
        "email": "alice@shop.io",
        "location": {"type": "Point", "coordinates": [-73.97, 40.77]},
        "products": [{"name": "Laptop", "quantity": 1, "price": 999.5}],
        "total": 999.5,
        "date": "2023-07-01T10:30:00Z",
    }


@pytest.fixture
def product_payload():
    return {
        "name": "Laptop",
        "description": "A light laptop",
        "price": 999.5,
        "category": "electronics",
    }
