import os

# The Redis cache is not available in tests
os.environ.setdefault("CACHE_ENABLED", "false")

import mongomock
import pytest
from fastapi.testclient import TestClient

from catalog.main import app
from catalog.database import get_database
from catalog.services.document_service import DocumentRepository


# In-memory MongoDB replacement shared by the whole session
mongo_client = mongomock.MongoClient()

TEST_DB_NAME = "catalog_test"


@pytest.fixture(scope="function")
def db():
    """Fresh in-memory database for each test."""
    database = mongo_client[TEST_DB_NAME]

    yield database

    mongo_client.drop_database(TEST_DB_NAME)


@pytest.fixture(scope="function")
def client(db):
    """Create test client bound to the in-memory database."""

    def override_get_database():
        """Override database dependency for testing."""
        yield db

    app.dependency_overrides[get_database] = override_get_database

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def repository(db):
    """Document repository for direct store access in tests."""
    return DocumentRepository(db)


@pytest.fixture
def product_payload():
    """Factory for valid product creation payloads."""

    def make(**overrides):
        payload = {
            "name": "Home Shirt 2024",
            "category": "football",
            "subcategory": "shirt",
            "brand": "Adidas",
            "color": "Blue",
            "gender": "men",
            "team": "Boca Juniors",
            "country": "Argentina",
            "player_type": "fan",
            "price": 120.0,
            "images": ["data:image/jpeg;base64,AAAA"],
            "sizes": ["S", "M", "L"],
            "inventory": {"S": 5, "M": 10, "L": 3},
        }
        payload.update(overrides)
        return payload

    return make
