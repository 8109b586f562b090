"""
Butterfly API — Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every fixture works on a fresh JSON document under pytest's tmp_path,
       so tests never share state or touch the configured database.

Fixture Hierarchy (all function-scoped):
    ├── seed_document: Butterflies, users and ratings used across tests
    ├── database: JSONDatabase seeded with seed_document
    ├── record_store: RecordStore over that database
    ├── butterfly_service: ButterflyService over that store
    └── test_client: HTTPX AsyncClient talking to a fresh app instance
"""

import os
import tempfile

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_PATH"] = os.path.join(
    tempfile.mkdtemp(prefix="butterfly_api_test_"), "db.json"
)
os.environ["LOG_LEVEL"] = "WARNING"

from butterfly_api.database import JSONDatabase  # noqa: E402
from butterfly_api.main import create_app  # noqa: E402
from butterfly_api.services.butterfly_service import ButterflyService  # noqa: E402
from butterfly_api.services.record_store import RecordStore  # noqa: E402


@pytest.fixture
def seed_document():
    """Three butterflies, four users and four ratings."""
    return {
        "butterflies": [
            {
                "id": "wxyz9876",
                "commonName": "test-butterfly",
                "species": "Testium butterflius",
                "article": "https://example.com/testium_butterflius",
            },
            {
                "id": "xRKSdjkBt4",
                "commonName": "Plum Judy",
                "species": "Abisara echerius",
                "article": "https://en.wikipedia.org/wiki/Abisara_echerius",
            },
            {
                "id": "DCenP4kQNQ",
                "commonName": "Mexican Bluewing",
                "species": "Myscelia ethusa",
                "article": "https://en.wikipedia.org/wiki/Myscelia_ethusa",
            },
        ],
        "users": [
            {"id": "abcd1234", "username": "test-user"},
            {"id": "cdef1234", "username": "test-user2"},
            {"id": "abcd12345", "username": "test-user3"},
            {"id": "abcd12346", "username": "test-user4"},
        ],
        "ratings": [
            {"userId": "abcd1234", "butterflyId": "wxyz9876", "rating": 5},
            {"userId": "cdef1234", "butterflyId": "xRKSdjkBt4", "rating": 4},
            {"userId": "abcd1234", "butterflyId": "xRKSdjkBt4", "rating": 4},
            {"userId": "cdef1234", "butterflyId": "wxyz9876", "rating": 3},
        ],
    }


@pytest.fixture
def database_path(tmp_path):
    return tmp_path / "db.json"


@pytest_asyncio.fixture
async def database(database_path, seed_document):
    """A JSONDatabase seeded with seed_document and persisted to tmp_path."""
    db = JSONDatabase(str(database_path))
    await db.set_state(seed_document)
    return db


@pytest.fixture
def record_store(database):
    return RecordStore(database)


@pytest.fixture
def butterfly_service(record_store):
    return ButterflyService(record_store)


@pytest_asyncio.fixture
async def test_client(database_path, seed_document):
    """
    HTTPX AsyncClient routed straight into a fresh app via ASGITransport.

    ASGITransport does not send lifespan events, so the document is seeded
    and loaded here instead of by the lifespan handler.

    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    app = create_app(database_path)
    await app.state.database.set_state(seed_document)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
