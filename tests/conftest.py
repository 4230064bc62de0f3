"""Test configuration for the MongoDB data client."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import BaseModel

from data_client_mongo import DataClientConfig, MongoConnectionManager, MongoDataClient

pytest_plugins = ["pytest_asyncio"]


# Sample model (name avoids pytest collecting it as a test class)
class Product(BaseModel):
    """Simple model for data client tests."""

    id: str | None = None
    name: str
    price: float
    category: str = "general"


@pytest.fixture
def product_model():
    """The model class the client fixtures decode into."""
    return Product


@pytest.fixture
def mock_client():
    """Create a mock MongoDB client."""
    pytest.importorskip("mongomock_motor")
    from mongomock_motor import AsyncMongoMockClient

    return AsyncMongoMockClient()


@pytest.fixture
def mongo_connection(mock_client):
    """Create a connection manager backed by mongomock."""
    connection = MongoConnectionManager(
        url="mongodb://mock:27017", database="test_db"
    )
    connection._client = mock_client
    return connection


@pytest.fixture
def products(mongo_connection):
    """Data client over the ``products`` collection, searchable by name."""
    return MongoDataClient(
        mongo_connection,
        "products",
        from_json=Product.model_validate,
        to_json=lambda p: p.model_dump(mode="python"),
        config=DataClientConfig(searchable_fields=("name",)),
    )


@pytest.fixture
def products_collection(mongo_connection):
    """Raw collection behind the ``products`` client."""
    return mongo_connection.get_collection("products")


@pytest.fixture
def mock_collection():
    """AsyncMock collection for failure injection and call inspection."""
    coll = MagicMock()
    coll.find_one = AsyncMock(return_value=None)
    coll.insert_one = AsyncMock()
    coll.find_one_and_replace = AsyncMock(return_value=None)
    coll.delete_one = AsyncMock()
    coll.count_documents = AsyncMock(return_value=0)
    return coll


@pytest.fixture
def mocked_products(mock_collection):
    """Data client whose connection hands out ``mock_collection``."""
    connection = MagicMock()
    connection.get_collection.return_value = mock_collection
    return MongoDataClient(
        connection,
        "products",
        from_json=Product.model_validate,
        to_json=lambda p: p.model_dump(mode="python"),
        config=DataClientConfig(searchable_fields=("name",)),
    )


class _AsyncDocCursor:
    """Minimal async cursor over a list of documents."""

    def __init__(self, docs):
        self._docs = list(docs)

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._docs:
            yield doc


@pytest.fixture
def async_cursor():
    """Factory building async cursors, as returned by find() and aggregate()."""
    return _AsyncDocCursor
