# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from barcode_inventory.database import InMemoryStore
from barcode_inventory.main import create_app
from sdk.inventory_client import InventoryClient


class FakeSource:
    """Stands in for the upstream product-data service."""

    def __init__(self, catalog=None, error=None):
        self.catalog = catalog or {}
        self.error = error
        self.calls = []

    async def fetch(self, barcode):
        self.calls.append(barcode)
        if self.error is not None:
            raise self.error
        return self.catalog.get(barcode)


class RecordingClient(InventoryClient):
    """SDK client that remembers every request it sends."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = []

    def _request(self, method, path, **kwargs):
        self.calls.append((method, path, kwargs.get("json")))
        return super()._request(method, path, **kwargs)


@pytest.fixture
def store():
    return InMemoryStore()

@pytest.fixture
def source():
    return FakeSource({"4006381333931": {"description": "Milk 1L", "price": 1.19}})

@pytest.fixture
def app(store, source):
    return create_app(store=store, source=source)

@pytest.fixture
def client(app):
    return TestClient(app)

@pytest.fixture
def sdk(client):
    return RecordingClient(base_url="http://testserver", session=client)
