# tests/test_products_api.py
from fastapi.testclient import TestClient

from barcode_inventory.database import InMemoryStore
from barcode_inventory.errors import UpstreamUnavailable
from barcode_inventory.main import create_app

from conftest import FakeSource


def test_lookup_creates_once_then_returns_stored_record(client, store, source):
    r1 = client.get("/products/4006381333931")
    assert r1.status_code == 201
    first = r1.json()
    assert first["name"] == "Milk 1L"
    assert first["description"] == "Milk 1L"
    assert first["price"] == 1.19
    assert first["category"] == "Uncategorized"

    r2 = client.get("/products/4006381333931")
    assert r2.status_code == 200
    assert r2.json() == first
    assert len(store.products) == 1
    # a known barcode never goes upstream
    assert source.calls == ["4006381333931"]

def test_lookup_unknown_upstream_uses_defaults(client):
    r = client.get("/products/0000000000000")
    assert r.status_code == 201
    body = r.json()
    assert body["name"] == "Unknown Product"
    assert body["description"] == ""
    assert body["price"] == 0
    assert body["category"] == "Uncategorized"

def test_lookup_upstream_down_persists_nothing(store):
    app = create_app(store=store, source=FakeSource(error=UpstreamUnavailable("boom")))
    r = TestClient(app).get("/products/123")
    assert r.status_code == 502
    assert r.json()["error"]["code"] == "UPSTREAM_UNAVAILABLE"
    assert store.products == {}

def test_create_product_defaults_category(client):
    r = client.post("/products", json={"barcode": "111", "name": "Tea", "price": 2.5})
    assert r.status_code == 201
    body = r.json()
    assert body["category"] == "Uncategorized"
    assert body["barcode"] == "111"
    assert body["id"]

def test_create_product_rejects_duplicates_and_bad_input(client):
    client.post("/products", json={"barcode": "111", "name": "Tea"})
    dup = client.post("/products", json={"barcode": "111", "name": "Other"})
    assert dup.status_code == 409
    assert dup.json()["error"]["code"] == "PRODUCT_EXISTS"

    blank = client.post("/products", json={"barcode": "   ", "name": "x"})
    assert blank.status_code == 422
    assert blank.json()["error"]["code"] == "VALIDATION_ERROR"

    negative = client.post("/products", json={"barcode": "222", "price": -1})
    assert negative.status_code == 422

def test_category_filter_is_exact_and_case_sensitive(client):
    client.post("/products", json={"barcode": "1", "name": "a", "category": "Dairy"})
    client.post("/products", json={"barcode": "2", "name": "b", "category": "dairy"})
    client.post("/products", json={"barcode": "3", "name": "c", "category": "Dairy Free"})
    client.post("/products", json={"barcode": "4", "name": "d"})

    assert [p["barcode"] for p in client.get("/products", params={"category": "Dairy"}).json()] == ["1"]
    assert [p["barcode"] for p in client.get("/products", params={"category": "dairy"}).json()] == ["2"]
    assert [p["barcode"] for p in client.get("/products", params={"category": "Uncategorized"}).json()] == ["4"]
    assert client.get("/products", params={"category": "Dai"}).json() == []
    assert len(client.get("/products").json()) == 4

def test_patch_moves_only_that_product(client):
    client.post("/products", json={"barcode": "1", "name": "a", "price": 1, "category": "A"})
    client.post("/products", json={"barcode": "2", "name": "b", "price": 2, "category": "A"})
    before = {p["barcode"]: p for p in client.get("/products").json()}

    r = client.patch("/products/1", json={"category": "B"})
    assert r.status_code == 200
    assert r.json() == {"barcode": "1", "category": "B"}

    after = {p["barcode"]: p for p in client.get("/products").json()}
    assert after["2"] == before["2"]
    assert after["1"] == dict(before["1"], category="B")

def test_patch_unknown_barcode_is_not_found(client, store):
    r = client.patch("/products/111", json={"category": "B"})
    assert r.status_code == 404
    body = r.json()
    assert body["error"]["code"] == "PRODUCT_NOT_FOUND"
    assert body["error"]["status"] == 404
    assert store.products == {}

def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}

def test_lookup_blank_barcode_is_rejected(client, store, source):
    r = client.get("/products/%20%20")
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"
    assert store.products == {}
    assert source.calls == []

def test_lookup_strips_surrounding_whitespace(client, store):
    client.post("/products", json={"barcode": "42", "name": "Towel"})
    r = client.get("/products/%2042%20")
    assert r.status_code == 200
    assert r.json()["name"] == "Towel"
    assert list(store.products) == ["42"]

def test_empty_category_param_means_no_filter(client):
    client.post("/products", json={"barcode": "1", "name": "a", "category": "A"})
    client.post("/products", json={"barcode": "2", "name": "b"})
    assert len(client.get("/products", params={"category": ""}).json()) == 2

def test_framework_errors_use_the_envelope(client):
    r = client.delete("/products/1")
    assert r.status_code == 405
    assert r.json()["error"]["code"] == "HTTP_ERROR"
    assert r.json()["error"]["status"] == 405

    missing = client.get("/nowhere")
    assert missing.status_code == 404
    assert missing.json()["error"] == {"code": "HTTP_ERROR", "message": "Not Found", "status": 404}


class RacingStore(InMemoryStore):
    """Misses on reads until another writer has inserted the same barcode."""

    def __init__(self):
        super().__init__()
        self.raced = False

    async def get_product(self, barcode):
        if not self.raced:
            return None
        return await super().get_product(barcode)

    async def insert_product(self, doc):
        self.raced = True
        await super().insert_product(dict(doc, name="winner"))
        return await super().insert_product(doc)


def test_insert_conflict_returns_the_existing_record():
    store = RacingStore()
    r = TestClient(create_app(store=store, source=FakeSource())).get("/products/777")
    assert r.status_code == 200
    assert r.json()["name"] == "winner"
    assert r.json()["barcode"] == "777"
    assert list(store.products) == ["777"]
