# tests/test_categories_api.py

def test_create_and_list_categories(client):
    r = client.post("/categories", json={"name": "Dairy"})
    assert r.status_code == 201
    assert r.json()["name"] == "Dairy"
    client.post("/categories", json={"name": "Snacks"})

    names = [c["name"] for c in client.get("/categories").json()]
    assert names == ["Dairy", "Snacks"]

def test_duplicate_name_returns_existing(client, store):
    first = client.post("/categories", json={"name": "Dairy"}).json()
    again = client.post("/categories", json={"name": "  Dairy "})
    assert again.status_code == 200
    assert again.json() == first
    assert len(store.categories) == 1

def test_reserved_and_empty_names_rejected(client, store):
    reserved = client.post("/categories", json={"name": "Uncategorized"})
    assert reserved.status_code == 400
    assert reserved.json()["error"]["code"] == "CATEGORY_RESERVED"

    empty = client.post("/categories", json={"name": "   "})
    assert empty.status_code == 422
    assert empty.json()["error"]["code"] == "VALIDATION_ERROR"
    assert store.categories == {}
