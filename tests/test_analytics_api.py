# tests/test_analytics_api.py

def _seed(client, items):
    for barcode, category in items:
        client.post("/products", json={"barcode": barcode, "name": f"p{barcode}", "category": category})

def test_counts_and_recent_scenario(client):
    _seed(client, [("111", "A"), ("222", "A"), ("333", "B")])
    body = client.get("/analytics").json()

    counts = {c["category"]: c["count"] for c in body["categoryCounts"]}
    assert counts == {"A": 2, "B": 1}
    assert [p["barcode"] for p in body["recentProducts"]] == ["333", "222", "111"]

def test_recent_is_capped_and_counts_sum_to_total(client):
    _seed(client, [(str(i), "A" if i % 3 else "B") for i in range(1, 9)])
    client.get("/products/999")  # created by lookup -> Uncategorized
    body = client.get("/analytics").json()

    assert sum(c["count"] for c in body["categoryCounts"]) == 9
    assert {c["category"]: c["count"] for c in body["categoryCounts"]} == {"A": 6, "B": 2, "Uncategorized": 1}
    assert [p["barcode"] for p in body["recentProducts"]] == ["999", "8", "7", "6", "5"]

def test_empty_store(client):
    assert client.get("/analytics").json() == {"categoryCounts": [], "recentProducts": []}
