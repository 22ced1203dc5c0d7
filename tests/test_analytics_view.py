# tests/test_analytics_view.py
from sdk.analytics import AnalyticsState
from sdk.inventory_client import InventoryAPIError, InventoryClient


def test_load_and_filter_recent(client, sdk):
    for barcode, category in [("111", "Dairy"), ("222", "Dairy Free"), ("333", "Snacks")]:
        client.post("/products", json={"barcode": barcode, "name": barcode, "category": category})

    view = AnalyticsState(sdk)
    assert view.load() is True
    assert view.error is None
    assert view.total == 3
    assert [p["barcode"] for p in view.recent_products] == ["333", "222", "111"]
    assert [p["barcode"] for p in view.recent("dairy")] == ["222", "111"]
    assert [p["barcode"] for p in view.recent("")] == ["333", "222", "111"]
    assert view.recent("frozen") == []


class DownClient(InventoryClient):
    def analytics(self):
        raise InventoryAPIError(500, "INTERNAL_ERROR", "Internal server error")


def test_failure_reports_once_and_renders_empty():
    view = AnalyticsState(DownClient())
    assert view.load() is False
    assert view.error == "Failed to load analytics data."
    assert view.category_counts == []
    assert view.recent_products == []
    assert view.total == 0
