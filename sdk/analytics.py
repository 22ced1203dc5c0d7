# sdk/analytics.py
from typing import Any, Dict, List

from .inventory_client import InventoryAPIError, InventoryClient
from .views import ViewState


class AnalyticsState(ViewState):
    """Read-only summary: per-category counts and the latest additions."""

    def __init__(self, client: InventoryClient):
        super().__init__()
        self.client = client
        self.category_counts: List[Dict[str, Any]] = []
        self.recent_products: List[Dict[str, Any]] = []

    def load(self) -> bool:
        seq = self.sequencer.begin("analytics")
        try:
            data = self.client.analytics()
            counts = list(data["categoryCounts"])
            recent = list(data["recentProducts"])
        except (InventoryAPIError, KeyError, TypeError) as e:
            self._fail("Failed to load analytics data.", e)
            return False
        if not self.sequencer.accept("analytics", seq):
            return False
        self.category_counts = counts
        self.recent_products = recent
        self.error = None
        return True

    @property
    def total(self) -> int:
        return sum(c["count"] for c in self.category_counts)

    def recent(self, category_filter: str = "") -> List[Dict[str, Any]]:
        term = category_filter.lower()
        return [p for p in self.recent_products if term in (p.get("category") or "").lower()]
