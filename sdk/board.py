# sdk/board.py
from typing import Any, Dict, List, Optional

from .inventory_client import InventoryAPIError, InventoryClient
from .views import ViewState

UNCATEGORIZED = "Uncategorized"

Product = Dict[str, Any]


class BoardState(ViewState):
    """Kanban board: products grouped into category columns.

    Lists are the server's; they are only changed from confirmed responses.
    """

    def __init__(self, client: InventoryClient):
        super().__init__()
        self.client = client
        self.categories: List[str] = [UNCATEGORIZED]
        self.products: List[Product] = []

    # ---------------------------
    # Fetching
    # ---------------------------
    def load(self) -> None:
        self.refresh_products()
        self.refresh_categories()

    def refresh_products(self) -> bool:
        seq = self.sequencer.begin("products")
        try:
            products = self.client.list_products()
        except InventoryAPIError as e:
            self._fail("Failed to fetch products.", e)
            return False
        return self.apply_products(seq, products)

    def apply_products(self, seq: int, products: List[Product]) -> bool:
        if not self.sequencer.accept("products", seq):
            return False
        self.products = list(products)
        return True

    def refresh_categories(self) -> bool:
        seq = self.sequencer.begin("categories")
        try:
            categories = self.client.list_categories()
        except InventoryAPIError as e:
            self._fail("Failed to fetch categories.", e)
            return False
        return self.apply_categories(seq, categories)

    def apply_categories(self, seq: int, categories: List[Dict[str, Any]]) -> bool:
        if not self.sequencer.accept("categories", seq):
            return False
        names = [c["name"] for c in categories if c.get("name") and c["name"] != UNCATEGORIZED]
        self.categories = [UNCATEGORIZED] + names
        return True

    # ---------------------------
    # Mutations
    # ---------------------------
    def on_drag_end(self, barcode: str, source: Optional[str], destination: Optional[str]) -> bool:
        """Handle a drop of ``barcode`` from column ``source`` onto ``destination``.

        Returns True when an update request was issued and confirmed.
        """
        if destination is None or destination not in self.categories:
            return False
        if source == destination:
            return False
        if self.find(barcode) is None:
            return False
        try:
            self.client.move_product(barcode, destination)
        except InventoryAPIError as e:
            self._fail(f"Failed to move product {barcode}: {e.message}", e)
            return False
        self.refresh_products()
        return True

    def add_category(self, name: str) -> bool:
        name = (name or "").strip()
        if not name:
            self.error = "Category name cannot be empty."
            return False
        if name in self.categories:
            self.error = f"Category '{name}' already exists."
            return False
        try:
            created = self.client.create_category(name)
        except InventoryAPIError as e:
            self._fail(f"Failed to add category: {e.message}", e)
            return False
        confirmed = created.get("name", name)
        if confirmed not in self.categories:
            self.categories.append(confirmed)
        self.error = None
        return True

    def add_scanned(self, product: Product) -> None:
        for i, p in enumerate(self.products):
            if p["barcode"] == product["barcode"]:
                self.products[i] = product
                return
        self.products.append(product)

    # ---------------------------
    # Display helpers
    # ---------------------------
    def find(self, barcode: str) -> Optional[Product]:
        for p in self.products:
            if p["barcode"] == barcode:
                return p
        return None

    def visible_products(self, search: str = "") -> List[Product]:
        term = search.lower()
        return [p for p in self.products if term in (p.get("name") or "").lower()]

    def columns(self, search: str = "") -> Dict[str, List[Product]]:
        cols: Dict[str, List[Product]] = {c: [] for c in self.categories}
        for p in self.visible_products(search):
            if p.get("category") in cols:
                cols[p["category"]].append(p)
        return cols
