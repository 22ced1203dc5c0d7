#!/usr/bin/env python
from barcode_inventory.config import get_settings
from sdk.analytics import AnalyticsState
from sdk.board import BoardState
from sdk.inventory_client import InventoryAPIError, InventoryClient


def main():
    c = InventoryClient(base_url=get_settings().API_BASE_URL)
    board = BoardState(c)

    # -----------------------------
    # Categories
    # -----------------------------
    print("Creating categories...")
    board.load()
    for name in ("Dairy", "Snacks"):
        if not board.add_category(name):
            print(f"  {board.error}")
    print(board.categories)

    # -----------------------------
    # Register products
    # -----------------------------
    print("\nRegistering products...")
    for barcode, name, price in (("4006381333931", "Milk 1L", 1.19), ("5000159484695", "Choc Bar", 0.89)):
        try:
            print(c.register_product(barcode, name, name, price))
        except InventoryAPIError as e:
            print(f"  {barcode}: {e} ({e.code})")

    # -----------------------------
    # Lookup (find-or-create), twice
    # -----------------------------
    print("\nLooking up an unseen barcode twice...")
    for _ in range(2):
        product, created = c.lookup_product("0012345678905")
        print("created" if created else "existing", product)

    # -----------------------------
    # Drag products onto columns
    # -----------------------------
    print("\nMoving products...")
    board.refresh_products()
    board.on_drag_end("4006381333931", "Uncategorized", "Dairy")
    board.on_drag_end("5000159484695", "Uncategorized", "Snacks")
    board.on_drag_end("5000159484695", "Snacks", "Snacks")  # no-op
    for category, products in board.columns().items():
        print(f"  {category}: {[p['barcode'] for p in products]}")

    # -----------------------------
    # Moving an unknown barcode
    # -----------------------------
    print("\nPatching an unknown barcode...")
    try:
        c.move_product("111", "Dairy")
    except InventoryAPIError as e:
        print(f"  {e.status} {e.code}: {e}")

    # -----------------------------
    # Analytics
    # -----------------------------
    print("\nAnalytics...")
    view = AnalyticsState(c)
    view.load()
    print("  counts:", view.category_counts)
    print("  recent:", [p["barcode"] for p in view.recent_products])

if __name__ == "__main__":
    main()
