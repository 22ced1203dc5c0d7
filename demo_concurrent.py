import asyncio

from barcode_inventory.config import get_settings
from sdk.inventory_client import InventoryAPIError, InventoryClient

async def simulate_scan(client, session_name, barcode):
    try:
        product, created = await client.lookup_product_async(barcode)
        outcome = "created" if created else "found existing"
        print(f"✅ {session_name} {outcome} {product['barcode']} ({product['name']})")
        return created
    except InventoryAPIError as e:
        print(f"❌ {session_name} lookup failed: {e.code} {e}")
        return None

async def main():
    c = InventoryClient(base_url=get_settings().API_BASE_URL)
    barcode = "9780201379624"

    # Several sessions scan the same never-seen barcode at once
    print("\n⚡ Simulating concurrent first-time scans...")
    results = await asyncio.gather(*(
        simulate_scan(c, f"session-{i}", barcode) for i in range(1, 5)
    ))
    print(f"\nrecords created: {sum(1 for r in results if r)}")

    matching = [p for p in c.list_products() if p["barcode"] == barcode]
    print(f"📦 Stored records for {barcode}: {len(matching)}")

if __name__ == "__main__":
    asyncio.run(main())
