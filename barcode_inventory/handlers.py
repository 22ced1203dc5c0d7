from typing import Optional, List, Tuple

from .core import (
    UNCATEGORIZED, RECENT_LIMIT, ProductIn, ProductOut, CategoryIn, CategoryOut,
    CategoryUpdate, CategoryMove, CategoryCount, AnalyticsOut,
    _make_product_dict, _product_from_upstream,
)
from .database import DuplicateKey, LockRegistry
from .errors import CategoryReserved, ProductExists, ProductNotFound, ValidationFailed
from .logging import get_logger
from .models import category_out, product_out
from .upstream import ProductDataSource

# This file contains the core logic for all API endpoints.

log = get_logger("barcode_inventory.handlers")

# Product endpoints
async def list_products_logic(store, category: Optional[str] = None) -> List[ProductOut]:
    return [product_out(d) for d in await store.find_products(category)]

async def create_product_logic(store, payload: ProductIn) -> ProductOut:
    try:
        doc = await store.insert_product(_make_product_dict(payload))
    except DuplicateKey:
        raise ProductExists(payload.barcode)
    log.info(f"Created product {payload.barcode} in '{doc['category']}'")
    return product_out(doc)

async def lookup_product_logic(store, source: ProductDataSource, locks: LockRegistry,
                               barcode: str) -> Tuple[ProductOut, bool]:
    """Find-or-create by barcode. Returns the record and whether it was created."""
    barcode = barcode.strip()
    if not barcode:
        raise ValidationFailed("barcode must not be empty")
    existing = await store.get_product(barcode)
    if existing is not None:
        return product_out(existing), False

    async with locks.hold(f"product:{barcode}"):
        # another request may have created it while we waited
        existing = await store.get_product(barcode)
        if existing is not None:
            return product_out(existing), False

        data = await source.fetch(barcode)
        try:
            doc = await store.insert_product(_product_from_upstream(barcode, data))
        except DuplicateKey:
            # lost the race against another process; theirs is the record
            winner = await store.get_product(barcode)
            if winner is None:
                raise
            return product_out(winner), False

    log.info(f"Registered scanned product {barcode} as '{doc['name']}'")
    return product_out(doc), True

async def update_category_logic(store, barcode: str, payload: CategoryUpdate) -> CategoryMove:
    if not await store.set_category(barcode, payload.category):
        raise ProductNotFound(barcode)
    log.info(f"Moved product {barcode} to '{payload.category}'")
    return CategoryMove(barcode=barcode, category=payload.category)

# Category endpoints
async def list_categories_logic(store) -> List[CategoryOut]:
    return [category_out(d) for d in await store.list_categories()]

async def create_category_logic(store, payload: CategoryIn) -> Tuple[CategoryOut, bool]:
    if payload.name == UNCATEGORIZED:
        raise CategoryReserved(f"'{UNCATEGORIZED}' is built in and cannot be created")
    existing = await store.get_category(payload.name)
    if existing is not None:
        return category_out(existing), False
    try:
        doc = await store.insert_category(payload.name)
    except DuplicateKey:
        return category_out(await store.get_category(payload.name)), False
    log.info(f"Created category '{payload.name}'")
    return category_out(doc), True

# Analytics
async def analytics_logic(store) -> AnalyticsOut:
    counts = await store.category_counts()
    recent = await store.recent_products(RECENT_LIMIT)
    return AnalyticsOut(
        categoryCounts=[CategoryCount(category=c["category"], count=c["count"]) for c in counts],
        recentProducts=[product_out(d) for d in recent],
    )
