# barcode_inventory/models.py
from typing import Any, Dict, Optional

from .core import UNCATEGORIZED, CategoryOut, ProductOut


def product_out(doc: Dict[str, Any]) -> ProductOut:
    return ProductOut(
        id=_doc_id(doc),
        barcode=doc["barcode"],
        name=doc.get("name", ""),
        description=doc.get("description", ""),
        price=float(doc.get("price") or 0),
        category=doc.get("category") or UNCATEGORIZED,
    )


def category_out(doc: Dict[str, Any]) -> CategoryOut:
    return CategoryOut(id=_doc_id(doc), name=doc["name"])


def _doc_id(doc: Dict[str, Any]) -> Optional[str]:
    raw = doc.get("_id")
    return str(raw) if raw is not None else None
