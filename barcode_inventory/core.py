from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any

UNCATEGORIZED = "Uncategorized"
RECENT_LIMIT = 5

# This file holds the request/response schemas shared by the handlers.

class ProductIn(BaseModel):
    barcode: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""
    price: float = Field(0.0, ge=0)
    category: Optional[str] = UNCATEGORIZED

    @field_validator("barcode")
    @classmethod
    def _strip_barcode(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("barcode must not be empty")
        return v

class CategoryUpdate(BaseModel):
    category: str = Field(..., min_length=1)

class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

class ProductOut(BaseModel):
    id: Optional[str] = None
    barcode: str
    name: str
    description: str
    price: float
    category: str

class CategoryOut(BaseModel):
    id: Optional[str] = None
    name: str

class CategoryMove(BaseModel):
    barcode: str
    category: str

class CategoryCount(BaseModel):
    category: str
    count: int

class AnalyticsOut(BaseModel):
    categoryCounts: List[CategoryCount]
    recentProducts: List[ProductOut]

def _make_product_dict(p: ProductIn) -> Dict[str, Any]:
    return {
        "barcode": p.barcode,
        "name": p.name or p.barcode,
        "description": p.description,
        "price": p.price,
        "category": p.category or UNCATEGORIZED,
    }

def _product_from_upstream(barcode: str, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    data = data or {}
    return {
        "barcode": barcode,
        "name": data.get("description") or "Unknown Product",
        "description": data.get("description") or "",
        "price": float(data.get("price") or 0),
        "category": UNCATEGORIZED,
    }
