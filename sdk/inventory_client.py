# sdk/inventory_client.py
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx
import requests


class InventoryAPIError(Exception):
    """A failed API call: non-2xx answer or a transport failure (status 0)."""

    def __init__(self, status: int, code: str, message: str):
        super().__init__(message)
        self.status = status
        self.code = code
        self.message = message

    @property
    def not_found(self) -> bool:
        return self.status == 404

    def __str__(self) -> str:
        return self.message


def _error_from_response(r) -> InventoryAPIError:
    code, message = "HTTP_ERROR", f"HTTP {r.status_code}"
    try:
        body = r.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        code = body["error"].get("code", code)
        message = body["error"].get("message", message)
    return InventoryAPIError(r.status_code, code, message)


class InventoryClient:
    """Thin client over the inventory REST API.

    ``session`` may be any requests-style session; the tests hand in a
    FastAPI ``TestClient``.
    """

    def __init__(self, base_url: str = "http://127.0.0.1:8085", timeout: int = 10,
                 session=None, async_transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.async_transport = async_transport

    def _request(self, method: str, path: str, **kwargs):
        try:
            r = self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        except (requests.RequestException, httpx.HTTPError) as e:
            raise InventoryAPIError(0, "NETWORK_ERROR", f"Could not reach the inventory service: {e}") from e
        if r.status_code >= 400:
            raise _error_from_response(r)
        return r

    # Products
    def list_products(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {}
        if category:
            params["category"] = category
        return self._request("GET", "/products", params=params).json()

    def register_product(self, barcode: str, name: str = "", description: str = "",
                         price: float = 0.0, category: Optional[str] = None) -> Dict[str, Any]:
        payload = {"barcode": barcode, "name": name, "description": description, "price": price}
        if category:
            payload["category"] = category
        return self._request("POST", "/products", json=payload).json()

    def lookup_product(self, barcode: str) -> Tuple[Dict[str, Any], bool]:
        """Find-or-create; returns (product, created)."""
        r = self._request("GET", f"/products/{quote(barcode, safe='')}")
        return r.json(), r.status_code == 201

    def move_product(self, barcode: str, category: str) -> Dict[str, Any]:
        return self._request("PATCH", f"/products/{quote(barcode, safe='')}", json={"category": category}).json()

    # Categories
    def list_categories(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/categories").json()

    def create_category(self, name: str) -> Dict[str, Any]:
        return self._request("POST", "/categories", json={"name": name}).json()

    # Analytics
    def analytics(self) -> Dict[str, Any]:
        return self._request("GET", "/analytics").json()

    # Async lookup (used for concurrent scans)
    async def lookup_product_async(self, barcode: str) -> Tuple[Dict[str, Any], bool]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.async_transport) as client:
                r = await client.get(f"{self.base_url}/products/{quote(barcode, safe='')}")
        except httpx.HTTPError as e:
            raise InventoryAPIError(0, "NETWORK_ERROR", f"Could not reach the inventory service: {e}") from e
        if r.status_code >= 400:
            raise _error_from_response(r)
        return r.json(), r.status_code == 201
