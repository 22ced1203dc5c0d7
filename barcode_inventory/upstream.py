# barcode_inventory/upstream.py
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from .errors import UpstreamUnavailable
from .logging import get_logger

log = get_logger("barcode_inventory.upstream")


class ProductDataSource:
    """Client for the external product-data service.

    ``GET {base_url}/product/{barcode}`` answers ``{"product": {...}}``; a 404
    means the service does not know the barcode either.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, barcode: str) -> Optional[Dict[str, Any]]:
        if not self.base_url:
            log.debug(f"No upstream configured; using defaults for {barcode}")
            return None
        url = f"{self.base_url}/product/{quote(barcode, safe='')}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.get(url)
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Product data source unreachable: {e}") from e

        if r.status_code == 404:
            return None
        if r.status_code >= 400:
            raise UpstreamUnavailable(f"Product data source returned HTTP {r.status_code}")
        try:
            body = r.json()
        except ValueError as e:
            raise UpstreamUnavailable("Product data source returned malformed JSON") from e
        product = body.get("product") if isinstance(body, dict) else None
        return product if isinstance(product, dict) else None
