# tests/test_upstream.py
import asyncio

import httpx
import pytest

from barcode_inventory.errors import UpstreamUnavailable
from barcode_inventory.upstream import ProductDataSource


def _source(handler):
    return ProductDataSource("http://upstream.test/", transport=httpx.MockTransport(handler))


def test_fetch_returns_product_payload():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json={"product": {"description": "Milk 1L", "price": 1.19}})

    data = asyncio.run(_source(handler).fetch("4006381333931"))
    assert data == {"description": "Milk 1L", "price": 1.19}
    assert seen == ["/product/4006381333931"]

def test_unknown_upstream_is_none():
    data = asyncio.run(_source(lambda request: httpx.Response(404)).fetch("1"))
    assert data is None

def test_not_configured_is_none():
    assert asyncio.run(ProductDataSource(None).fetch("1")) is None

def test_server_error_raises():
    with pytest.raises(UpstreamUnavailable):
        asyncio.run(_source(lambda request: httpx.Response(503)).fetch("1"))

def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UpstreamUnavailable):
        asyncio.run(_source(handler).fetch("1"))

def test_malformed_body_raises():
    with pytest.raises(UpstreamUnavailable):
        asyncio.run(_source(lambda request: httpx.Response(200, content=b"<html>")).fetch("1"))
