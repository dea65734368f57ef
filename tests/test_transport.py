"""Tests for the httpx transport."""

import httpx
import pytest

from canadapost_pws.exceptions import TransportFailure
from canadapost_pws.protocols import Transport
from canadapost_pws.transport import HttpxTransport

URL = "https://ct.soa-gw.canadapost.ca/vis/track/pin/1/detail"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_satisfies_transport_protocol():
    """HttpxTransport is a Transport."""
    assert isinstance(HttpxTransport(), Transport)


async def test_send_returns_status_and_body():
    """Status and raw body are returned."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["accept"] = request.headers["Accept"]
        seen["body"] = request.content
        return httpx.Response(201, content=b"<ok/>")

    async with _client(handler) as client:
        transport = HttpxTransport(client)
        status, body = await transport.send(
            "POST",
            URL,
            content=b"<req/>",
            headers={"Accept": "application/vnd.cpc.track-v2+xml"},
        )

    assert (status, body) == (201, b"<ok/>")
    assert seen == {
        "method": "POST",
        "accept": "application/vnd.cpc.track-v2+xml",
        "body": b"<req/>",
    }


async def test_error_statuses_are_returned():
    """Error statuses are returned, not raised."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, content=b"<messages/>")

    async with _client(handler) as client:
        status, _ = await HttpxTransport(client).send("GET", URL, headers={})

    assert status == 404


async def test_network_errors_become_transport_failures():
    """httpx errors become TransportFailure."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(TransportFailure, match="connection refused"):
            await HttpxTransport(client).send("GET", URL, headers={})


async def test_shared_client_is_not_closed():
    """Injected clients are left open."""
    async with _client(lambda request: httpx.Response(200)) as client:
        transport = HttpxTransport(client)
        await transport.aclose()
        assert not client.is_closed


async def test_owned_client_is_closed():
    """Owned clients are closed."""
    async with HttpxTransport(timeout=5) as transport:
        client = transport._client
    assert client.is_closed
