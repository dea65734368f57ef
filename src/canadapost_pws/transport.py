"""httpx-backed transport."""

from __future__ import annotations

import logging
from collections.abc import Mapping

import httpx

from canadapost_pws.exceptions import TransportFailure

logger = logging.getLogger(__name__)


class HttpxTransport:
    """Transport built on ``httpx.AsyncClient``.

    Implements the Transport protocol. Pass ``client`` to share a
    connection pool; otherwise one is created and closed by ``aclose``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = 30.0,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def send(
        self,
        method: str,
        url: str,
        *,
        content: bytes | None = None,
        headers: Mapping[str, str],
    ) -> tuple[int, bytes]:
        try:
            response = await self._client.request(
                method, url, content=content, headers=dict(headers)
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise TransportFailure(f"{method} {url} failed: {exc}") from exc
        return response.status_code, response.content

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
