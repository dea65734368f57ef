"""Collaborator and capability protocols."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

__all__ = [
    "CarrierResponse",
    "Transport",
]


@runtime_checkable
class Transport(Protocol):
    """Issues one HTTP exchange against the carrier.

    Implementations raise ``TransportFailure`` for network errors and
    return every HTTP status, including 4xx/5xx, to the caller.
    """

    async def send(
        self,
        method: str,
        url: str,
        *,
        content: bytes | None = None,
        headers: Mapping[str, str],
    ) -> tuple[int, bytes]:
        """Send a request. Returns ``(status_code, body)``."""
        ...


@runtime_checkable
class CarrierResponse(Protocol):
    """Fields shared by every decoded response variant."""

    kind: str
    status_code: int
    message: str
