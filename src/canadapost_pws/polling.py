"""Manifest polling with exponential backoff."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from canadapost_pws.schemas import (
    GetManifestResponse,
    TransmitShipmentsResponse,
)

if TYPE_CHECKING:
    from canadapost_pws.client import CanadaPostClient

logger = logging.getLogger(__name__)


def compute_poll_delay(
    attempt: int,
    base_seconds: float,
    max_delay: float,
) -> float:
    """Delay before the next attempt.

    delay = min(base_seconds * 2^(attempt - 1), max_delay)
    """
    return min(base_seconds * (2 ** (attempt - 1)), max_delay)


async def poll_manifest(
    client: CanadaPostClient,
    transmitted: TransmitShipmentsResponse,
    *,
    max_attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> GetManifestResponse:
    """Call ``get_manifest`` until it is ready or attempts run out.

    Defaults come from the client's config. Returns the last response,
    ready or not; carrier errors propagate unchanged.
    """
    config = client.config
    if max_attempts is None:
        max_attempts = config.poll_max_attempts
    if base_delay is None:
        base_delay = config.poll_backoff_seconds
    if max_delay is None:
        max_delay = config.poll_max_delay_seconds
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    manifest = await client.get_manifest(transmitted)
    attempt = 1
    while not manifest.ready and attempt < max_attempts:
        delay = compute_poll_delay(attempt, base_delay, max_delay)
        logger.info(
            "Manifest %s not ready, retrying in %.1fs (attempt %d/%d)",
            transmitted.manifest_url,
            delay,
            attempt,
            max_attempts,
        )
        await sleep(delay)
        manifest = await client.get_manifest(transmitted)
        attempt += 1

    if not manifest.ready:
        logger.warning(
            "Manifest %s still not ready after %d attempts",
            transmitted.manifest_url,
            attempt,
        )
    return manifest
