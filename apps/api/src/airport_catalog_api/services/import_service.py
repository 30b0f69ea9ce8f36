"""Catalog import from the upstream CSV feed."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING

import httpx
from fastapi import HTTPException, status

from ..config import settings
from .airport_service import AirportService
from .openflights_parser import parse_airports

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# One import at a time per process; a second request waits its turn.
_import_lock = asyncio.Lock()

# Upstream answers worth another attempt: throttling and gateway hiccups.
_RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


class ImportService:
    """Fetches, parses and atomically installs a new airport catalog."""

    def __init__(self, db: AsyncSession, client: httpx.AsyncClient) -> None:
        self._db = db
        self._client = client

    async def import_catalog(self, url: str | None = None) -> int:
        """Replace the catalog with the feed at *url*; return the record count.

        Any failure before the swap leaves the current catalog untouched.
        """
        data_url = url or settings.airports_data_url
        async with _import_lock:
            logger.info("Starting airport data import from %s", data_url)
            text = await self._fetch(data_url)

            airports = parse_airports(text)
            if not airports:
                raise HTTPException(
                    status_code=status.HTTP_502_BAD_GATEWAY,
                    detail="Airport data feed contained no valid records",
                )

            count = await AirportService(self._db).replace_all(
                airports, batch_size=settings.import_batch_size
            )
            logger.info("Successfully imported %d airports", count)
            return count

    async def _fetch(self, url: str) -> str:
        """Fetch the feed, retrying network errors and transient upstream statuses.

        Backoff doubles from ``import_retry_delay`` (capped at 10s, with
        jitter). Anything left after the last attempt becomes a 502.
        """
        attempt = 0
        while True:
            try:
                return await self._fetch_once(url)
            except (httpx.TransportError, httpx.HTTPStatusError) as exc:
                if attempt >= settings.import_max_retries or not _is_transient(exc):
                    raise _bad_gateway(exc) from exc
                delay = min(settings.import_retry_delay * (2**attempt), 10.0)
                delay *= 0.5 + random.random()
                attempt += 1
                logger.warning(
                    "Airport data fetch attempt %d/%d failed, retrying in %.1fs: %s",
                    attempt,
                    settings.import_max_retries + 1,
                    delay,
                    exc,
                )
                await asyncio.sleep(delay)

    async def _fetch_once(self, url: str) -> str:
        resp = await self._client.get(url)
        resp.raise_for_status()
        logger.debug("Fetched %d bytes of airport data", len(resp.content))
        return resp.text


def _is_transient(exc: httpx.HTTPError) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUSES
    return True


def _bad_gateway(exc: httpx.HTTPError) -> HTTPException:
    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
        logger.error("Airport data fetch returned %d", code)
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Airport data source returned HTTP {code}",
        )
    logger.error("Airport data fetch failed: %s", exc)
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Failed to fetch airport data: {exc}",
    )
