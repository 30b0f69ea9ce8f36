"""Administrative endpoints: catalog import and cache flush."""

from __future__ import annotations

import logging
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache.redis_client import CACHE_ERRORS, cache_invalidate_all
from ..dependencies import get_db, get_http_client, require_admin_key
from ..schemas.common import MessageResponse
from ..services.import_service import ImportService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin_key)],
)

DbDep = Annotated[AsyncSession, Depends(get_db)]
HttpDep = Annotated[httpx.AsyncClient, Depends(get_http_client)]


async def _flush_or_503(detail: str) -> int:
    try:
        return await cache_invalidate_all(raise_errors=True)
    except CACHE_ERRORS as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
        ) from exc


@router.post("/import-data", response_model=MessageResponse)
async def import_airports_data(db: DbDep, client: HttpDep) -> MessageResponse:
    """Rebuild the catalog from the upstream feed, then flush the cache.

    A failed import raises before the flush, so cached reads stay coherent
    with the untouched catalog. A failed flush after a good import is a 503:
    the new catalog is live but stale entries may still be served.
    """
    count = await ImportService(db, client).import_catalog()
    removed = await _flush_or_503(
        f"Imported {count} airports but the cache could not be cleared"
    )
    logger.info("Import of %d airports complete, %d cache keys cleared", count, removed)
    return MessageResponse(
        message="Airport data imported successfully and cache cleared"
    )


@router.delete("/cache", response_model=MessageResponse)
async def clear_cache() -> MessageResponse:
    await _flush_or_503("Cache could not be cleared")
    return MessageResponse(message="Cache cleared successfully")
