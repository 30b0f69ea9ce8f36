"""FastAPI dependency injection providers."""

from __future__ import annotations

import hmac
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader, APIKeyQuery

from airport_catalog_api.config import settings
from airport_catalog_db.database import get_db as _db_dependency
from airport_catalog_ml.selection import AnthropicAdvisor, MainAirportSelector

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

# Re-export the DB dependency unchanged.
get_db = _db_dependency

_header_scheme = APIKeyHeader(name="x-api-key", auto_error=False)
_query_scheme = APIKeyQuery(name="apiKey", auto_error=False)


def _check_key(provided: str | None, allowed: list[str]) -> None:
    if not provided:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key is required",
        )
    if not any(hmac.compare_digest(provided, key) for key in allowed):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )


async def require_api_key(
    header_key: Annotated[str | None, Depends(_header_scheme)],
    query_key: Annotated[str | None, Depends(_query_scheme)],
) -> str:
    """Accept ``x-api-key`` or ``?apiKey=`` matching a configured client key."""
    provided = header_key or query_key
    _check_key(provided, settings.valid_api_keys)
    return provided


async def require_admin_key(
    header_key: Annotated[str | None, Depends(_header_scheme)],
    query_key: Annotated[str | None, Depends(_query_scheme)],
) -> str:
    """Same as :func:`require_api_key` but checked against the admin keys."""
    provided = header_key or query_key
    _check_key(provided, settings.effective_admin_keys)
    return provided


@lru_cache(maxsize=1)
def get_main_airport_selector() -> MainAirportSelector:
    """Return the process-wide selector, with an LLM advisor when configured."""
    advisor = None
    if settings.anthropic_api_key:
        advisor = AnthropicAdvisor(
            settings.anthropic_api_key,
            model=settings.llm_model,
            timeout=settings.llm_timeout,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        )
    return MainAirportSelector(
        advisor,
        max_concurrency=settings.llm_max_concurrency,
        timeout=settings.llm_timeout,
    )


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient]:
    """Yield a short-lived HTTP client for upstream data fetches."""
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(settings.import_timeout),
        follow_redirects=True,
        headers={"User-Agent": "airport-catalog-import/0.1"},
    ) as client:
        yield client
