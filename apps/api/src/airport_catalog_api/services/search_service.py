"""Read-through cached airport lookups and main airport selection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..cache.cache_keys import (
    airport_iata_key,
    airport_icao_key,
    airport_key,
    country_key,
    main_airport_key,
    search_key,
    stats_key,
)
from ..cache.redis_client import cache_get, cache_set
from ..config import settings
from ..schemas.airports import (
    AirportItem,
    AirportSearchQuery,
    AirportSearchResponse,
    AirportStats,
)
from .airport_service import AirportService

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncSession

    from airport_catalog_ml.selection import MainAirportSelector

logger = logging.getLogger(__name__)


class SearchService:
    """Composes the response cache, the catalog store and the selector."""

    def __init__(self, db: AsyncSession, selector: MainAirportSelector) -> None:
        self._store = AirportService(db)
        self._selector = selector

    async def search(self, query: AirportSearchQuery) -> AirportSearchResponse:
        key = search_key(query)
        cached = await cache_get(key)
        if cached is not None:
            return AirportSearchResponse.model_validate(cached)

        airports, total = await self._store.search(query)
        response = AirportSearchResponse(
            airports=airports,
            total=total,
            limit=query.limit,
            offset=query.offset,
        )
        await cache_set(key, response.model_dump(mode="json"), settings.search_cache_ttl)
        return response

    async def search_main(self, query: AirportSearchQuery) -> AirportSearchResponse:
        """Search, then keep only the main airport of each city on the page.

        ``total`` is the number of airports kept, not the store's match count.
        """
        results = await self.search(query)
        main_airports = await self._selector.select_main(results.airports)
        return AirportSearchResponse(
            airports=main_airports,
            total=len(main_airports),
            limit=query.limit,
            offset=query.offset,
        )

    async def main_for_city(self, city: str) -> AirportItem | None:
        key = main_airport_key(city)
        cached = await cache_get(key)
        if cached is not None:
            return AirportItem.model_validate(cached)

        candidates = await self._store.find_by_city_like(
            city, limit=settings.city_candidate_limit
        )
        if not candidates:
            return None

        main_airport = await self._selector.main_for_city(city, candidates)
        if main_airport is not None:
            await cache_set(
                key,
                main_airport.model_dump(mode="json"),
                settings.main_airport_cache_ttl,
            )
        return main_airport

    async def stats(self) -> AirportStats:
        key = stats_key()
        cached = await cache_get(key)
        if cached is not None:
            return AirportStats.model_validate(cached)

        stats = AirportStats(
            total=await self._store.count_total(),
            with_iata=await self._store.count_with_iata(),
            with_icao=await self._store.count_with_icao(),
            top_countries=await self._store.top_countries(settings.top_countries_limit),
        )
        await cache_set(
            key, stats.model_dump(mode="json", by_alias=True), settings.stats_cache_ttl
        )
        return stats

    async def by_id(self, airport_id: int) -> AirportItem | None:
        return await self._cached_airport(
            airport_key(airport_id), self._store.find_by_id, airport_id
        )

    async def by_iata(self, code: str) -> AirportItem | None:
        code = code.strip().upper()
        return await self._cached_airport(
            airport_iata_key(code), self._store.find_by_iata, code
        )

    async def by_icao(self, code: str) -> AirportItem | None:
        code = code.strip().upper()
        return await self._cached_airport(
            airport_icao_key(code), self._store.find_by_icao, code
        )

    async def _cached_airport[K: (int, str)](
        self,
        key: str,
        lookup: Callable[[K], Awaitable[AirportItem | None]],
        value: K,
    ) -> AirportItem | None:
        cached = await cache_get(key)
        if cached is not None:
            return AirportItem.model_validate(cached)

        airport = await lookup(value)
        # Misses are not cached so a later import is visible immediately.
        if airport is not None:
            await cache_set(key, airport.model_dump(mode="json"), settings.airport_cache_ttl)
        return airport

    async def by_country(
        self, country: str, limit: int = 50, offset: int = 0
    ) -> AirportSearchResponse:
        key = country_key(country, limit, offset)
        cached = await cache_get(key)
        if cached is not None:
            return AirportSearchResponse.model_validate(cached)

        # The path segment is matched as given, so " " finds countries with a
        # space rather than reading as "no filter".
        query = AirportSearchQuery(limit=limit, offset=offset).model_copy(
            update={"country": country}
        )
        airports, total = await self._store.search(query)
        response = AirportSearchResponse(
            airports=airports, total=total, limit=limit, offset=offset
        )
        await cache_set(key, response.model_dump(mode="json"), settings.search_cache_ttl)
        return response
