"""Cache key builders for consistent namespacing."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..schemas.airports import AirportSearchQuery

# Every key this service writes falls under one of these patterns.
CACHE_NAMESPACES = ("airport:*", "airports:*", "main-airport:*")


def airport_key(airport_id: int) -> str:
    """Build cache key for a lookup by numeric id."""
    return f"airport:{airport_id}"


def airport_iata_key(code: str) -> str:
    return f"airport:iata:{code.upper()}"


def airport_icao_key(code: str) -> str:
    return f"airport:icao:{code.upper()}"


def canonical_query(query: AirportSearchQuery) -> str:
    """Serialise a search query with sorted keys and absent filters omitted."""
    return json.dumps(
        query.model_dump(exclude_none=True),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def search_key(query: AirportSearchQuery) -> str:
    """Build cache key for structured airport search."""
    return f"airports:search:{canonical_query(query)}"


def country_key(country: str, limit: int, offset: int) -> str:
    """Build cache key for a country listing page."""
    return f"airports:country:{country}:{limit}:{offset}"


def stats_key() -> str:
    return "airports:stats"


def main_airport_key(city: str) -> str:
    """Build cache key for the main airport of a city."""
    return f"main-airport:city:{city.lower()}"
