"""Tests for the read-through caching in SearchService."""

from __future__ import annotations

from airport_catalog_api.cache import redis_client
from airport_catalog_api.cache.redis_client import cache_invalidate_all
from airport_catalog_api.schemas.airports import AirportSearchQuery
from airport_catalog_api.services.search_service import SearchService
from airport_catalog_ml.selection import MainAirportSelector


async def test_search_is_served_from_cache_until_invalidated(
    seeded, session, seed_catalog, make_airport, fake_redis
):
    service = SearchService(session, MainAirportSelector(None))
    query = AirportSearchQuery(search="london")

    first = await service.search(query)
    await seed_catalog([make_airport(9, "Gatwick", "London", "United Kingdom", "LGW")])
    second = await service.search(query)

    assert second == first
    assert [a.name for a in second.airports] == ["Heathrow"]

    await cache_invalidate_all()
    third = await service.search(query)
    assert [a.name for a in third.airports] == ["Gatwick"]


async def test_missing_entities_are_not_cached(seeded, session, fake_redis):
    service = SearchService(session, MainAirportSelector(None))

    assert await service.by_iata("xxx") is None
    assert await fake_redis.exists("airport:iata:XXX") == 0

    found = await service.by_iata("lhr")
    assert found.id == 3
    assert await fake_redis.exists("airport:iata:LHR") == 1
    assert await service.by_iata("LHR") == found


async def test_search_main_counts_filtered_airports(seeded, session, fake_redis):
    service = SearchService(session, MainAirportSelector(None))
    query = AirportSearchQuery(limit=10)

    result = await service.search_main(query)

    assert [a.name for a in result.airports] == ["Heathrow", "JFK International"]
    assert result.total == 2
    assert (result.limit, result.offset) == (10, 0)


async def test_search_main_uses_advisor_for_ties(
    seeded, session, fake_redis, stub_advisor
):
    advisor = stub_advisor(answer=1)
    service = SearchService(session, MainAirportSelector(advisor))

    result = await service.search_main(AirportSearchQuery(search="new york"))

    assert [a.name for a in result.airports] == ["LaGuardia"]
    assert advisor.calls == [["JFK International", "LaGuardia"]]


async def test_main_for_city_is_cached_by_lowercase_city(seeded, session, fake_redis):
    service = SearchService(session, MainAirportSelector(None))

    airport = await service.main_for_city("New York")

    assert airport.name == "JFK International"
    assert await fake_redis.exists("main-airport:city:new york") == 1
    assert await service.main_for_city("paris") is None
    assert await fake_redis.exists("main-airport:city:paris") == 0


async def test_stats_are_cached_with_public_field_names(seeded, session, fake_redis):
    service = SearchService(session, MainAirportSelector(None))

    stats = await service.stats()
    cached = await redis_client.cache_get("airports:stats")

    assert stats.total == 3
    assert cached["withIata"] == 3
    assert cached["topCountries"][0] == {"country": "United States", "count": 2}
    assert await service.stats() == stats


async def test_reads_survive_cache_outage(seeded, session, broken_redis):
    service = SearchService(session, MainAirportSelector(None))

    assert (await service.by_id(3)).iata == "LHR"
    assert (await service.by_country("united", limit=1)).total == 3


async def test_by_country_pages_through_store(seeded, session, fake_redis):
    service = SearchService(session, MainAirportSelector(None))

    page = await service.by_country("United States", limit=1, offset=1)

    assert page.total == 2
    assert [a.name for a in page.airports] == ["LaGuardia"]
    assert await fake_redis.exists("airports:country:United States:1:1") == 1



async def test_by_country_keeps_whitespace_only_filter(
    seeded, session, seed_catalog, seed_airports, make_airport, fake_redis
):
    await seed_catalog([*seed_airports, make_airport(4, "Orly", "Paris", "France")])
    service = SearchService(session, MainAirportSelector(None))

    page = await service.by_country(" ")

    assert page.total == 3
    assert [a.id for a in page.airports] == [3, 1, 2]
