"""Shared fixtures: temporary SQLite catalog, fake Redis and an ASGI client."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest
import redis.asyncio as redis
from fakeredis import FakeAsyncRedis, FakeServer
from sqlalchemy.ext.asyncio import async_sessionmaker

from airport_catalog_api.cache import redis_client
from airport_catalog_api.config import settings
from airport_catalog_api.dependencies import (
    get_db,
    get_http_client,
    get_main_airport_selector,
)
from airport_catalog_api.main import create_app
from airport_catalog_api.services.airport_service import AirportService
from airport_catalog_db.database import build_engine, init_models
from airport_catalog_ml.selection import MainAirportSelector

if TYPE_CHECKING:
    from collections.abc import Sequence

API_KEY = "test-key"
ADMIN_KEY = "admin-key"

HEATHROW_LINE = (
    '507,"London Heathrow","London","United Kingdom","LHR","EGLL",'
    '51.4706,-0.461941,83,0,"E","Europe/London","airport","OurAirports"'
)
NO_IATA_LINE = (
    '9999,"Some Strip","Nowhere","Iceland",\\N,"BIXX",'
    '64.1,-21.9,10,0,"N","Atlantic/Reykjavik","airport","OurAirports"'
)


def _airport_record(
    airport_id: int,
    name: str,
    city: str,
    country: str,
    iata: str | None = None,
    icao: str | None = None,
    **overrides: object,
) -> dict:
    """Build a full airport record with neutral defaults."""
    record = {
        "id": airport_id,
        "name": name,
        "city": city,
        "country": country,
        "iata": iata,
        "icao": icao,
        "latitude": 0.0,
        "longitude": 0.0,
        "altitude": 0,
        "timezone": 0.0,
        "dst": "U",
        "tz": "Etc/UTC",
        "type": "airport",
        "source": "OurAirports",
    }
    record.update(overrides)
    return record


class StubAdvisor:
    """Deterministic advisor that always answers with the same index."""

    def __init__(self, answer: int | None) -> None:
        self.answer = answer
        self.calls: list[list[str]] = []

    async def choose_index(self, candidates: Sequence) -> int | None:
        self.calls.append([c.name for c in candidates])
        return self.answer


class BrokenRedis:
    """Stands in for a Redis server that is unreachable."""

    async def get(self, key):
        raise redis.ConnectionError("connection refused")

    async def set(self, key, value, ex=None):
        raise redis.ConnectionError("connection refused")

    async def scan_iter(self, match=None, count=None):
        raise redis.ConnectionError("connection refused")
        yield  # pragma: no cover


class FakeFeed:
    """Upstream CSV feed served through ``httpx.MockTransport``.

    Statuses pushed onto ``queued`` are answered first, one per request,
    before falling back to ``status_code``.
    """

    def __init__(self) -> None:
        self.status_code = 200
        self.queued: list[int] = []
        self.body = ""
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        code = self.queued.pop(0) if self.queued else self.status_code
        return httpx.Response(code, text=self.body)


@pytest.fixture
def make_airport():
    """Factory fixture for airport records."""
    return _airport_record


@pytest.fixture
def seed_airports() -> list[dict]:
    return [
        _airport_record(1, "JFK International", "New York", "United States", "JFK", "KJFK"),
        _airport_record(2, "LaGuardia", "New York", "United States", "LGA", "KLGA"),
        _airport_record(3, "Heathrow", "London", "United Kingdom", "LHR", "EGLL"),
    ]


@pytest.fixture
def stub_advisor():
    """Factory fixture for advisors answering a fixed index."""
    return StubAdvisor


@pytest.fixture
def heathrow_line() -> str:
    return HEATHROW_LINE


@pytest.fixture
def no_iata_line() -> str:
    return NO_IATA_LINE


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'airports.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def seed_catalog(session_factory):
    """Replace the catalog with the given records."""

    async def _seed(airports: Sequence[dict]) -> None:
        async with session_factory() as session:
            await AirportService(session).replace_all(airports)

    return _seed


@pytest.fixture
async def seeded(seed_catalog, seed_airports):
    await seed_catalog(seed_airports)
    return seed_airports


@pytest.fixture
async def fake_redis(monkeypatch):
    pool = FakeAsyncRedis(server=FakeServer(), decode_responses=True)
    monkeypatch.setattr(redis_client, "redis_pool", pool)
    yield pool
    await pool.aclose()


@pytest.fixture
def broken_redis(fake_redis, monkeypatch) -> BrokenRedis:
    """Point the cache helpers at a Redis that fails every call."""
    pool = BrokenRedis()
    monkeypatch.setattr(redis_client, "redis_pool", pool)
    return pool


@pytest.fixture
def selector() -> MainAirportSelector:
    return MainAirportSelector(None)


@pytest.fixture
def feed() -> FakeFeed:
    return FakeFeed()


@pytest.fixture
def api_settings(monkeypatch):
    monkeypatch.setattr(settings, "valid_api_keys", [API_KEY])
    monkeypatch.setattr(settings, "admin_api_keys", [ADMIN_KEY])
    monkeypatch.setattr(settings, "import_max_retries", 0)
    monkeypatch.setattr(settings, "import_retry_delay", 0.0)
    monkeypatch.setattr(settings, "airports_data_url", "https://feed.test/airports.dat")
    return settings


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"x-api-key": ADMIN_KEY}


@pytest.fixture
async def client(session_factory, fake_redis, selector, feed, api_settings):
    app = create_app()

    async def _get_db():
        async with session_factory() as session:
            yield session
            await session.commit()

    async def _get_http_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(feed.handler)) as c:
            yield c

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_main_airport_selector] = lambda: selector
    app.dependency_overrides[get_http_client] = _get_http_client

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"x-api-key": API_KEY},
    ) as ac:
        yield ac
