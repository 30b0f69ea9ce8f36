"""Catalog store: structured and paginated airport queries."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, desc, func, insert, or_, select

from airport_catalog_db.models import Airport, airport_staging

from ..schemas.airports import AirportItem, CountryCount

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

    from ..schemas.airports import AirportSearchQuery

logger = logging.getLogger(__name__)

airports_table = Airport.__table__
_AIRPORT_COLUMNS = [column.name for column in airports_table.columns]


def _contains(column, term: str) -> ColumnElement[bool]:
    return column.icontains(term, autoescape=True)


def build_filters(query: AirportSearchQuery) -> list[ColumnElement[bool]]:
    """Translate search filters into AND-ed SQL predicates."""
    conditions: list[ColumnElement[bool]] = []

    if query.search:
        conditions.append(
            or_(
                _contains(Airport.name, query.search),
                _contains(Airport.city, query.search),
                _contains(Airport.country, query.search),
                _contains(Airport.iata, query.search),
                _contains(Airport.icao, query.search),
            )
        )
    if query.country:
        conditions.append(_contains(Airport.country, query.country))
    if query.city:
        conditions.append(_contains(Airport.city, query.city))
    if query.iata:
        conditions.append(Airport.iata == query.iata.upper())
    if query.icao:
        conditions.append(Airport.icao == query.icao.upper())

    return conditions


class AirportService:
    """Handles airport catalog queries and wholesale replacement."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find_by_id(self, airport_id: int) -> AirportItem | None:
        airport = await self._db.get(Airport, airport_id)
        return AirportItem.model_validate(airport) if airport else None

    async def find_by_iata(self, code: str) -> AirportItem | None:
        return await self._find_one(Airport.iata == code.strip().upper())

    async def find_by_icao(self, code: str) -> AirportItem | None:
        return await self._find_one(Airport.icao == code.strip().upper())

    async def _find_one(self, condition: ColumnElement[bool]) -> AirportItem | None:
        stmt = select(Airport).where(condition).order_by(Airport.id).limit(1)
        airport = (await self._db.execute(stmt)).scalars().first()
        return AirportItem.model_validate(airport) if airport else None

    async def search(
        self, query: AirportSearchQuery
    ) -> tuple[list[AirportItem], int]:
        """Return one page of matches ordered by name, and the full match count."""
        conditions = build_filters(query)

        count_stmt = select(func.count()).select_from(Airport).where(*conditions)
        total = (await self._db.execute(count_stmt)).scalar_one()

        stmt = (
            select(Airport)
            .where(*conditions)
            .order_by(Airport.name, Airport.id)
            .offset(query.offset)
            .limit(query.limit)
        )
        result = await self._db.execute(stmt)
        airports = [AirportItem.model_validate(ap) for ap in result.scalars().all()]
        return airports, total

    async def find_by_city_like(
        self, city: str, limit: int | None = None
    ) -> list[AirportItem]:
        """Airports whose city contains *city*, ordered by name."""
        stmt = (
            select(Airport)
            .where(_contains(Airport.city, city))
            .order_by(Airport.name, Airport.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._db.execute(stmt)
        return [AirportItem.model_validate(ap) for ap in result.scalars().all()]

    async def count_total(self) -> int:
        return await self._count()

    async def count_with_iata(self) -> int:
        return await self._count(Airport.iata.is_not(None))

    async def count_with_icao(self) -> int:
        return await self._count(Airport.icao.is_not(None))

    async def _count(self, *conditions: ColumnElement[bool]) -> int:
        stmt = select(func.count()).select_from(Airport).where(*conditions)
        return (await self._db.execute(stmt)).scalar_one()

    async def top_countries(self, k: int) -> list[CountryCount]:
        """Countries with the most airports, largest first."""
        airport_count = func.count().label("airport_count")
        stmt = (
            select(Airport.country, airport_count)
            .group_by(Airport.country)
            .order_by(desc(airport_count), Airport.country)
            .limit(k)
        )
        rows = (await self._db.execute(stmt)).all()
        return [CountryCount(country=country, count=n) for country, n in rows]

    async def replace_all(
        self, airports: Sequence[dict], batch_size: int = 1000
    ) -> int:
        """Atomically replace the whole catalog with *airports*.

        Rows are staged in ``airports_staging`` first. The live table is only
        touched by the final swap transaction, so readers see either the old
        catalog or the new one, never a partial or empty state in between.
        """
        rows = [{name: record[name] for name in _AIRPORT_COLUMNS} for record in airports]

        try:
            await self._db.execute(delete(airport_staging))
            for start in range(0, len(rows), batch_size):
                batch = rows[start : start + batch_size]
                await self._db.execute(insert(airport_staging), batch)
                logger.info(
                    "Staged %d / %d airports", start + len(batch), len(rows)
                )
            await self._db.commit()

            staged = select(*(airport_staging.c[name] for name in _AIRPORT_COLUMNS))
            await self._db.execute(delete(airports_table))
            await self._db.execute(
                insert(airports_table).from_select(_AIRPORT_COLUMNS, staged)
            )
            await self._db.execute(delete(airport_staging))
            await self._db.commit()
        except Exception:
            await self._db.rollback()
            raise

        logger.info("Catalog replaced with %d airports", len(rows))
        return len(rows)
