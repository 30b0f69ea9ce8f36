"""Airport read endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from airport_catalog_ml.selection import MainAirportSelector

from ..dependencies import get_db, get_main_airport_selector, require_api_key
from ..schemas.airports import (
    AirportItem,
    AirportSearchQuery,
    AirportSearchResponse,
    AirportStats,
)
from ..services.search_service import SearchService

router = APIRouter(
    prefix="/airports",
    tags=["airports"],
    dependencies=[Depends(require_api_key)],
)

DbDep = Annotated[AsyncSession, Depends(get_db)]
SelectorDep = Annotated[MainAirportSelector, Depends(get_main_airport_selector)]
SearchQueryDep = Annotated[AirportSearchQuery, Query()]


def _service(db: DbDep, selector: SelectorDep) -> SearchService:
    return SearchService(db, selector)


ServiceDep = Annotated[SearchService, Depends(_service)]


@router.get("/search", response_model=AirportSearchResponse)
async def search_airports(
    service: ServiceDep, query: SearchQueryDep
) -> AirportSearchResponse:
    """Search airports by free text and structured filters."""
    return await service.search(query)


@router.get("/search/main", response_model=AirportSearchResponse)
async def search_main_airports(
    service: ServiceDep, query: SearchQueryDep
) -> AirportSearchResponse:
    """Same as search, keeping only the main airport of each city."""
    return await service.search_main(query)


@router.get("/main-airport/{city}", response_model=AirportItem)
async def get_main_airport_for_city(service: ServiceDep, city: str) -> AirportItem:
    airport = await service.main_for_city(city)
    if airport is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No main airport found for city: {city}",
        )
    return airport


@router.get("/stats", response_model=AirportStats)
async def get_stats(service: ServiceDep) -> AirportStats:
    return await service.stats()


@router.get("/id/{airport_id}", response_model=AirportItem)
async def get_airport_by_id(
    service: ServiceDep, airport_id: Annotated[int, Path()]
) -> AirportItem:
    airport = await service.by_id(airport_id)
    if airport is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Airport with ID {airport_id} not found",
        )
    return airport


@router.get("/iata/{iata}", response_model=AirportItem)
async def get_airport_by_iata(service: ServiceDep, iata: str) -> AirportItem:
    airport = await service.by_iata(iata)
    if airport is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Airport with IATA code {iata} not found",
        )
    return airport


@router.get("/icao/{icao}", response_model=AirportItem)
async def get_airport_by_icao(service: ServiceDep, icao: str) -> AirportItem:
    airport = await service.by_icao(icao)
    if airport is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Airport with ICAO code {icao} not found",
        )
    return airport


@router.get("/country/{country}", response_model=AirportSearchResponse)
async def get_airports_by_country(
    service: ServiceDep,
    country: str,
    limit: Annotated[int, Query(ge=1, le=1000)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> AirportSearchResponse:
    return await service.by_country(country, limit, offset)
