"""Airport schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class AirportItem(BaseModel):
    """Single airport entry, field for field as stored in the catalog."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    city: str
    country: str
    iata: str | None
    icao: str | None
    latitude: float
    longitude: float
    altitude: int
    timezone: float
    dst: str
    tz: str
    type: str
    source: str


class AirportSearchQuery(BaseModel):
    """Structured airport search filters plus pagination."""

    model_config = ConfigDict(extra="ignore")

    search: str | None = None
    country: str | None = None
    city: str | None = None
    iata: str | None = None
    icao: str | None = None
    limit: int = Field(50, ge=1, le=1000)
    offset: int = Field(0, ge=0)

    @field_validator("search", "country", "city", "iata", "icao", mode="before")
    @classmethod
    def _blank_as_absent(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("iata", "icao")
    @classmethod
    def _upper_codes(cls, value: str | None) -> str | None:
        return value.strip().upper() if value is not None else None


class AirportSearchResponse(BaseModel):
    """Paginated airport list."""

    airports: list[AirportItem]
    total: int
    limit: int
    offset: int


class CountryCount(BaseModel):
    country: str
    count: int


class AirportStats(BaseModel):
    """Catalog-wide counters."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int
    with_iata: int
    with_icao: int
    top_countries: list[CountryCount]
