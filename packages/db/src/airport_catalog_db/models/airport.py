"""Airport model and its import staging table."""

from __future__ import annotations

from sqlalchemy import Column, Float, Index, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Airport(Base):
    """Airports table - the live catalog readers query."""

    __tablename__ = "airports"

    # Ids come from the upstream feed and stay stable across imports.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    country: Mapped[str] = mapped_column(String(255), nullable=False)
    iata: Mapped[str | None] = mapped_column(String(3), nullable=True)
    icao: Mapped[str | None] = mapped_column(String(4), nullable=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    altitude: Mapped[int] = mapped_column(Integer, nullable=False)
    timezone: Mapped[float] = mapped_column(Float, nullable=False)
    dst: Mapped[str] = mapped_column(String(8), nullable=False)
    tz: Mapped[str] = mapped_column(String(64), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    source: Mapped[str] = mapped_column(String(64), nullable=False)

    __table_args__ = (
        Index("ix_airports_name_id", "name", "id"),
        Index("ix_airports_city", "city"),
        Index("ix_airports_country", "country"),
        Index("ix_airports_iata", "iata"),
        Index("ix_airports_icao", "icao"),
    )

    def __repr__(self) -> str:
        return f"<Airport {self.id} {self.iata or '-'} ({self.city})>"


# Shadow copy of the airports columns, without indexes. Imports fill it
# first and then swap its contents into ``airports`` in one transaction.
airport_staging = Table(
    "airports_staging",
    Base.metadata,
    *(
        Column(
            column.name,
            column.type,
            primary_key=column.primary_key,
            autoincrement=False if column.primary_key else "auto",
            nullable=column.nullable,
        )
        for column in Airport.__table__.columns
    ),
)
