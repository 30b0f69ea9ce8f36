"""SQLAlchemy ORM models for the airport catalog."""

from .airport import Airport, airport_staging
from .base import Base

__all__ = [
    "Airport",
    "Base",
    "airport_staging",
]
