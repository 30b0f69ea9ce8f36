"""Main airport selection: city grouping plus LLM tie-breaking."""

from __future__ import annotations

from airport_catalog_ml.selection.advisor import (
    AnthropicAdvisor,
    MainAirportAdvisor,
    parse_index,
)
from airport_catalog_ml.selection.selector import AirportLike, MainAirportSelector

__all__ = [
    "AirportLike",
    "AnthropicAdvisor",
    "MainAirportAdvisor",
    "MainAirportSelector",
    "parse_index",
]
