"""Airport catalog ML - LLM-assisted main airport selection."""

from airport_catalog_ml.selection import (
    AnthropicAdvisor,
    MainAirportAdvisor,
    MainAirportSelector,
)

__all__ = [
    "AnthropicAdvisor",
    "MainAirportAdvisor",
    "MainAirportSelector",
]
