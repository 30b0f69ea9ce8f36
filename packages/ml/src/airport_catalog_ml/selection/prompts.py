"""Prompt templates for main airport tie-breaking."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from airport_catalog_ml.selection.selector import AirportLike

SYSTEM_PROMPT = """\
You are an aviation expert. You pick the primary commercial airport of a \
city from a numbered list and answer with the number only."""

_USER_TEMPLATE = """\
Given the following airports in the same city, identify which one is the \
MAIN/PRIMARY commercial airport that most travelers would use.

Consider these factors:
1. International vs domestic airports
2. Size and passenger volume (inferred from name)
3. IATA code presence (airports with IATA codes are usually more significant)
4. Airport type
5. Common naming patterns (International, Central, Main, etc.)

Airports:
{candidates}

Respond with ONLY the index number (0, 1, 2, etc.) of the main airport. \
No explanation needed."""


def format_candidate(index: int, airport: AirportLike) -> str:
    """Render one numbered candidate line."""
    iata = airport.iata or "No IATA"
    return (
        f"{index}: {airport.name} ({iata}) - {airport.city}, "
        f"{airport.country} - Type: {airport.type}"
    )


def build_selection_prompt(candidates: Sequence[AirportLike]) -> str:
    """Build the user message listing candidates with stable 0-based indices.

    The output depends only on the candidates and their order, so the same
    group always yields the same prompt.
    """
    lines = "\n".join(
        format_candidate(index, airport) for index, airport in enumerate(candidates)
    )
    return _USER_TEMPLATE.format(candidates=lines)
