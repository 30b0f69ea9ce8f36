"""LLM advisors that suggest which candidate is a city's main airport."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Protocol

import anthropic

from airport_catalog_ml.selection.prompts import SYSTEM_PROMPT, build_selection_prompt

if TYPE_CHECKING:
    from collections.abc import Sequence

    from airport_catalog_ml.selection.selector import AirportLike

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

DEFAULT_MODEL = "claude-haiku-4-5-20251001"


def parse_index(text: str | None) -> int | None:
    """Parse the leading decimal integer of an LLM answer, if any."""
    if not text:
        return None
    match = _LEADING_INT.match(text)
    if match is None:
        return None
    return int(match.group(1))


class MainAirportAdvisor(Protocol):
    """Narrow interface the selector consults for tie-breaking."""

    async def choose_index(self, candidates: Sequence[AirportLike]) -> int | None:
        """Return the index of the main airport, or *None* when undecided."""
        ...


class AnthropicAdvisor:
    """Asks a Claude model to pick the main airport among candidates."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        timeout: float = 5.0,
        max_tokens: int = 10,
        temperature: float = 0.0,
    ) -> None:
        # Retries are left to the caller's deadline; one attempt per group.
        self._client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout,
            max_retries=0,
        )
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def choose_index(self, candidates: Sequence[AirportLike]) -> int | None:
        response = await self._client.messages.create(
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            system=SYSTEM_PROMPT,
            messages=[
                {"role": "user", "content": build_selection_prompt(candidates)}
            ],
        )
        text = "".join(
            block.text for block in response.content if block.type == "text"
        )
        return parse_index(text)

    async def close(self) -> None:
        await self._client.close()
