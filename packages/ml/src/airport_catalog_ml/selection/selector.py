"""Group airports by city and pick one main airport per group."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from airport_catalog_ml.selection.advisor import MainAirportAdvisor

logger = logging.getLogger(__name__)


class AirportLike(Protocol):
    """Attributes the selector and prompt builder read from a candidate."""

    name: str
    city: str
    country: str
    iata: str | None
    type: str


def city_group_key[T: AirportLike](airport: T) -> tuple[str, str]:
    return airport.city.lower(), airport.country.lower()


def group_by_city[T: AirportLike](airports: Sequence[T]) -> list[list[T]]:
    """Group airports by (city, country), case-insensitively.

    Groups come out in order of first appearance and keep the input order
    inside each group.
    """
    groups: dict[tuple[str, str], list[T]] = {}
    for airport in airports:
        groups.setdefault(city_group_key(airport), []).append(airport)
    return list(groups.values())


def matches_city(city: str, airport: AirportLike) -> bool:
    """Symmetric case-insensitive substring match between two city names."""
    wanted = city.lower()
    actual = airport.city.lower()
    return wanted in actual or actual in wanted


class MainAirportSelector:
    """Chooses the main airport per city, using an advisor when available.

    Without an advisor, or whenever the advisor fails, times out or answers
    with something unusable, the first candidate of a group wins. Selection
    never raises.
    """

    def __init__(
        self,
        advisor: MainAirportAdvisor | None = None,
        *,
        max_concurrency: int = 4,
        timeout: float = 5.0,
    ) -> None:
        self._advisor = advisor
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._timeout = timeout

    @property
    def advisor_enabled(self) -> bool:
        return self._advisor is not None

    async def close(self) -> None:
        """Release the advisor's client, if it holds one."""
        close = getattr(self._advisor, "close", None)
        if close is not None:
            await close()

    async def choose_main[T: AirportLike](self, group: Sequence[T]) -> T:
        """Pick one airport out of a non-empty group."""
        fallback = group[0]
        if self._advisor is None or len(group) == 1:
            return fallback

        async with self._semaphore:
            # The deadline starts once a slot is held.
            try:
                async with asyncio.timeout(self._timeout):
                    index = await self._advisor.choose_index(group)
            except TimeoutError:
                logger.warning(
                    "Advisor timed out after %.1fs for %s, using first airport",
                    self._timeout,
                    fallback.city,
                )
                return fallback
            except Exception:
                logger.exception(
                    "Advisor failed for %s, using first airport", fallback.city
                )
                return fallback

        if index is None or not 0 <= index < len(group):
            logger.warning(
                "Invalid advisor answer %r for %s, using first airport",
                index,
                fallback.city,
            )
            return fallback

        chosen = group[index]
        logger.debug(
            "Advisor selected airport %d for %s: %s", index, chosen.city, chosen.name
        )
        return chosen

    async def select_main[T: AirportLike](self, airports: Sequence[T]) -> list[T]:
        """Return one airport per (city, country) group, in first-seen order."""
        groups = group_by_city(airports)
        return list(await asyncio.gather(*(self.choose_main(g) for g in groups)))

    async def main_for_city[T: AirportLike](
        self, city: str, candidates: Sequence[T]
    ) -> T | None:
        """Pick the main airport among candidates whose city matches *city*."""
        matching = [airport for airport in candidates if matches_city(city, airport)]
        if not matching:
            return None
        return await self.choose_main(matching)
