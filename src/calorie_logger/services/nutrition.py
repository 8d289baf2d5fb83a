"""Nutrition lookups against USDA FDC."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from calorie_logger.adapters.fdc_client import ENERGY_NUTRIENT_NUMBER, FdcClient
from calorie_logger.domain.nutrition import NutritionMatch
from calorie_logger.services.cache import Cache
from calorie_logger.services.rate_limit import NoopLimiter, RateLimiter

_ENERGY_NUTRIENT_ID = 1008
_NOT_FOUND = "not-found"

_logger = logging.getLogger(__name__)


@dataclass
class NutritionService:
    """Looks up energy density for a food name, taking the top search hit."""

    fdc_client: FdcClient
    cache: Cache
    rate_limiter: RateLimiter = field(default_factory=NoopLimiter)
    ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def lookup(self, name: str) -> NutritionMatch | None:
        """Return calories per 100 g for the first match, or None on a miss."""
        query = name.strip()
        if not query:
            return None
        cache_key = f"fdc:lookup:{query.lower()}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, NutritionMatch):
            return cached
        if cached == _NOT_FOUND:
            return None

        try:
            match = await self._lookup_uncached(query)
        except Exception as exc:
            _logger.warning(
                "Nutrition lookup failed for %r (status=%s): %s",
                query,
                _status_code_from_exception(exc),
                type(exc).__name__,
            )
            return None

        if match is None:
            _logger.info("Nutrition lookup miss: %r", query)
            self.cache.set(cache_key, _NOT_FOUND, ttl_seconds=self.ttl_seconds)
            return None
        self.cache.set(cache_key, match, ttl_seconds=self.ttl_seconds)
        return match

    async def _lookup_uncached(self, query: str) -> NutritionMatch | None:
        payload = await self._call_with_retry(
            lambda: self.fdc_client.search_foods(query, page_size=1),
            action="search",
        )
        foods = payload.get("foods") or []
        if not foods:
            return None
        top = foods[0]
        fdc_id = top.get("fdcId")
        if fdc_id is None:
            return None

        details = await self._call_with_retry(
            lambda: self.fdc_client.get_food(int(fdc_id)),
            action=f"get_food:{fdc_id}",
        )
        calories = extract_energy_kcal(details.get("foodNutrients") or [])
        if calories is None or calories <= 0:
            return None
        return NutritionMatch(
            fdc_id=int(fdc_id),
            description=str(details.get("description") or top.get("description", "")),
            calories_per_100g=calories,
        )

    async def _call_with_retry(
        self, func: Callable[[], Awaitable[dict[str, object]]], *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            await self.rate_limiter.acquire()
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.debug(
                    "Nutrition %s failed (attempt %s/%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def extract_energy_kcal(food_nutrients: list[dict[str, object]]) -> float | None:
    """Find the energy value in kcal among FDC nutrients.

    The nutrient id is checked first; a kcal-denominated nutrient whose name
    mentions energy is accepted otherwise.
    """
    by_name: float | None = None
    for nutrient in food_nutrients:
        nutrient_info = nutrient.get("nutrient") or {}
        nutrient_id = nutrient_info.get("id") or nutrient.get("nutrientId")
        number = (
            nutrient_info.get("number")
            or nutrient.get("nutrientNumber")
            or nutrient.get("number")
        )
        amount = nutrient.get("amount", nutrient.get("value"))
        if amount is None:
            continue
        if nutrient_id == _ENERGY_NUTRIENT_ID or str(number) == ENERGY_NUTRIENT_NUMBER:
            return float(amount)
        name = str(
            nutrient_info.get("name")
            or nutrient.get("nutrientName")
            or nutrient.get("name")
            or ""
        )
        unit = str(nutrient_info.get("unitName") or nutrient.get("unitName") or "")
        if by_name is None and "energy" in name.lower() and unit.lower() == "kcal":
            by_name = float(amount)
    return by_name


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
