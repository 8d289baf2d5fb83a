"""Calorie resolution with database, model and heuristic fallbacks."""

import logging
import math
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from calorie_logger.domain.errors import EstimatorError
from calorie_logger.domain.estimates import CalorieEstimate
from calorie_logger.domain.meals import (
    EstimateSource,
    FoodEstimate,
    Ingredient,
    Portion,
    round_half_up,
)
from calorie_logger.services.estimator import LanguageModelEstimator
from calorie_logger.services.nutrition import NutritionService
from calorie_logger.services.prompts import CALORIES_PROMPT

HEURISTIC_KCAL_PER_GRAM = 1.5

_NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")

_logger = logging.getLogger(__name__)

CalorieStrategy = Callable[[Ingredient, Portion], Awaitable[FoodEstimate | None]]


@dataclass
class CalorieResolver:
    """Resolves calories for a portion, preferring measured data."""

    nutrition_service: NutritionService
    estimator: LanguageModelEstimator
    use_database: bool = True

    def strategies(self) -> list[tuple[EstimateSource, CalorieStrategy]]:
        """Return the strategies in the order they are tried."""
        ordered: list[tuple[EstimateSource, CalorieStrategy]] = []
        if self.use_database:
            ordered.append((EstimateSource.DATABASE, self._from_database))
        ordered.append((EstimateSource.LANGUAGE_MODEL, self._from_language_model))
        ordered.append((EstimateSource.HEURISTIC, self._from_heuristic))
        return ordered

    async def resolve(self, ingredient: Ingredient, portion: Portion) -> FoodEstimate:
        """Return the first estimate any strategy produces."""
        if portion.grams <= 0:
            portion = Portion.default(ingredient.name)
        for source, strategy in self.strategies():
            estimate = await strategy(ingredient, portion)
            if estimate is not None:
                return estimate
            _logger.info(
                "Calorie source %s unavailable for %r", source, ingredient.name
            )
        return heuristic_estimate(ingredient, portion)

    async def _from_database(
        self, ingredient: Ingredient, portion: Portion
    ) -> FoodEstimate | None:
        match = await self.nutrition_service.lookup(ingredient.name)
        if match is None:
            return None
        calories = round_half_up(match.calories_per_100g * portion.grams / 100)
        return FoodEstimate(
            name=ingredient.name,
            calories=max(calories, 0),
            portion=portion.human_portion,
            grams=portion.grams,
            source=EstimateSource.DATABASE,
            dish=ingredient.dish,
            match_id=match.fdc_id,
        )

    async def _from_language_model(
        self, ingredient: Ingredient, portion: Portion
    ) -> FoodEstimate | None:
        try:
            result = await self.estimator.query_model(
                CALORIES_PROMPT,
                {
                    "ingredient": ingredient.name,
                    "grams": _format_grams(portion.grams),
                    "portion": portion.human_portion,
                },
                CalorieEstimate,
            )
        except EstimatorError:
            return None
        return FoodEstimate(
            name=ingredient.name,
            calories=coerce_calories(result.calories, ingredient.name),
            portion=portion.human_portion,
            grams=portion.grams,
            source=EstimateSource.LANGUAGE_MODEL,
            dish=ingredient.dish,
        )

    async def _from_heuristic(
        self, ingredient: Ingredient, portion: Portion
    ) -> FoodEstimate | None:
        return heuristic_estimate(ingredient, portion)


def heuristic_estimate(ingredient: Ingredient, portion: Portion) -> FoodEstimate:
    """Crude last-resort estimate of 1.5 kcal per gram."""
    return FoodEstimate(
        name=ingredient.name,
        calories=round_half_up(portion.grams * HEURISTIC_KCAL_PER_GRAM),
        portion=portion.human_portion,
        grams=portion.grams,
        source=EstimateSource.HEURISTIC,
        dish=ingredient.dish,
    )


def coerce_calories(value: float | str | None, name: str) -> int:
    """Convert model output to a non-negative integer, clamping bad values to 0."""
    number: float | None = None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        found = _NUMBER_PATTERN.search(value)
        if found:
            number = float(found.group())
    if number is None or not math.isfinite(number):
        _logger.warning("Non-numeric calories %r for %r clamped to 0", value, name)
        return 0
    if number < 0:
        _logger.warning("Negative calories %s for %r clamped to 0", number, name)
        return 0
    return round_half_up(number)


def _format_grams(grams: float) -> str:
    return f"{grams:g}"
