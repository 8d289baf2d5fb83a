"""Splits a meal description into dishes and ingredients."""

import logging
from dataclasses import dataclass

from calorie_logger.domain.errors import EstimatorError
from calorie_logger.domain.estimates import NameList
from calorie_logger.domain.meals import Ingredient
from calorie_logger.services.estimator import LanguageModelEstimator
from calorie_logger.services.prompts import DISHES_PROMPT, INGREDIENTS_PROMPT

_logger = logging.getLogger(__name__)


@dataclass
class DecompositionService:
    """Turns free text into ordered dishes, then each dish into ingredients.

    Every step falls back to the text it was given, so a non-empty
    description always yields at least one dish with one ingredient.
    """

    estimator: LanguageModelEstimator
    identify_dishes_enabled: bool = True
    ingredients_enabled: bool = True

    async def decompose(self, description: str) -> list[tuple[str, list[Ingredient]]]:
        """Return dishes in mention order, each with its ingredients."""
        dishes = await self.identify_dishes(description)
        breakdown: list[tuple[str, list[Ingredient]]] = []
        for dish in dishes:
            ingredients = await self.break_into_ingredients(dish, description)
            breakdown.append((dish, ingredients))
        return breakdown

    async def identify_dishes(self, description: str) -> list[str]:
        """Return dish names in the order they are mentioned."""
        fallback = [description.strip()]
        if not self.identify_dishes_enabled:
            return fallback
        try:
            result = await self.estimator.query_model(
                DISHES_PROMPT, {"description": description}, NameList, expect=list
            )
        except EstimatorError as exc:
            _logger.info("Dish identification fell back to description: %s", exc.reason)
            return fallback
        dishes = result.names()
        if not dishes:
            _logger.info("Dish identification returned no dishes")
            return fallback
        return dishes

    async def break_into_ingredients(
        self, dish: str, description: str
    ) -> list[Ingredient]:
        """Return the dish's ingredients, or the dish itself on failure."""
        fallback = [Ingredient(name=dish, dish=dish, description=description)]
        if not self.ingredients_enabled:
            return fallback
        try:
            result = await self.estimator.query_model(
                INGREDIENTS_PROMPT,
                {"dish": dish, "description": description},
                NameList,
                expect=list,
            )
        except EstimatorError as exc:
            _logger.info("Ingredient breakdown for %r fell back: %s", dish, exc.reason)
            return fallback
        names = result.names()
        if not names:
            return fallback
        return [
            Ingredient(name=name, dish=dish, description=description) for name in names
        ]
