"""Meal estimation pipeline."""

import logging
from dataclasses import dataclass

from calorie_logger.domain.errors import InputError
from calorie_logger.domain.meals import FoodEstimate, MealResult
from calorie_logger.services.calories import CalorieResolver
from calorie_logger.services.decomposition import DecompositionService
from calorie_logger.services.portions import PortionResolver

_logger = logging.getLogger(__name__)

GENERIC_QUESTION = (
    "Could you describe your meal in more detail? For example, "
    "what size was it and how was it prepared?"
)


@dataclass(frozen=True)
class PipelineOptions:
    """Stage toggles and the optional sanity threshold."""

    identify_dishes: bool = True
    break_into_ingredients: bool = True
    estimate_portions: bool = True
    use_nutrition_database: bool = True
    clarification_threshold_kcal: int | None = None


@dataclass
class MealPipeline:
    """Runs decomposition, portions and calories, then checks the total.

    A run either completes with a list of foods or asks for clarification.
    Clarified descriptions are processed by a fresh run; nothing carries over
    between runs.
    """

    decomposition: DecompositionService
    portions: PortionResolver
    calories: CalorieResolver
    clarification_threshold_kcal: int | None = None

    async def process_meal(self, description: str | None) -> MealResult:
        """Estimate a meal, returning a clarification instead of raising."""
        text = (description or "").strip()
        if not text:
            raise InputError("Please describe your meal")

        _logger.info("Processing meal: %r", text)
        try:
            foods = await self._estimate_foods(text)
        except Exception:
            _logger.exception("Meal pipeline failed")
            return MealResult.clarification(GENERIC_QUESTION)

        if not foods:
            _logger.warning("Meal pipeline produced no foods")
            return MealResult.clarification(GENERIC_QUESTION)

        result = MealResult.complete(foods)
        threshold = self.clarification_threshold_kcal
        if threshold is not None and result.total_calories > threshold:
            _logger.info(
                "Total %s kcal above threshold %s, asking to confirm",
                result.total_calories,
                threshold,
            )
            return MealResult.clarification(_threshold_question(result.total_calories))

        _logger.info(
            "Meal estimated: %s foods, %s kcal",
            len(result.foods),
            result.total_calories,
        )
        return result

    async def _estimate_foods(self, description: str) -> list[FoodEstimate]:
        foods: list[FoodEstimate] = []
        for dish, ingredients in await self.decomposition.decompose(description):
            _logger.debug("Dish %r: %s ingredients", dish, len(ingredients))
            for ingredient in ingredients:
                portion = await self.portions.estimate(ingredient)
                estimate = await self.calories.resolve(ingredient, portion)
                _logger.debug(
                    "%s: %sg -> %s kcal (%s)",
                    estimate.name,
                    estimate.grams,
                    estimate.calories,
                    estimate.source,
                )
                foods.append(estimate)
        return foods


def _threshold_question(total_calories: int) -> str:
    return (
        f"That comes to about {total_calories} calories, which is more than a "
        "typical meal. Could you confirm the portion sizes or how many servings "
        "you had?"
    )
