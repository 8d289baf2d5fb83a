"""Portion size estimation for ingredients."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from string import Template

from calorie_logger.domain.errors import EstimatorError
from calorie_logger.domain.estimates import PortionEstimate
from calorie_logger.domain.meals import DEFAULT_HUMAN_PORTION, Ingredient, Portion
from calorie_logger.services.estimator import LanguageModelEstimator
from calorie_logger.services.prompts import PORTION_PROMPT, SIMPLE_PORTION_PROMPT

_logger = logging.getLogger(__name__)

PortionStrategy = Callable[[Ingredient], Awaitable[Portion | None]]


@dataclass
class PortionResolver:
    """Estimates grams per ingredient: rich prompt, simple prompt, then default."""

    estimator: LanguageModelEstimator
    enabled: bool = True

    def strategies(self) -> list[tuple[str, PortionStrategy]]:
        """Return the model-backed strategies in the order they are tried."""
        if not self.enabled:
            return []
        return [
            ("detailed", self._detailed),
            ("simple", self._simple),
        ]

    async def estimate(self, ingredient: Ingredient) -> Portion:
        """Return the first successful portion, or the default serving."""
        for name, strategy in self.strategies():
            portion = await strategy(ingredient)
            if portion is not None:
                return portion
            _logger.info("Portion strategy %s failed for %r", name, ingredient.name)
        return Portion.default(ingredient.name)

    async def _detailed(self, ingredient: Ingredient) -> Portion | None:
        return await self._ask(
            ingredient,
            PORTION_PROMPT,
            {
                "ingredient": ingredient.name,
                "dish": ingredient.dish,
                "description": ingredient.description,
            },
        )

    async def _simple(self, ingredient: Ingredient) -> Portion | None:
        return await self._ask(
            ingredient,
            SIMPLE_PORTION_PROMPT,
            {"ingredient": ingredient.name, "dish": ingredient.dish},
        )

    async def _ask(
        self,
        ingredient: Ingredient,
        template: Template,
        variables: dict[str, object],
    ) -> Portion | None:
        try:
            estimate = await self.estimator.query_model(
                template, variables, PortionEstimate
            )
        except EstimatorError:
            return None
        human = (estimate.portion or "").strip() or DEFAULT_HUMAN_PORTION
        return Portion(
            ingredient=ingredient.name, grams=estimate.grams, human_portion=human
        )
