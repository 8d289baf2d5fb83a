"""Tests for the meal estimation pipeline."""

import asyncio
from dataclasses import dataclass, field

import pytest

from calorie_logger.domain.errors import InputError
from calorie_logger.domain.meals import (
    EstimateSource,
    Ingredient,
    merge_clarification,
)
from calorie_logger.services.calories import CalorieResolver
from calorie_logger.services.cache import InMemoryCache
from calorie_logger.services.nutrition import NutritionService
from calorie_logger.services.pipeline import GENERIC_QUESTION, MealPipeline
from calorie_logger.services.portions import PortionResolver
from tests.conftest import (
    FakeFdcClient,
    build_estimator,
    build_pipeline,
    eggs_and_toast_responder,
    empty_fdc_client,
    failing_responder,
)


@dataclass
class FlakyDecomposition:
    """Decomposition that fails until the description mentions cooking."""

    calls: list[str] = field(default_factory=list)

    async def decompose(self, description: str) -> list[tuple[str, list[Ingredient]]]:
        self.calls.append(description)
        if "grilled" not in description:
            raise RuntimeError("network stack down")
        return [
            (
                "chicken",
                [Ingredient(name="chicken", dish="chicken", description=description)],
            )
        ]


def _flaky_pipeline(decomposition: FlakyDecomposition) -> MealPipeline:
    estimator = build_estimator(failing_responder)
    return MealPipeline(
        decomposition=decomposition,  # type: ignore[arg-type]
        portions=PortionResolver(estimator),
        calories=CalorieResolver(
            nutrition_service=NutritionService(empty_fdc_client(), InMemoryCache()),
            estimator=estimator,
        ),
    )


def test_eggs_and_toast_resolved_by_heuristic() -> None:
    pipeline = build_pipeline(eggs_and_toast_responder)

    result = asyncio.run(pipeline.process_meal("2 eggs and toast"))

    assert not result.clarification_needed
    assert [food.name for food in result.foods] == [
        "egg",
        "egg",
        "butter",
        "bread",
        "butter",
    ]
    assert [food.grams for food in result.foods] == [50, 50, 5, 30, 5]
    assert [food.calories for food in result.foods] == [75, 75, 8, 45, 8]
    assert {food.source for food in result.foods} == {EstimateSource.HEURISTIC}
    assert result.total_calories == 211


def test_total_always_matches_sum_of_foods() -> None:
    pipeline = build_pipeline(
        lambda prompt: '["chicken breast"]'
        if prompt.startswith(("Identify", "Break"))
        else '{"grams": 137, "portion": "1 breast"}',
        fdc_client=FakeFdcClient(),
    )

    result = asyncio.run(pipeline.process_meal("grilled chicken"))

    assert result.total_calories == sum(food.calories for food in result.foods)
    assert result.foods[0].source == EstimateSource.DATABASE
    assert result.foods[0].calories == 226


def test_everything_down_still_completes() -> None:
    pipeline = build_pipeline(failing_responder)

    result = asyncio.run(pipeline.process_meal("leftover lasagna"))

    assert not result.clarification_needed
    assert len(result.foods) == 1
    assert result.foods[0].name == "leftover lasagna"
    assert result.foods[0].calories == 75
    assert result.total_calories == 75


def test_empty_description_is_input_error() -> None:
    pipeline = build_pipeline(eggs_and_toast_responder)

    with pytest.raises(InputError):
        asyncio.run(pipeline.process_meal("   "))
    with pytest.raises(InputError):
        asyncio.run(pipeline.process_meal(None))


def test_unexpected_failure_asks_for_clarification() -> None:
    pipeline = _flaky_pipeline(FlakyDecomposition())

    result = asyncio.run(pipeline.process_meal("chicken"))

    assert result.clarification_needed
    assert result.question == GENERIC_QUESTION
    assert result.foods == ()


def test_clarification_round_trip_reruns_full_pipeline_once() -> None:
    decomposition = FlakyDecomposition()
    pipeline = _flaky_pipeline(decomposition)

    first = asyncio.run(pipeline.process_meal("chicken"))
    assert first.clarification_needed

    merged = merge_clarification("chicken", " it was grilled ")
    second = asyncio.run(pipeline.process_meal(merged))

    assert merged == "chicken it was grilled"
    assert decomposition.calls == ["chicken", "chicken it was grilled"]
    assert not second.clarification_needed
    assert second.total_calories == 75


def test_total_above_threshold_asks_for_confirmation() -> None:
    pipeline = build_pipeline(
        eggs_and_toast_responder, clarification_threshold_kcal=200
    )

    result = asyncio.run(pipeline.process_meal("2 eggs and toast"))

    assert result.clarification_needed
    assert "211" in (result.question or "")


def test_total_below_threshold_completes() -> None:
    pipeline = build_pipeline(
        eggs_and_toast_responder, clarification_threshold_kcal=3000
    )

    result = asyncio.run(pipeline.process_meal("2 eggs and toast"))

    assert not result.clarification_needed
    assert result.total_calories == 211
