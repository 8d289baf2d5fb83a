"""Shared test fixtures."""

import json
from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from calorie_logger.adapters.fdc_client import FdcClient
from calorie_logger.config import Settings
from calorie_logger.containers import AppContainer
from calorie_logger.services.cache import InMemoryCache
from calorie_logger.services.calories import CalorieResolver
from calorie_logger.services.decomposition import DecompositionService
from calorie_logger.services.estimator import (
    LanguageModelEstimator,
    TextGenerationClient,
)
from calorie_logger.services.meals import MealLog
from calorie_logger.services.nutrition import NutritionService
from calorie_logger.services.pipeline import MealPipeline
from calorie_logger.services.portions import PortionResolver
from calorie_logger.services.stats import StatsService

EGGS_AND_TOAST_GRAMS = {
    ("egg", "eggs"): 50,
    ("butter", "eggs"): 5,
    ("bread", "toast"): 30,
    ("butter", "toast"): 5,
}


@dataclass
class FakeTextClient(TextGenerationClient):
    """Fake text client that answers through a responder function."""

    responder: Callable[[str], str]
    prompts: list[str] = field(default_factory=list)

    async def generate(
        self, *, model: str, prompt: str, temperature: float | None
    ) -> str:
        self.prompts.append(prompt)
        return self.responder(prompt)


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with in-memory responses."""

    search_payload: dict[str, object] = field(
        default_factory=lambda: {
            "foods": [
                {
                    "fdcId": 171477,
                    "description": "Chicken, broilers or fryers, breast, cooked",
                    "dataType": "SR Legacy",
                }
            ]
        }
    )
    food_payload: dict[str, object] = field(
        default_factory=lambda: {
            "fdcId": 171477,
            "description": "Chicken, broilers or fryers, breast, cooked",
            "foodNutrients": [
                {
                    "nutrient": {"id": 1003, "name": "Protein", "unitName": "g"},
                    "amount": 31,
                },
                {
                    "nutrient": {"id": 1008, "name": "Energy", "unitName": "kcal"},
                    "amount": 165,
                },
            ],
        }
    )
    queries: list[str] = field(default_factory=list)
    food_ids: list[int] = field(default_factory=list)

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        self.queries.append(query)
        return self.search_payload

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        self.food_ids.append(fdc_id)
        return self.food_payload


@dataclass
class FailingFdcClient(FdcClient):
    """FDC client whose every call fails."""

    calls: int = 0

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        self.calls += 1
        raise RuntimeError("fdc unavailable")

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        self.calls += 1
        raise RuntimeError("fdc unavailable")


def empty_fdc_client() -> FakeFdcClient:
    """FDC client that never finds anything."""
    return FakeFdcClient(search_payload={"foods": []})


def failing_responder(prompt: str) -> str:
    raise RuntimeError("language model unavailable")


def eggs_and_toast_responder(prompt: str) -> str:
    """Answer decomposition and portion prompts; fail calorie prompts."""
    if prompt.startswith("Identify the separate dishes"):
        return 'Here are the dishes:\n```json\n["eggs", "toast"]\n```'
    if prompt.startswith("Break this dish"):
        if 'DISH: "eggs"' in prompt:
            return '["egg", "egg", "butter"]'
        return '["bread", "butter"]'
    if prompt.startswith("Estimate a realistic amount"):
        for (ingredient, dish), grams in EGGS_AND_TOAST_GRAMS.items():
            if f'INGREDIENT: "{ingredient}"' in prompt and f'DISH: "{dish}"' in prompt:
                return json.dumps({"grams": grams, "portion": f"{grams} g"})
    raise RuntimeError("calorie estimation unavailable")


def build_estimator(responder: Callable[[str], str]) -> LanguageModelEstimator:
    return LanguageModelEstimator(client=FakeTextClient(responder), model="test-model")


def build_pipeline(
    responder: Callable[[str], str],
    fdc_client: FdcClient | None = None,
    clarification_threshold_kcal: int | None = None,
) -> MealPipeline:
    estimator = build_estimator(responder)
    nutrition_service = NutritionService(
        fdc_client=fdc_client or empty_fdc_client(),
        cache=InMemoryCache(),
        retry_delay_seconds=0,
    )
    return MealPipeline(
        decomposition=DecompositionService(estimator=estimator),
        portions=PortionResolver(estimator=estimator),
        calories=CalorieResolver(
            nutrition_service=nutrition_service, estimator=estimator
        ),
        clarification_threshold_kcal=clarification_threshold_kcal,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key", fdc_api_key="fdc-key")


@pytest.fixture
def meal_log() -> MealLog:
    return MealLog()


@pytest.fixture
def container(settings: Settings, meal_log: MealLog) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        pipeline=build_pipeline(eggs_and_toast_responder),
        meal_log=meal_log,
        stats_service=StatsService(meal_log),
        close_resources=close_resources,
    )
