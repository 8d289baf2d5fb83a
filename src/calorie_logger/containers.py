"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from calorie_logger.adapters.fdc_client import HttpxFdcClient
from calorie_logger.adapters.openai_text_client import OpenAITextClient
from calorie_logger.config import Settings, pipeline_options
from calorie_logger.services.cache import InMemoryCache
from calorie_logger.services.calories import CalorieResolver
from calorie_logger.services.decomposition import DecompositionService
from calorie_logger.services.estimator import LanguageModelEstimator
from calorie_logger.services.meals import MealLog
from calorie_logger.services.nutrition import NutritionService
from calorie_logger.services.pipeline import MealPipeline
from calorie_logger.services.portions import PortionResolver
from calorie_logger.services.rate_limit import TokenBucketLimiter
from calorie_logger.services.stats import StatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    pipeline: MealPipeline
    meal_log: MealLog
    stats_service: StatsService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    options = pipeline_options(resolved_settings)
    timeout = resolved_settings.request_timeout_seconds

    openai_client = OpenAITextClient.create(
        resolved_settings.openai_api_key, timeout_seconds=timeout
    )
    estimator = LanguageModelEstimator(
        client=openai_client,
        model=resolved_settings.openai_model,
        temperature=resolved_settings.openai_temperature,
        rate_limiter=TokenBucketLimiter(
            rate_per_second=resolved_settings.openai_requests_per_second
        ),
    )
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
        timeout_seconds=timeout,
    )
    nutrition_service = NutritionService(
        fdc_client=fdc_client,
        cache=InMemoryCache(),
        rate_limiter=TokenBucketLimiter(
            rate_per_second=resolved_settings.fdc_requests_per_second
        ),
    )
    pipeline = MealPipeline(
        decomposition=DecompositionService(
            estimator=estimator,
            identify_dishes_enabled=options.identify_dishes,
            ingredients_enabled=options.break_into_ingredients,
        ),
        portions=PortionResolver(
            estimator=estimator, enabled=options.estimate_portions
        ),
        calories=CalorieResolver(
            nutrition_service=nutrition_service,
            estimator=estimator,
            use_database=options.use_nutrition_database,
        ),
        clarification_threshold_kcal=options.clarification_threshold_kcal,
    )
    meal_log = MealLog()

    async def close_resources() -> None:
        await openai_client.close()
        await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        pipeline=pipeline,
        meal_log=meal_log,
        stats_service=StatsService(meal_log),
        close_resources=close_resources,
    )
