"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from calorie_logger.services.pipeline import PipelineOptions

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEMO_FDC_API_KEY = "DEMO_KEY"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float | None = 0.2
    fdc_api_key: str = DEMO_FDC_API_KEY
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    request_timeout_seconds: float = 10.0
    openai_requests_per_second: float = 2.0
    fdc_requests_per_second: float = 4.0
    identify_dishes: bool = True
    break_into_ingredients: bool = True
    estimate_portions: bool = True
    use_nutrition_database: bool = True
    clarification_threshold_kcal: int | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def uses_demo_fdc_key(self) -> bool:
        """Return true when no personal FDC key is configured."""
        return self.fdc_api_key.strip() in {"", DEMO_FDC_API_KEY}


def pipeline_options(settings: Settings) -> PipelineOptions:
    """Build pipeline stage toggles from settings."""
    threshold = settings.clarification_threshold_kcal
    return PipelineOptions(
        identify_dishes=settings.identify_dishes,
        break_into_ingredients=settings.break_into_ingredients,
        estimate_portions=settings.estimate_portions,
        use_nutrition_database=settings.use_nutrition_database,
        clarification_threshold_kcal=threshold if threshold and threshold > 0 else None,
    )
