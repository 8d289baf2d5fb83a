"""Pydantic models for the HTTP API."""

from pydantic import BaseModel, ConfigDict, Field


class LogMealRequest(BaseModel):
    """Body of a log-meal request."""

    model_config = ConfigDict(populate_by_name=True)

    description: str | None = None
    is_edit: bool = Field(default=False, alias="isEdit")
    meal_id: str | None = Field(default=None, alias="mealId")


class FoodPayload(BaseModel):
    """Single food estimate as returned to clients."""

    name: str
    calories: int
    portion: str
    grams: float
    source: str
    dish: str | None = None


class MealPayload(BaseModel):
    """Meal result as returned to clients."""

    model_config = ConfigDict(populate_by_name=True)

    clarification_needed: bool = Field(alias="clarificationNeeded")
    question: str | None = None
    foods: list[FoodPayload] | None = None
    total_calories: int | None = Field(default=None, alias="totalCalories")


class MealLogEntryPayload(BaseModel):
    """Logged meal as returned to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    timestamp: str
    description: str
    clarification_needed: bool = Field(default=False, alias="clarificationNeeded")
    foods: list[FoodPayload]
    total_calories: int = Field(alias="totalCalories")


class DailyStatsPayload(BaseModel):
    """Totals for one day."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    total_calories: int = Field(alias="totalCalories")
    meal_count: int = Field(alias="mealCount")
