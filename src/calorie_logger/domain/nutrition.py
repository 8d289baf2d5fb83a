"""Nutrition domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NutritionMatch:
    """Energy density of the first database candidate for a food name."""

    fdc_id: int
    description: str
    calories_per_100g: float
