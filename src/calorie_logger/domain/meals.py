"""Domain models for meal estimation and logging."""

import math
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID, uuid4

DEFAULT_PORTION_GRAMS = 50.0
DEFAULT_HUMAN_PORTION = "standard serving"


class EstimateSource(StrEnum):
    """Where a calorie figure came from."""

    DATABASE = "database"
    LANGUAGE_MODEL = "language-model"
    HEURISTIC = "heuristic"


@dataclass(frozen=True)
class Ingredient:
    """Raw-food constituent of a dish, with the context it was found in."""

    name: str
    dish: str
    description: str


@dataclass(frozen=True)
class Portion:
    """Estimated quantity of an ingredient."""

    ingredient: str
    grams: float
    human_portion: str

    @classmethod
    def default(cls, ingredient: str) -> "Portion":
        """Return the fixed fallback portion."""
        return cls(
            ingredient=ingredient,
            grams=DEFAULT_PORTION_GRAMS,
            human_portion=DEFAULT_HUMAN_PORTION,
        )


@dataclass(frozen=True)
class FoodEstimate:
    """Calorie estimate for a single ingredient."""

    name: str
    calories: int
    portion: str
    grams: float
    source: EstimateSource
    dish: str | None = None
    match_id: int | None = None


@dataclass(frozen=True)
class MealResult:
    """Outcome of a pipeline run: either a clarification or a finished meal."""

    clarification_needed: bool
    question: str | None = None
    foods: tuple[FoodEstimate, ...] = ()
    total_calories: int = 0

    @classmethod
    def clarification(cls, question: str) -> "MealResult":
        """Build a non-terminal result asking the user for more detail."""
        return cls(clarification_needed=True, question=question)

    @classmethod
    def complete(cls, foods: list[FoodEstimate]) -> "MealResult":
        """Build a terminal result, recomputing the total from the foods."""
        items = tuple(foods)
        return cls(
            clarification_needed=False,
            foods=items,
            total_calories=sum(food.calories for food in items),
        )


@dataclass(frozen=True)
class MealLogEntry:
    """A finalized meal stored in the log."""

    description: str
    foods: tuple[FoodEstimate, ...]
    total_calories: int
    id: UUID = field(default_factory=uuid4)
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    @classmethod
    def from_result(cls, description: str, result: MealResult) -> "MealLogEntry":
        """Create an entry from a terminal meal result."""
        if result.clarification_needed:
            raise ValueError("Cannot log a meal that still needs clarification")
        return cls(
            description=description,
            foods=result.foods,
            total_calories=sum(food.calories for food in result.foods),
        )

    def replaced_by(self, description: str, result: MealResult) -> "MealLogEntry":
        """Return the edited meal under the same id and creation time."""
        fresh = MealLogEntry.from_result(description, result)
        return replace(fresh, id=self.id, timestamp=self.timestamp)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves going up."""
    return int(math.floor(value + 0.5))


def merge_clarification(original: str, clarification: str) -> str:
    """Join the original description with the user's clarification."""
    return f"{original.strip()} {clarification.strip()}".strip()
