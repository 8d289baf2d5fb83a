"""Statistics over the meal log."""

from dataclasses import dataclass
from datetime import UTC, date, datetime

from calorie_logger.domain.meals import MealLogEntry
from calorie_logger.services.meals import MealLog


@dataclass(frozen=True)
class DailyStats:
    """Calorie totals for one UTC day."""

    day: date
    total_calories: int
    meal_count: int


@dataclass(frozen=True)
class HistorySummary:
    """A filtered slice of the log, newest first, with aggregates."""

    entries: list[MealLogEntry]
    total_calories: int
    meal_count: int
    average_calories: float


@dataclass
class StatsService:
    """Computes daily totals and history views from the meal log."""

    meal_log: MealLog

    def get_day(self, day: date | None = None) -> DailyStats:
        """Return totals for a day, defaulting to today in UTC."""
        resolved = day or datetime.now(tz=UTC).date()
        return _aggregate_day(resolved, self.meal_log.list_for_date(resolved))

    def get_history(
        self, day: date | None = None, limit: int | None = None
    ) -> HistorySummary:
        """Return entries newest first, optionally for one day and capped."""
        entries = (
            self.meal_log.list_for_date(day)
            if day is not None
            else self.meal_log.entries()
        )
        ordered = sorted(
            reversed(entries), key=lambda entry: entry.timestamp, reverse=True
        )
        if limit is not None:
            ordered = ordered[: max(limit, 0)]
        total = sum(entry.total_calories for entry in ordered)
        count = len(ordered)
        return HistorySummary(
            entries=ordered,
            total_calories=total,
            meal_count=count,
            average_calories=total / count if count else 0.0,
        )


def _aggregate_day(day: date, entries: list[MealLogEntry]) -> DailyStats:
    """Total entries already selected for ``day``."""
    return DailyStats(
        day=day,
        total_calories=sum(entry.total_calories for entry in entries),
        meal_count=len(entries),
    )
