"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from calorie_logger.api.models import (
    DailyStatsPayload,
    FoodPayload,
    LogMealRequest,
    MealLogEntryPayload,
    MealPayload,
)
from calorie_logger.app_logging import configure_logging
from calorie_logger.containers import AppContainer
from calorie_logger.domain.errors import InputError, InternalFailure, MealNotFoundError
from calorie_logger.domain.meals import FoodEstimate, MealLogEntry, MealResult
from calorie_logger.services.stats import DailyStats

GENERIC_FAILURE = "Sorry, couldn't process that meal. Please try again."


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Calorie logger ready (model=%s, fdc key=%s)",
            container.settings.openai_model,
            "demo" if container.settings.uses_demo_fdc_key else "custom",
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(InputError)
    async def input_error_handler(_: Request, exc: InputError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(MealNotFoundError)
    async def not_found_handler(_: Request, exc: MealNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400, content={"error": _validation_message(exc)}
        )

    @app.exception_handler(InternalFailure)
    async def internal_failure_handler(_: Request, __: InternalFailure) -> JSONResponse:
        return JSONResponse(status_code=500, content={"error": GENERIC_FAILURE})

    @app.get("/api/health")
    async def health(request: Request) -> dict[str, object]:
        """Report configuration status and log size."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings
        return {
            "status": "ok",
            "openaiConfigured": bool(settings.openai_api_key.strip()),
            "fdcApiKey": "demo" if settings.uses_demo_fdc_key else "custom",
            "model": settings.openai_model,
            "mealCount": len(state_container.meal_log),
        }

    @app.post("/api/logMeal")
    async def log_meal(body: LogMealRequest, request: Request) -> dict[str, object]:
        """Estimate a meal and log it unless clarification is needed."""
        state_container: AppContainer = request.app.state.container
        description = (body.description or "").strip()
        if not description:
            raise InputError("Description is required")

        edit_id: UUID | None = None
        if body.is_edit:
            edit_id = _parse_meal_id(body.meal_id)
            if edit_id is None or state_container.meal_log.get(edit_id) is None:
                raise MealNotFoundError("Meal not found")

        try:
            result = await state_container.pipeline.process_meal(description)
            if not result.clarification_needed:
                _store_meal(state_container, description, result, edit_id)
        except InputError:
            raise
        except Exception as exc:
            logger.exception("Error processing meal")
            raise InternalFailure(GENERIC_FAILURE) from exc

        return {
            "meal": _meal_payload(result),
            "mealLog": _log_payload(state_container),
            "dailyStats": _daily_payload(state_container.stats_service.get_day()),
        }

    @app.get("/api/history")
    async def history(
        request: Request,
        date_filter: str | None = Query(default=None, alias="date"),
        limit: int | None = Query(default=None, ge=1),
    ) -> dict[str, object]:
        """Return logged meals newest first with aggregate stats."""
        state_container: AppContainer = request.app.state.container
        day = _parse_day(date_filter)
        summary = state_container.stats_service.get_history(day=day, limit=limit)
        return {
            "mealLog": [_entry_payload(entry) for entry in summary.entries],
            "stats": {
                "date": day.isoformat() if day else None,
                "totalCalories": summary.total_calories,
                "mealCount": summary.meal_count,
                "averageCalories": round(summary.average_calories, 1),
            },
        }

    @app.delete("/api/meal/{meal_id}")
    async def delete_meal(meal_id: str, request: Request) -> dict[str, object]:
        """Delete a meal by id; unknown ids are not an error."""
        state_container: AppContainer = request.app.state.container
        parsed = _parse_meal_id(meal_id)
        deleted = parsed is not None and state_container.meal_log.delete(parsed)
        return {
            "success": True,
            "deleted": deleted,
            "mealLog": _log_payload(state_container),
        }

    return app


def _store_meal(
    state_container: AppContainer,
    description: str,
    result: MealResult,
    edit_id: UUID | None,
) -> MealLogEntry:
    """Replace the edited meal, or append when it is new or already gone."""
    if edit_id is not None:
        updated = state_container.meal_log.replace(edit_id, description, result)
        if updated is not None:
            return updated
    return state_container.meal_log.append(description, result)


def _log_payload(state_container: AppContainer) -> list[dict[str, object]]:
    return [_entry_payload(entry) for entry in state_container.meal_log.entries()]


def _parse_meal_id(raw: str | None) -> UUID | None:
    if not raw:
        return None
    try:
        return UUID(raw)
    except ValueError:
        return None


def _parse_day(raw: str | None) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise InputError("date must be formatted as YYYY-MM-DD") from exc


def _food_payload(food: FoodEstimate) -> FoodPayload:
    return FoodPayload(
        name=food.name,
        calories=food.calories,
        portion=food.portion,
        grams=food.grams,
        source=str(food.source),
        dish=food.dish,
    )


def _meal_payload(result: MealResult) -> dict[str, object]:
    if result.clarification_needed:
        payload = MealPayload(clarification_needed=True, question=result.question)
    else:
        payload = MealPayload(
            clarification_needed=False,
            foods=[_food_payload(food) for food in result.foods],
            total_calories=result.total_calories,
        )
    return payload.model_dump(by_alias=True, exclude_none=True)


def _entry_payload(entry: MealLogEntry) -> dict[str, object]:
    return MealLogEntryPayload(
        id=str(entry.id),
        timestamp=entry.timestamp.isoformat(),
        description=entry.description,
        foods=[_food_payload(food) for food in entry.foods],
        total_calories=entry.total_calories,
    ).model_dump(by_alias=True)


def _daily_payload(stats: DailyStats) -> dict[str, object]:
    return DailyStatsPayload(
        date=stats.day.isoformat(),
        total_calories=stats.total_calories,
        meal_count=stats.meal_count,
    ).model_dump(by_alias=True)


def _validation_message(exc: RequestValidationError) -> str:
    """Summarize the first validation error without echoing the input."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(
        str(part) for part in first.get("loc", ()) if part not in {"body", "query"}
    )
    message = str(first.get("msg", "invalid value"))
    if location:
        return f"Invalid request: {location}: {message}"
    return f"Invalid request: {message}"
