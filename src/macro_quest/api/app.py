"""FastAPI application factory."""

import base64
import binascii
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime
from uuid import UUID

from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import Response

from macro_quest.api.models import (
    AnalyzePayload,
    MealPayload,
    MealUpdatePayload,
    ProfilePayload,
    ProfileUpdatePayload,
)
from macro_quest.app_logging import configure_logging
from macro_quest.containers import AppContainer
from macro_quest.domain.meals import MealDraft
from macro_quest.domain.profiles import Profile
from macro_quest.services.goals import calculate_goals
from macro_quest.services.meals import MealValidationError
from macro_quest.services.vision import analysis_to_draft

_UNPROCESSABLE = 422
_TOO_LARGE = 413


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/goals/preview")
    async def preview_goals(payload: ProfilePayload) -> dict[str, object]:
        """Compute goals for an unsaved profile."""
        return jsonable_encoder(calculate_goals(_to_profile(payload)))

    @app.get("/users/{user_id}/profile")
    async def get_profile(user_id: UUID, request: Request) -> dict[str, object]:
        """Return the stored profile with its goals."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.get_profile(user_id)
        if profile is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _profile_response(profile)

    @app.put("/users/{user_id}/profile")
    async def save_profile(
        user_id: UUID, payload: ProfilePayload, request: Request
    ) -> dict[str, object]:
        """Create or replace a profile and recompute its goals."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.save_profile(
            user_id, _to_profile(payload)
        )
        return _profile_response(profile)

    @app.patch("/users/{user_id}/profile")
    async def update_profile(
        user_id: UUID, payload: ProfileUpdatePayload, request: Request
    ) -> dict[str, object]:
        """Apply a partial settings update."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.update_profile(
            user_id, payload.model_dump(exclude_unset=True)
        )
        if profile is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _profile_response(profile)

    @app.get("/users/{user_id}/goals")
    async def get_goals(
        user_id: UUID, request: Request, goal_type: str | None = None
    ) -> dict[str, object]:
        """Return goals, optionally for a different goal type."""
        state_container: AppContainer = request.app.state.container
        goals = state_container.profile_service.get_goals(user_id, goal_type)
        return jsonable_encoder(goals)

    @app.get("/users/{user_id}/meals")
    async def list_meals(  # noqa: PLR0913
        user_id: UUID,
        request: Request,
        q: str | None = None,
        day: date | None = Query(default=None, alias="date"),
        macro: str = "all",
        page: int = Query(default=1, ge=1),
    ) -> dict[str, object]:
        """Return one page of the filtered meal history."""
        state_container: AppContainer = request.app.state.container
        try:
            meal_page = state_container.meal_service.search_history(
                user_id, query=q, day=day, macro_filter=macro, page=page
            )
        except ValueError as exc:
            raise HTTPException(status_code=_UNPROCESSABLE, detail=str(exc)) from exc
        return jsonable_encoder(meal_page)

    @app.post("/users/{user_id}/meals", status_code=status.HTTP_201_CREATED)
    async def create_meal(
        user_id: UUID, payload: MealPayload, request: Request
    ) -> dict[str, object]:
        """Validate and log a manually entered meal."""
        state_container: AppContainer = request.app.state.container
        draft = MealDraft(source="manual", **payload.model_dump())
        try:
            meal = state_container.meal_service.add_meal(user_id, draft)
        except MealValidationError as exc:
            raise HTTPException(
                status_code=_UNPROCESSABLE,
                detail={"errors": exc.errors},
            ) from exc
        return jsonable_encoder(meal)

    @app.patch("/users/{user_id}/meals/{meal_id}")
    async def update_meal(
        user_id: UUID, meal_id: UUID, payload: MealUpdatePayload, request: Request
    ) -> dict[str, object]:
        """Edit a logged meal."""
        state_container: AppContainer = request.app.state.container
        try:
            meal = state_container.meal_service.update_meal(
                user_id,
                meal_id,
                payload.model_dump(exclude_unset=True, exclude_none=True),
            )
        except MealValidationError as exc:
            raise HTTPException(
                status_code=_UNPROCESSABLE,
                detail={"errors": exc.errors},
            ) from exc
        if meal is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return jsonable_encoder(meal)

    @app.delete(
        "/users/{user_id}/meals/{meal_id}", status_code=status.HTTP_204_NO_CONTENT
    )
    async def delete_meal(user_id: UUID, meal_id: UUID, request: Request) -> Response:
        """Delete a logged meal."""
        state_container: AppContainer = request.app.state.container
        if not state_container.meal_service.delete_meal(user_id, meal_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.post("/users/{user_id}/meals/analyze")
    async def analyze_meal(
        user_id: UUID, payload: AnalyzePayload, request: Request
    ) -> dict[str, object]:
        """Estimate nutrition from a photo and log it as an AI meal."""
        state_container: AppContainer = request.app.state.container
        image_bytes = _decode_image(payload.image)
        if len(image_bytes) > state_container.settings.max_image_bytes:
            raise HTTPException(
                status_code=_TOO_LARGE,
                detail="Image is too large.",
            )
        try:
            analysis = await state_container.food_analysis_service.analyze(
                image_bytes, payload.extra_text
            )
        except Exception as exc:
            logger.exception("Food analysis failed", extra={"user_id": str(user_id)})
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=_format_error(
                    state_container,
                    exc,
                    "Food analysis failed. Please try again or enter manually.",
                ),
            ) from exc

        response: dict[str, object] = {"analysis": analysis.model_dump(), "meal": None}
        if payload.save:
            meal = state_container.meal_service.add_meal(
                user_id, analysis_to_draft(analysis)
            )
            response["meal"] = jsonable_encoder(meal)
        return response

    @app.get("/users/{user_id}/dashboard")
    async def dashboard(
        user_id: UUID,
        request: Request,
        day: date | None = Query(default=None, alias="date"),
    ) -> dict[str, object]:
        """Return the daily stat panel."""
        state_container: AppContainer = request.app.state.container
        resolved_day = day or datetime.now(tz=UTC).date()
        return jsonable_encoder(
            state_container.stats_service.get_dashboard(user_id, resolved_day)
        )

    @app.get("/users/{user_id}/streak")
    async def streak(user_id: UUID, request: Request) -> dict[str, object]:
        """Return the logging streak."""
        state_container: AppContainer = request.app.state.container
        return jsonable_encoder(state_container.stats_service.get_streak(user_id))

    @app.get("/users/{user_id}/export")
    async def export_meals(user_id: UUID, request: Request) -> Response:
        """Download every meal as JSON."""
        state_container: AppContainer = request.app.state.container
        return Response(
            content=state_container.meal_service.export_meals(user_id),
            media_type="application/json",
            headers={"Content-Disposition": 'attachment; filename="meals.json"'},
        )

    return app


def _to_profile(payload: ProfilePayload) -> Profile:
    return Profile(**payload.model_dump())


def _profile_response(profile: Profile) -> dict[str, object]:
    """Serialize a profile with the goals derived from it."""
    return {
        "profile": jsonable_encoder(profile),
        "goals": jsonable_encoder(calculate_goals(profile)),
    }


def _decode_image(raw: str) -> bytes:
    """Decode a base64 image, accepting an optional data URL prefix."""
    _, _, data = raw.rpartition(",")
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Image must be base64 encoded.",
        ) from exc


def _format_error(state_container: AppContainer, exc: Exception, fallback: str) -> str:
    """Return a user-facing error message with local debug info."""
    if state_container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback
