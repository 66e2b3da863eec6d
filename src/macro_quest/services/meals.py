"""Meal logging service."""

import json
import logging
from dataclasses import asdict, dataclass, replace
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from macro_quest.domain.meals import Meal, MealDraft, MealPage
from macro_quest.services.history import DEFAULT_PAGE_SIZE, filter_meals, paginate
from macro_quest.services.stats import StatsService, day_bounds, utc_day
from macro_quest.services.validation import macro_mismatch_warning, validate_meal

_EDITABLE_FIELDS = frozenset(
    {
        "name",
        "calories",
        "carbs_g",
        "protein_g",
        "fat_g",
        "logged_at",
        "portion",
        "brand",
        "notes",
    }
)

_logger = logging.getLogger(__name__)


class MealValidationError(ValueError):
    """Raised when a manual meal fails validation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class MealRepository(Protocol):
    """Persistence interface for meals."""

    def list_meals(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Meal]:
        """Return a user's meals, newest first, optionally within a range."""

    def get_meal(self, user_id: UUID, meal_id: UUID) -> Meal | None:
        """Return a meal owned by the user."""

    def create_meal(self, user_id: UUID, draft: MealDraft, logged_at: datetime) -> Meal:
        """Insert a meal and return the stored row."""

    def update_meal(self, user_id: UUID, meal: Meal) -> None:
        """Replace the editable fields of a stored meal."""

    def delete_meal(self, user_id: UUID, meal_id: UUID) -> bool:
        """Delete a meal; return False when nothing was deleted."""


@dataclass
class MealService:
    """Service that validates, stores and queries meals."""

    repository: MealRepository
    stats_service: StatsService
    page_size: int = DEFAULT_PAGE_SIZE

    def list_meals(self, user_id: UUID, day: date | None = None) -> list[Meal]:
        """Return meals newest first, optionally for one UTC day."""
        if day is None:
            return self.repository.list_meals(user_id)
        start, end = day_bounds(day)
        return self.repository.list_meals(user_id, start, end)

    def add_meal(
        self, user_id: UUID, draft: MealDraft, validate: bool | None = None
    ) -> Meal:
        """Validate and persist a meal, then advance the logging streak.

        Manual meals are validated by default; AI estimates skip the
        blocking checks unless ``validate`` is set.
        """
        should_validate = draft.source == "manual" if validate is None else validate
        if should_validate:
            errors = validate_meal(draft)
            if errors:
                raise MealValidationError(errors)
        else:
            warning = macro_mismatch_warning(draft)
            if warning:
                _logger.warning("%s (source=%s)", warning, draft.source)

        now = datetime.now(tz=UTC)
        meal = self.repository.create_meal(user_id, draft, draft.logged_at or now)
        _logger.info(
            "Meal saved: user_id=%s meal_id=%s source=%s", user_id, meal.id, meal.source
        )
        self.stats_service.record_meal_logged(user_id, utc_day(now))
        return meal

    def update_meal(
        self, user_id: UUID, meal_id: UUID, updates: dict[str, object]
    ) -> Meal | None:
        """Apply edits to a meal; None when the user has no such meal."""
        current = self.repository.get_meal(user_id, meal_id)
        if current is None:
            return None
        changes = {
            key: value
            for key, value in updates.items()
            if key in _EDITABLE_FIELDS and value is not None
        }
        updated = replace(current, **changes)
        if updated.source == "manual":
            errors = validate_meal(_as_draft(updated))
            if errors:
                raise MealValidationError(errors)
        self.repository.update_meal(user_id, updated)
        return updated

    def delete_meal(self, user_id: UUID, meal_id: UUID) -> bool:
        """Delete a meal owned by the user."""
        return self.repository.delete_meal(user_id, meal_id)

    def search_history(  # noqa: PLR0913
        self,
        user_id: UUID,
        query: str | None = None,
        day: date | None = None,
        macro_filter: str | None = "all",
        page: int = 1,
    ) -> MealPage:
        """Return one page of the user's filtered meal history."""
        meals = filter_meals(
            self.repository.list_meals(user_id), query, day, macro_filter
        )
        return paginate(meals, page, self.page_size)

    def export_meals(self, user_id: UUID) -> str:
        """Return every meal of the user as a JSON document."""
        meals = self.repository.list_meals(user_id)
        return json.dumps([_serialize_meal(meal) for meal in meals], indent=2)


def _as_draft(meal: Meal) -> MealDraft:
    return MealDraft(
        name=meal.name,
        calories=meal.calories,
        carbs_g=meal.carbs_g,
        protein_g=meal.protein_g,
        fat_g=meal.fat_g,
        source=meal.source,
        logged_at=meal.logged_at,
        portion=meal.portion,
        brand=meal.brand,
        notes=meal.notes,
    )


def _serialize_meal(meal: Meal) -> dict[str, object]:
    payload = asdict(meal)
    payload["id"] = str(meal.id)
    payload["logged_at"] = meal.logged_at.isoformat()
    return payload
