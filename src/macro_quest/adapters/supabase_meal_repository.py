"""Supabase repository for meals."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from macro_quest.domain.meals import Meal, MealDraft
from macro_quest.services.meals import MealRepository
from macro_quest.services.stats import StatsRepository

_COLUMNS = (
    "id, food_name, calories, carbs, protein, fat, source, timestamp, "
    "portion, brand, notes"
)


@dataclass
class SupabaseMealRepository(MealRepository, StatsRepository):
    """Supabase implementation for meal storage and aggregation reads."""

    client: Client

    def list_meals(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Meal]:
        """Return meals newest first, optionally bounded (inclusive)."""
        query = self.client.table("meals").select(_COLUMNS).eq("user_id", str(user_id))
        if start is not None:
            query = query.gte("timestamp", start.isoformat())
        if end is not None:
            query = query.lte("timestamp", end.isoformat())
        response = query.order("timestamp", desc=True).execute()
        return [_parse_meal(row) for row in response.data or []]

    def list_meals_between(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[Meal]:
        """Return meals logged within the inclusive range."""
        return self.list_meals(user_id, start, end)

    def get_meal(self, user_id: UUID, meal_id: UUID) -> Meal | None:
        """Return a meal owned by the user."""
        response = (
            self.client.table("meals")
            .select(_COLUMNS)
            .eq("id", str(meal_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def create_meal(self, user_id: UUID, draft: MealDraft, logged_at: datetime) -> Meal:
        """Insert a meal row and return it."""
        response = (
            self.client.table("meals")
            .insert(
                {
                    "user_id": str(user_id),
                    "meal_name": draft.name,
                    "food_name": draft.name,
                    "calories": draft.calories,
                    "carbs": draft.carbs_g,
                    "protein": draft.protein_g,
                    "fat": draft.fat_g,
                    "source": draft.source,
                    "portion": draft.portion,
                    "brand": draft.brand,
                    "notes": draft.notes,
                    "meal_time": logged_at.isoformat(),
                    "timestamp": logged_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal")
        return _parse_meal(response.data[0])

    def update_meal(self, user_id: UUID, meal: Meal) -> None:
        """Update the editable columns of a meal row."""
        self.client.table("meals").update(
            {
                "meal_name": meal.name,
                "food_name": meal.name,
                "calories": meal.calories,
                "carbs": meal.carbs_g,
                "protein": meal.protein_g,
                "fat": meal.fat_g,
                "portion": meal.portion,
                "brand": meal.brand,
                "notes": meal.notes,
                "timestamp": meal.logged_at.isoformat(),
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).eq("id", str(meal.id)).eq("user_id", str(user_id)).execute()

    def delete_meal(self, user_id: UUID, meal_id: UUID) -> bool:
        """Delete a meal row owned by the user."""
        response = (
            self.client.table("meals")
            .delete()
            .eq("id", str(meal_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        return bool(response.data)


def _parse_meal(row: dict[str, object]) -> Meal:
    return Meal(
        id=UUID(str(row["id"])),
        name=str(row.get("food_name") or ""),
        calories=float(row.get("calories") or 0.0),
        carbs_g=float(row.get("carbs") or 0.0),
        protein_g=float(row.get("protein") or 0.0),
        fat_g=float(row.get("fat") or 0.0),
        source=str(row.get("source") or "manual"),
        logged_at=_parse_timestamp(row.get("timestamp")),
        portion=row.get("portion"),
        brand=row.get("brand"),
        notes=row.get("notes"),
    )


def _parse_timestamp(raw: object) -> datetime:
    if not isinstance(raw, str) or not raw:
        return datetime.min.replace(tzinfo=UTC)
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
