"""Supabase repository for user profiles."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from macro_quest.domain.profiles import Goals, Profile
from macro_quest.services.profiles import ProfileRepository

_COLUMNS = "id, name, email, age, gender, weight, height, activity, goal_type"


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profiles."""

    client: Client

    def get_profile(self, user_id: UUID) -> Profile | None:
        """Return the profile row for a user."""
        response = (
            self.client.table("profiles")
            .select(_COLUMNS)
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def upsert_profile(self, user_id: UUID, profile: Profile, goals: Goals) -> Profile:
        """Insert or replace a profile row with its goal columns."""
        response = (
            self.client.table("profiles")
            .upsert(
                {
                    "id": str(user_id),
                    "name": profile.name,
                    "email": profile.email,
                    "age": profile.age,
                    "gender": profile.gender,
                    "weight": profile.weight,
                    "height": profile.height,
                    "activity": profile.activity_level,
                    "goal_type": profile.goal_type,
                    "daily_calories": goals.calories,
                    "carbs_goal": goals.carbs_g,
                    "protein_goal": goals.protein_g,
                    "fat_goal": goals.fat_g,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save profile")
        return _parse_profile(response.data[0])


def _parse_profile(row: dict[str, object]) -> Profile:
    return Profile(
        id=UUID(str(row["id"])),
        name=row.get("name"),
        email=row.get("email"),
        age=int(row["age"]) if row.get("age") is not None else None,
        gender=row.get("gender"),
        weight=float(row["weight"]) if row.get("weight") is not None else None,
        height=float(row["height"]) if row.get("height") is not None else None,
        activity_level=row.get("activity"),
        goal_type=str(row.get("goal_type") or "maintain"),
    )
