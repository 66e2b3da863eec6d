"""Supabase repository for logging streaks."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from macro_quest.domain.stats import StreakRecord
from macro_quest.services.stats import StreakRepository


@dataclass
class SupabaseStreakRepository(StreakRepository):
    """Supabase implementation for streaks."""

    client: Client

    def get_streak(self, user_id: UUID) -> StreakRecord | None:
        """Return the streak row for a user."""
        response = (
            self.client.table("streaks")
            .select("current_streak, longest_streak, last_logged")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        last_logged = row.get("last_logged")
        return StreakRecord(
            current_streak=int(row.get("current_streak") or 0),
            longest_streak=int(row.get("longest_streak") or 0),
            last_logged_date=date.fromisoformat(last_logged)
            if isinstance(last_logged, str) and last_logged
            else None,
        )

    def save_streak(self, user_id: UUID, record: StreakRecord) -> None:
        """Upsert the streak row for a user."""
        self.client.table("streaks").upsert(
            {
                "user_id": str(user_id),
                "current_streak": record.current_streak,
                "longest_streak": record.longest_streak,
                "last_logged": record.last_logged_date.isoformat()
                if record.last_logged_date
                else None,
            },
            on_conflict="user_id",
        ).execute()
