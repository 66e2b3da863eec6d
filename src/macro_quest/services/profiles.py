"""Profile service: onboarding data and stored goals."""

from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID

from macro_quest.domain.profiles import ZERO_GOALS, Goals, Profile
from macro_quest.services.goals import calculate_goals


class ProfileRepository(Protocol):
    """Persistence interface for profiles."""

    def get_profile(self, user_id: UUID) -> Profile | None:
        """Return the stored profile, if any."""

    def upsert_profile(self, user_id: UUID, profile: Profile, goals: Goals) -> Profile:
        """Insert or replace a profile together with its goal columns."""


@dataclass
class ProfileService:
    """Service for reading and saving user profiles."""

    repository: ProfileRepository

    def get_profile(self, user_id: UUID) -> Profile | None:
        """Return the user's profile, or None before onboarding."""
        return self.repository.get_profile(user_id)

    def save_profile(self, user_id: UUID, profile: Profile) -> Profile:
        """Persist a profile and its freshly computed goals."""
        goals = calculate_goals(profile)
        return self.repository.upsert_profile(
            user_id, replace(profile, id=user_id), goals
        )

    def update_profile(
        self, user_id: UUID, updates: dict[str, object]
    ) -> Profile | None:
        """Merge a partial update into the stored profile and save it."""
        current = self.repository.get_profile(user_id)
        if current is None:
            return None
        allowed = {
            key: value
            for key, value in updates.items()
            if key in _EDITABLE_FIELDS
        }
        return self.save_profile(user_id, replace(current, **allowed))

    def get_goals(self, user_id: UUID, goal_type: str | None = None) -> Goals:
        """Return goals for the stored profile, zero when none exists."""
        profile = self.repository.get_profile(user_id)
        if profile is None:
            return ZERO_GOALS
        return calculate_goals(profile, goal_type)

    def is_profile_complete(self, user_id: UUID) -> bool:
        """Return True once onboarding filled in name, age, weight, height."""
        profile = self.repository.get_profile(user_id)
        return (
            profile is not None
            and bool(profile.name)
            and bool(profile.age)
            and bool(profile.weight)
            and bool(profile.height)
        )


_EDITABLE_FIELDS = frozenset(
    {
        "gender",
        "weight",
        "height",
        "age",
        "activity_level",
        "goal_type",
        "name",
        "email",
    }
)
