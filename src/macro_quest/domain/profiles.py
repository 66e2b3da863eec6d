"""Domain models for user profiles and macro goals."""

from dataclasses import dataclass
from uuid import UUID

GENDERS = ("male", "female", "other")
ACTIVITY_LEVELS = ("sedentary", "light", "moderate", "active", "very_active")
GOAL_TYPES = ("maintain", "cut", "bulk")


@dataclass(frozen=True)
class Profile:
    """Biometric and preference snapshot collected at onboarding."""

    gender: str | None = None
    weight: float | None = None
    height: float | None = None
    age: int | None = None
    activity_level: str | None = None
    goal_type: str = "maintain"
    id: UUID | None = None
    name: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class Goals:
    """Daily calorie and macro targets."""

    calories: int
    carbs_g: int
    protein_g: int
    fat_g: int


ZERO_GOALS = Goals(calories=0, carbs_g=0, protein_g=0, fat_g=0)
