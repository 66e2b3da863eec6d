"""Domain models for meal logging."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

MEAL_SOURCES = ("ai", "manual")


@dataclass(frozen=True)
class MealDraft:
    """Candidate meal before it is persisted."""

    name: str
    calories: float
    carbs_g: float
    protein_g: float
    fat_g: float
    source: str = "manual"
    logged_at: datetime | None = None
    portion: str | None = None
    brand: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Meal:
    """A single logged food intake event."""

    id: UUID
    name: str
    calories: float
    carbs_g: float
    protein_g: float
    fat_g: float
    source: str
    logged_at: datetime
    portion: str | None = None
    brand: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class MealPage:
    """One page of a filtered meal list."""

    items: list[Meal]
    page: int
    page_size: int
    total_items: int
    total_pages: int
