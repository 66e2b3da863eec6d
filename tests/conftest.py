"""Shared test fixtures."""

import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from macro_quest.config import Settings
from macro_quest.containers import AppContainer
from macro_quest.domain.meals import Meal, MealDraft
from macro_quest.domain.profiles import Goals, Profile
from macro_quest.domain.stats import StreakRecord
from macro_quest.services.meals import MealRepository, MealService
from macro_quest.services.profiles import ProfileRepository, ProfileService
from macro_quest.services.stats import (
    StatsRepository,
    StatsService,
    StreakRepository,
)
from macro_quest.services.vision import FoodAnalysisService, VisionClient


def make_meal(  # noqa: PLR0913
    name: str = "Chicken salad",
    calories: float = 450,
    carbs_g: float = 20,
    protein_g: float = 40,
    fat_g: float = 22,
    logged_at: datetime | None = None,
    source: str = "manual",
) -> Meal:
    """Build a stored meal for tests."""
    return Meal(
        id=uuid4(),
        name=name,
        calories=calories,
        carbs_g=carbs_g,
        protein_g=protein_g,
        fat_g=fat_g,
        source=source,
        logged_at=logged_at or datetime.now(tz=UTC),
    )


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[UUID, Profile] = field(default_factory=dict)
    goals: dict[UUID, Goals] = field(default_factory=dict)

    def get_profile(self, user_id: UUID) -> Profile | None:
        return self.profiles.get(user_id)

    def upsert_profile(self, user_id: UUID, profile: Profile, goals: Goals) -> Profile:
        self.profiles[user_id] = profile
        self.goals[user_id] = goals
        return profile


@dataclass
class InMemoryMealRepository(MealRepository, StatsRepository):
    """In-memory meal repository for tests."""

    meals: dict[UUID, list[Meal]] = field(default_factory=dict)

    def list_meals(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Meal]:
        results = [
            meal
            for meal in self.meals.get(user_id, [])
            if (start is None or meal.logged_at >= start)
            and (end is None or meal.logged_at <= end)
        ]
        return sorted(results, key=lambda meal: meal.logged_at, reverse=True)

    def list_meals_between(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[Meal]:
        return self.list_meals(user_id, start, end)

    def get_meal(self, user_id: UUID, meal_id: UUID) -> Meal | None:
        for meal in self.meals.get(user_id, []):
            if meal.id == meal_id:
                return meal
        return None

    def create_meal(self, user_id: UUID, draft: MealDraft, logged_at: datetime) -> Meal:
        meal = Meal(
            id=uuid4(),
            name=draft.name,
            calories=draft.calories,
            carbs_g=draft.carbs_g,
            protein_g=draft.protein_g,
            fat_g=draft.fat_g,
            source=draft.source,
            logged_at=logged_at,
            portion=draft.portion,
            brand=draft.brand,
            notes=draft.notes,
        )
        self.meals.setdefault(user_id, []).append(meal)
        return meal

    def update_meal(self, user_id: UUID, meal: Meal) -> None:
        self.meals[user_id] = [
            meal if existing.id == meal.id else existing
            for existing in self.meals.get(user_id, [])
        ]

    def delete_meal(self, user_id: UUID, meal_id: UUID) -> bool:
        existing = self.meals.get(user_id, [])
        remaining = [meal for meal in existing if meal.id != meal_id]
        self.meals[user_id] = remaining
        return len(remaining) != len(existing)

    def add(self, user_id: UUID, meal: Meal) -> Meal:
        self.meals.setdefault(user_id, []).append(meal)
        return meal


@dataclass
class InMemoryStreakRepository(StreakRepository):
    """In-memory streak repository for tests."""

    streaks: dict[UUID, StreakRecord] = field(default_factory=dict)
    saves: int = 0

    def get_streak(self, user_id: UUID) -> StreakRecord | None:
        return self.streaks.get(user_id)

    def save_streak(self, user_id: UUID, record: StreakRecord) -> None:
        self.saves += 1
        self.streaks[user_id] = replace(record)


@dataclass
class FakeVisionClient(VisionClient):
    """Fake vision client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "food_name": "Caesar salad",
            "calories": 352.6,
            "carbs": 12.4,
            "protein": 18.5,
            "fat": 26.2,
        }
    )
    error: Exception | None = None
    prompts: list[str] = field(default_factory=list)
    image_urls: list[str] = field(default_factory=list)

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.prompts.append(prompt)
        self.image_urls.append(image_data_url)
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass
class Services:
    """Service graph over in-memory repositories."""

    profile_repository: InMemoryProfileRepository
    meal_repository: InMemoryMealRepository
    streak_repository: InMemoryStreakRepository
    profile_service: ProfileService
    stats_service: StatsService
    meal_service: MealService


def build_services() -> Services:
    """Wire services over fresh in-memory repositories."""
    profile_repository = InMemoryProfileRepository()
    meal_repository = InMemoryMealRepository()
    streak_repository = InMemoryStreakRepository()
    profile_service = ProfileService(profile_repository)
    stats_service = StatsService(
        repository=meal_repository,
        streak_repository=streak_repository,
        profile_service=profile_service,
    )
    meal_service = MealService(repository=meal_repository, stats_service=stats_service)
    return Services(
        profile_repository=profile_repository,
        meal_repository=meal_repository,
        streak_repository=streak_repository,
        profile_service=profile_service,
        stats_service=stats_service,
        meal_service=meal_service,
    )


@pytest.fixture(autouse=True)
def _propagate_app_logs() -> None:
    """Let caplog see app logs after configure_logging disabled propagation."""
    logging.getLogger("macro_quest").propagate = True


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=(
            "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
            "eyJyb2xlIjoic2VydmljZV9yb2xlIn0."
            "c2lnbmF0dXJl"
        ),
        openai_api_key="openai-key",
        environment="test",
    )


@pytest.fixture
def services() -> Services:
    return build_services()


@pytest.fixture
def vision_client() -> FakeVisionClient:
    return FakeVisionClient()


@pytest.fixture
def container(
    settings: Settings, services: Services, vision_client: FakeVisionClient
) -> AppContainer:
    food_analysis_service = FoodAnalysisService(
        client=vision_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        profile_service=services.profile_service,
        meal_service=services.meal_service,
        stats_service=services.stats_service,
        food_analysis_service=food_analysis_service,
        close_resources=close_resources,
    )
