"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from macro_quest.adapters.openai_vision_client import OpenAIVisionClient
from macro_quest.adapters.supabase_meal_repository import SupabaseMealRepository
from macro_quest.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from macro_quest.adapters.supabase_streak_repository import SupabaseStreakRepository
from macro_quest.config import Settings
from macro_quest.services.meals import MealService
from macro_quest.services.profiles import ProfileService
from macro_quest.services.stats import StatsService
from macro_quest.services.vision import FoodAnalysisService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    profile_service: ProfileService
    meal_service: MealService
    stats_service: StatsService
    food_analysis_service: FoodAnalysisService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    meal_repository = SupabaseMealRepository(supabase_client)
    profile_service = ProfileService(SupabaseProfileRepository(supabase_client))
    stats_service = StatsService(
        repository=meal_repository,
        streak_repository=SupabaseStreakRepository(supabase_client),
        profile_service=profile_service,
    )
    meal_service = MealService(
        repository=meal_repository,
        stats_service=stats_service,
        page_size=resolved_settings.history_page_size,
    )
    openai_client = OpenAIVisionClient.create(resolved_settings.openai_api_key)
    food_analysis_service = FoodAnalysisService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        profile_service=profile_service,
        meal_service=meal_service,
        stats_service=stats_service,
        food_analysis_service=food_analysis_service,
        close_resources=close_resources,
    )
