"""Search, filtering and pagination for the meal history view."""

import math
from collections.abc import Callable, Iterable
from datetime import date

from macro_quest.domain.meals import Meal, MealPage
from macro_quest.services.stats import utc_day

DEFAULT_PAGE_SIZE = 10

MACRO_FILTERS: dict[str, Callable[[Meal], bool]] = {
    "high_protein": lambda meal: meal.protein_g >= 20,
    "low_carb": lambda meal: meal.carbs_g <= 30,
    "high_fat": lambda meal: meal.fat_g >= 15,
    "low_calorie": lambda meal: meal.calories <= 300,
}


def filter_meals(
    meals: Iterable[Meal],
    query: str | None = None,
    day: date | None = None,
    macro_filter: str | None = "all",
) -> list[Meal]:
    """Return meals matching every criterion that is set."""
    if macro_filter and macro_filter != "all" and macro_filter not in MACRO_FILTERS:
        raise ValueError(f"Unknown macro filter: {macro_filter}")

    needle = query.lower() if query and query.strip() else ""
    predicate = MACRO_FILTERS.get(macro_filter or "all")
    filtered = []
    for meal in meals:
        if needle and needle not in meal.name.lower():
            continue
        if day is not None and utc_day(meal.logged_at) != day:
            continue
        if predicate is not None and not predicate(meal):
            continue
        filtered.append(meal)
    return filtered


def paginate(
    meals: list[Meal], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
) -> MealPage:
    """Slice a meal list into 1-indexed pages."""
    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    start = (page - 1) * page_size
    return MealPage(
        items=meals[start : start + page_size],
        page=page,
        page_size=page_size,
        total_items=len(meals),
        total_pages=math.ceil(len(meals) / page_size),
    )
