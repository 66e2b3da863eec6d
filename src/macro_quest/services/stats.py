"""Daily macro totals, logging streaks and the dashboard stat panel."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID

from macro_quest.domain.meals import Meal
from macro_quest.domain.profiles import Goals
from macro_quest.domain.stats import (
    EMPTY_DAY,
    Dashboard,
    DayMacros,
    MacroProgress,
    StreakRecord,
)
from macro_quest.services.profiles import ProfileService

XP_PER_MEAL = 10

_logger = logging.getLogger(__name__)


class StatsRepository(Protocol):
    """Read access to meals for aggregation."""

    def list_meals_between(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[Meal]:
        """Return meals with start <= logged_at <= end."""


class StreakRepository(Protocol):
    """Persistence interface for logging streaks."""

    def get_streak(self, user_id: UUID) -> StreakRecord | None:
        """Return the stored streak, if any."""

    def save_streak(self, user_id: UUID, record: StreakRecord) -> None:
        """Insert or replace the streak for a user."""


@dataclass
class StatsService:
    """Service for per-day totals, streaks and the dashboard."""

    repository: StatsRepository
    streak_repository: StreakRepository
    profile_service: ProfileService

    def get_day(self, user_id: UUID, day: date) -> DayMacros:
        """Return macro totals for a UTC day."""
        start, end = day_bounds(day)
        meals = self.repository.list_meals_between(user_id, start, end)
        return sum_for_date(meals, day)

    def get_streak(self, user_id: UUID) -> StreakRecord:
        """Return the user's streak, zeros when nothing was logged yet."""
        record = self.streak_repository.get_streak(user_id)
        if record is None:
            return StreakRecord(
                current_streak=0, longest_streak=0, last_logged_date=None
            )
        return record

    def record_meal_logged(self, user_id: UUID, today: date) -> StreakRecord | None:
        """Advance the streak after a meal was saved on ``today``."""
        start, end = day_bounds(today)
        if not self.repository.list_meals_between(user_id, start, end):
            return None
        previous = self.streak_repository.get_streak(user_id)
        updated = advance_streak(previous, today)
        if updated != previous:
            self.streak_repository.save_streak(user_id, updated)
            _logger.info(
                "Streak updated: user_id=%s current=%s longest=%s",
                user_id,
                updated.current_streak,
                updated.longest_streak,
            )
        return updated

    def get_dashboard(self, user_id: UUID, day: date) -> Dashboard:
        """Return goals against totals for a day, with XP and streak."""
        goals = self.profile_service.get_goals(user_id)
        totals = self.get_day(user_id, day)
        return build_dashboard(day, goals, totals, self.get_streak(user_id))


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Return the first and last instant of a UTC calendar day."""
    start = datetime.combine(day, time.min, tzinfo=UTC)
    end = datetime.combine(day, time.max, tzinfo=UTC)
    return start, end


def utc_day(moment: datetime) -> date:
    """Return the UTC calendar day of a timestamp; naive values are UTC."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(UTC).date()


def sum_for_date(meals: Iterable[Meal], day: date) -> DayMacros:
    """Sum macros of meals logged within the UTC day, bounds inclusive."""
    total = EMPTY_DAY
    for meal in meals:
        if utc_day(meal.logged_at) != day:
            continue
        total = DayMacros(
            calories=total.calories + meal.calories,
            carbs_g=total.carbs_g + meal.carbs_g,
            protein_g=total.protein_g + meal.protein_g,
            fat_g=total.fat_g + meal.fat_g,
            meal_count=total.meal_count + 1,
        )
    return total


def advance_streak(record: StreakRecord | None, today: date) -> StreakRecord:
    """Return the streak after logging a meal today.

    Logging twice on the same day leaves the record unchanged.
    """
    if record is None or record.last_logged_date is None:
        return StreakRecord(current_streak=1, longest_streak=1, last_logged_date=today)
    if record.last_logged_date == today:
        return record
    if record.last_logged_date == today - timedelta(days=1):
        current = record.current_streak + 1
        return StreakRecord(
            current_streak=current,
            longest_streak=max(record.longest_streak, current),
            last_logged_date=today,
        )
    return StreakRecord(
        current_streak=1,
        longest_streak=record.longest_streak,
        last_logged_date=today,
    )


def build_dashboard(
    day: date, goals: Goals, totals: DayMacros, streak: StreakRecord
) -> Dashboard:
    """Assemble the stat panel for a day."""
    calories = _progress(totals.calories, goals.calories)
    carbs = _progress(totals.carbs_g, goals.carbs_g)
    protein = _progress(totals.protein_g, goals.protein_g)
    fat = _progress(totals.fat_g, goals.fat_g)
    complete = goals.calories > 0 and all(
        stat.current >= stat.goal for stat in (calories, carbs, protein, fat)
    )
    return Dashboard(
        day=day,
        goals=goals,
        totals=totals,
        calories=calories,
        carbs=carbs,
        protein=protein,
        fat=fat,
        all_goals_complete=complete,
        xp_earned=totals.meal_count * XP_PER_MEAL,
        streak=streak,
    )


def _progress(current: float, goal: int) -> MacroProgress:
    if goal <= 0:
        return MacroProgress(current=current, goal=goal, percent=0)
    percent = min(100, int(current * 100 / goal))
    return MacroProgress(current=current, goal=goal, percent=percent)
