"""Domain models for daily totals, streaks and the stat panel."""

from dataclasses import dataclass
from datetime import date

from macro_quest.domain.profiles import Goals


@dataclass(frozen=True)
class DayMacros:
    """Macro totals for one UTC calendar day."""

    calories: float
    carbs_g: float
    protein_g: float
    fat_g: float
    meal_count: int


EMPTY_DAY = DayMacros(calories=0, carbs_g=0, protein_g=0, fat_g=0, meal_count=0)


@dataclass(frozen=True)
class StreakRecord:
    """Consecutive logging days."""

    current_streak: int
    longest_streak: int
    last_logged_date: date | None


@dataclass(frozen=True)
class MacroProgress:
    """Progress of one stat towards its goal."""

    current: float
    goal: int
    percent: int


@dataclass(frozen=True)
class Dashboard:
    """Daily stat panel: goals, totals and rewards."""

    day: date
    goals: Goals
    totals: DayMacros
    calories: MacroProgress
    carbs: MacroProgress
    protein: MacroProgress
    fat: MacroProgress
    all_goals_complete: bool
    xp_earned: int
    streak: StreakRecord
