"""Daily calorie and macro goal calculation (Mifflin-St Jeor)."""

import logging
import math

from macro_quest.domain.profiles import ZERO_GOALS, Goals, Profile

_ACTIVITY_FACTORS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}
_DEFAULT_ACTIVITY_FACTOR = 1.2

# Settings screens use a second vocabulary; weight_loss/weight_gain never
# carried an adjustment and stay at maintenance.
_GOAL_ALIASES = {
    "maintain": "maintain",
    "cut": "cut",
    "bulk": "bulk",
    "balanced": "maintain",
    "fat_loss": "cut",
    "muscle_gain": "bulk",
}
_GOAL_ADJUSTMENTS = {"maintain": 0, "cut": -500, "bulk": 500}

_CARBS_SHARE = 0.40
_PROTEIN_SHARE = 0.30
_FAT_SHARE = 0.30
_KCAL_PER_G_CARBS = 4
_KCAL_PER_G_PROTEIN = 4
_KCAL_PER_G_FAT = 9

_logger = logging.getLogger(__name__)


def calculate_goals(profile: Profile, goal_type: str | None = None) -> Goals:
    """Return daily goals for a profile, or zero goals when data is missing.

    ``goal_type`` overrides the profile's stored goal type, which is how the
    onboarding and settings screens preview a change before saving it.
    """
    if not has_biometrics(profile):
        return ZERO_GOALS

    goal = normalize_goal_type(goal_type or profile.goal_type)
    calories = basal_metabolic_rate(profile) * activity_factor(profile.activity_level)
    calories += _GOAL_ADJUSTMENTS[goal]

    return Goals(
        calories=round_half_up(calories),
        carbs_g=round_half_up(calories * _CARBS_SHARE / _KCAL_PER_G_CARBS),
        protein_g=round_half_up(calories * _PROTEIN_SHARE / _KCAL_PER_G_PROTEIN),
        fat_g=round_half_up(calories * _FAT_SHARE / _KCAL_PER_G_FAT),
    )


def has_biometrics(profile: Profile) -> bool:
    """Return True when weight, height, age and activity level are usable."""
    return (
        _is_positive(profile.weight)
        and _is_positive(profile.height)
        and _is_positive(profile.age)
        and bool(profile.activity_level)
    )


def basal_metabolic_rate(profile: Profile) -> float:
    """Mifflin-St Jeor BMR; anything but ``male`` uses the female constant."""
    base = (
        10 * float(profile.weight or 0)
        + 6.25 * float(profile.height or 0)
        - 5 * float(profile.age or 0)
    )
    if profile.gender == "male":
        return base + 5
    return base - 161


def activity_factor(activity_level: str | None) -> float:
    """Return the TDEE multiplier, defaulting to sedentary."""
    if activity_level is None:
        return _DEFAULT_ACTIVITY_FACTOR
    return _ACTIVITY_FACTORS.get(activity_level, _DEFAULT_ACTIVITY_FACTOR)


def normalize_goal_type(label: str | None) -> str:
    """Map a goal label from either vocabulary onto maintain/cut/bulk."""
    if not label:
        return "maintain"
    canonical = _GOAL_ALIASES.get(label.strip().lower())
    if canonical is None:
        _logger.warning("Goal type %r has no calorie adjustment; using maintain", label)
        return "maintain"
    return canonical


def round_half_up(value: float) -> int:
    """Round half away from zero."""
    rounded = math.floor(abs(value) + 0.5)
    return int(rounded if value >= 0 else -rounded)


def _is_positive(value: float | None) -> bool:
    return value is not None and value > 0
