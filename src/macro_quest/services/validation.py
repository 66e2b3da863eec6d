"""Advisory validation for meals before they are saved."""

import logging

from macro_quest.domain.meals import MealDraft

MAX_CALORIES = 2000
MAX_CARBS_G = 300
MAX_PROTEIN_G = 150
MAX_FAT_G = 150
MACRO_TOLERANCE = 0.25

_logger = logging.getLogger(__name__)


def validate_meal(draft: MealDraft) -> list[str]:
    """Return blocking validation errors; an empty list means valid.

    Every rule is checked so callers can show all problems at once. A
    calorie/macro mismatch is only logged, since photo estimates rarely
    add up exactly.
    """
    errors: list[str] = []
    if not draft.name or not draft.name.strip():
        errors.append("name required")
    if not 0 < draft.calories <= MAX_CALORIES:
        errors.append("calories out of range")
    if not 0 <= draft.carbs_g <= MAX_CARBS_G:
        errors.append("carbs out of range")
    if not 0 <= draft.protein_g <= MAX_PROTEIN_G:
        errors.append("protein out of range")
    if not 0 <= draft.fat_g <= MAX_FAT_G:
        errors.append("fat out of range")

    warning = macro_mismatch_warning(draft)
    if warning:
        _logger.warning(warning)
    return errors


def macro_mismatch_warning(draft: MealDraft) -> str | None:
    """Describe a calorie/macro mismatch above tolerance, if there is one."""
    if draft.calories <= 0:
        return None
    macro_calories = macro_energy(draft.carbs_g, draft.protein_g, draft.fat_g)
    difference = abs(draft.calories - macro_calories)
    tolerance = draft.calories * MACRO_TOLERANCE
    if difference <= tolerance:
        return None
    return (
        f"Calorie-macro mismatch: {draft.calories:g} vs {macro_calories:g} "
        f"(diff: {difference:g}, tolerance: {tolerance:g})"
    )


def macro_energy(carbs_g: float, protein_g: float, fat_g: float) -> float:
    """Calories implied by macro grams (4/4/9 kcal per gram)."""
    return carbs_g * 4 + protein_g * 4 + fat_g * 9
