"""Food photo analysis using an LLM vision model."""

import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from macro_quest.domain.meals import MealDraft
from macro_quest.domain.vision import FoodAnalysis
from macro_quest.services.goals import round_half_up

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "food_name": {"type": "string"},
        "calories": {"type": "number", "minimum": 0},
        "carbs": {"type": "number", "minimum": 0},
        "protein": {"type": "number", "minimum": 0},
        "fat": {"type": "number", "minimum": 0},
    },
    "required": ["food_name", "calories", "carbs", "protein", "fat"],
    "additionalProperties": False,
}

_PROMPT = (
    "You are a nutrition expert. Analyze this food image and estimate the "
    "nutrition of a typical serving of the main food item. "
    "Return the food name, calories, and carbs, protein and fat in grams. "
    "For beverages assume 250ml (30ml for alcohol); use standard USDA values "
    "for fruits and vegetables; be conservative with desserts."
)

_logger = logging.getLogger(__name__)


class VisionClient(Protocol):
    """Interface for LLM vision extraction."""

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
        """Return structured extraction data."""


@dataclass
class FoodAnalysisService:
    """Service that prepares analysis prompts and validates results."""

    client: VisionClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze(
        self, image_bytes: bytes, extra_text: str | None = None
    ) -> FoodAnalysis:
        """Estimate nutrition for the food in an image."""
        prompt = _PROMPT
        if extra_text and extra_text.strip():
            prompt = f"{prompt}\nAdditional context: {extra_text.strip()}"
        raw = await self.client.extract(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_url=_to_data_url(image_bytes),
            schema=ANALYSIS_SCHEMA,
            prompt=prompt,
        )
        analysis = FoodAnalysis.model_validate(_round_numbers(raw))
        _logger.info(
            "Food analysis: food=%s calories=%s", analysis.food_name, analysis.calories
        )
        return analysis


def analysis_to_draft(analysis: FoodAnalysis) -> MealDraft:
    """Build an AI-sourced meal draft from an analysis result."""
    return MealDraft(
        name=analysis.food_name,
        calories=analysis.calories,
        carbs_g=analysis.carbs,
        protein_g=analysis.protein,
        fat_g=analysis.fat,
        source="ai",
    )


def _round_numbers(raw: dict[str, object]) -> dict[str, object]:
    """Round numeric estimates to whole numbers; missing macros become 0."""
    rounded = dict(raw)
    for key in ("calories", "carbs", "protein", "fat"):
        value = raw.get(key)
        if isinstance(value, int | float) and not isinstance(value, bool):
            rounded[key] = round_half_up(value)
        elif value is None and key != "calories":
            rounded[key] = 0
    return rounded


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
