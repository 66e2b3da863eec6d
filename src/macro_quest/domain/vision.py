"""Models for food photo analysis results."""

from pydantic import BaseModel, Field


class FoodAnalysis(BaseModel):
    """Structured nutrition estimate for the main food in a photo."""

    food_name: str = Field(min_length=1)
    calories: int = Field(ge=0)
    carbs: int = Field(ge=0)
    protein: int = Field(ge=0)
    fat: int = Field(ge=0)
