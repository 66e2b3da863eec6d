"""Pydantic models for API request payloads."""

from datetime import datetime

from pydantic import BaseModel, Field


class ProfilePayload(BaseModel):
    """Profile fields collected at onboarding or in settings."""

    gender: str | None = None
    weight: float | None = Field(default=None, gt=0)
    height: float | None = Field(default=None, gt=0)
    age: int | None = Field(default=None, gt=0)
    activity_level: str | None = None
    goal_type: str = "maintain"
    name: str | None = None
    email: str | None = None


class ProfileUpdatePayload(BaseModel):
    """Partial profile update."""

    gender: str | None = None
    weight: float | None = Field(default=None, gt=0)
    height: float | None = Field(default=None, gt=0)
    age: int | None = Field(default=None, gt=0)
    activity_level: str | None = None
    goal_type: str | None = None
    name: str | None = None
    email: str | None = None


class MealPayload(BaseModel):
    """Manually entered meal."""

    name: str
    calories: float
    carbs_g: float
    protein_g: float
    fat_g: float
    logged_at: datetime | None = None
    portion: str | None = None
    brand: str | None = None
    notes: str | None = None


class MealUpdatePayload(BaseModel):
    """Partial meal edit."""

    name: str | None = None
    calories: float | None = None
    carbs_g: float | None = None
    protein_g: float | None = None
    fat_g: float | None = None
    logged_at: datetime | None = None
    portion: str | None = None
    brand: str | None = None
    notes: str | None = None


class AnalyzePayload(BaseModel):
    """Base64-encoded food photo for analysis."""

    image: str = Field(min_length=1)
    extra_text: str | None = None
    save: bool = True
