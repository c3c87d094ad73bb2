# habit models: habits with completion history and streak record

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

Frequency = Literal["daily", "weekly", "custom"]
Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class Streak(BaseModel):
    current: int = 0
    longest: int = 0


class Completion(BaseModel):
    date: datetime
    notes: Optional[str] = None


class Habit(BaseModel):
    id: str
    user_id: str
    name: str
    description: str = ""
    frequency: Frequency = "daily"
    # only meaningful for custom frequency
    target_days: list[Weekday] = Field(default_factory=list)
    streak: Streak = Field(default_factory=Streak)
    completions: list[Completion] = Field(default_factory=list)
    active: bool = True
    created_at: datetime
    updated_at: datetime


class HabitCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    frequency: Optional[Frequency] = None
    target_days: list[Weekday] = Field(default_factory=list)


class HabitUpdate(BaseModel):
    """partial update: streak and completions only change through completion"""
    name: Optional[str] = None
    description: Optional[str] = None
    frequency: Optional[Frequency] = None
    target_days: Optional[list[Weekday]] = None
    active: Optional[bool] = None

    model_config = {"extra": "ignore"}


class HabitComplete(BaseModel):
    notes: Optional[str] = None
