# mood analytics models: trend series plus all-time summary

from typing import Literal
from pydantic import BaseModel, Field

from friendai.models.dashboard import MoodPoint

Period = Literal["weekly", "monthly"]


class MoodSummary(BaseModel):
    average: float = 0.0
    highest: int = 0
    lowest: int = 0
    total_entries: int = Field(0, alias="totalEntries")

    model_config = {"populate_by_name": True}


class MoodAnalyticsResponse(BaseModel):
    period: Period
    data: list[MoodPoint] = Field(default_factory=list)
    stats: MoodSummary
