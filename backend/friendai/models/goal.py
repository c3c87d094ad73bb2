# goal models: goals with ordered milestones

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

GoalCategory = Literal["health", "career", "personal", "financial", "relationships", "learning", "other"]
GoalStatus = Literal["active", "completed", "abandoned"]


class Milestone(BaseModel):
    title: str = ""
    completed: bool = False
    completed_at: Optional[datetime] = None


class Goal(BaseModel):
    id: str
    user_id: str
    title: str
    description: str = ""
    category: GoalCategory = "personal"
    target_date: Optional[datetime] = None
    milestones: list[Milestone] = Field(default_factory=list)
    progress: int = Field(0, ge=0, le=100)
    status: GoalStatus = "active"
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class GoalCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[GoalCategory] = None
    target_date: Optional[datetime] = None
    milestones: list[Milestone] = Field(default_factory=list)


class GoalUpdate(BaseModel):
    """partial update: milestones replace the whole array when present"""
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[GoalCategory] = None
    target_date: Optional[datetime] = None
    milestones: Optional[list[Milestone]] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    status: Optional[GoalStatus] = None
    completed_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}
