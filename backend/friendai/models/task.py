# task models: stored record, create payload and patch

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel

Priority = Literal["low", "medium", "high"]


class Task(BaseModel):
    id: str
    user_id: str
    title: str
    description: str = ""
    due_date: Optional[datetime] = None
    priority: Priority = "medium"
    completed: bool = False
    completed_at: Optional[datetime] = None
    goal_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TaskCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[Priority] = None
    goal_id: Optional[str] = None


class TaskUpdate(BaseModel):
    """partial update: only fields present in the request are applied"""
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[Priority] = None
    completed: Optional[bool] = None
    goal_id: Optional[str] = None

    model_config = {"extra": "ignore"}
