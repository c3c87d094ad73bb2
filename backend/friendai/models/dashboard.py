# dashboard models: aggregate stats, trend points and insights

from typing import Literal, Optional
from pydantic import BaseModel, Field

from friendai.models.goal import Goal
from friendai.models.habit import Habit
from friendai.models.journal import JournalEntry
from friendai.models.task import Task

InsightType = Literal["positive", "suggestion", "achievement", "reminder", "warning", "correlation"]


class DashboardStats(BaseModel):
    """aggregate stats for the dashboard header"""
    total_sessions: int = Field(0, alias="totalSessions")
    current_streak: int = Field(0, alias="currentStreak")
    average_mood: float = Field(0.0, alias="averageMood")
    completed_tasks: int = Field(0, alias="completedTasks")
    active_goals: int = Field(0, alias="activeGoals")
    active_habits: int = Field(0, alias="activeHabits")
    habits_completed_today: int = Field(0, alias="habitsCompletedToday")
    goal_progress: int = Field(0, alias="goalProgress")

    model_config = {"populate_by_name": True}


class MoodPoint(BaseModel):
    """one calendar day in a mood trend"""
    date: str
    full_date: str = Field(..., alias="fullDate")
    mood: Optional[float] = None
    has_entry: bool = Field(False, alias="hasEntry")

    model_config = {"populate_by_name": True}


class Insight(BaseModel):
    type: InsightType
    icon: str
    title: str
    message: str


class DashboardResponse(BaseModel):
    stats: DashboardStats
    mood_data: list[MoodPoint] = Field(default_factory=list, alias="moodData")
    recent_entries: list[JournalEntry] = Field(default_factory=list, alias="recentEntries")
    upcoming_tasks: list[Task] = Field(default_factory=list, alias="upcomingTasks")
    active_goals: list[Goal] = Field(default_factory=list, alias="activeGoals")
    today_habits: list[Habit] = Field(default_factory=list, alias="todayHabits")
    insights: list[Insight] = Field(default_factory=list)

    model_config = {"populate_by_name": True}
