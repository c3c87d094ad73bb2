# analytics service: dashboard aggregate, mood trend series, rule-based insights, export
# everything below the loaders is a pure function of its inputs so results are
# reproducible; "today" and "now" are always passed in

import csv
import io
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

from friendai.errors import NotFoundError, ValidationError
from friendai.models.analytics import MoodAnalyticsResponse, MoodSummary
from friendai.models.dashboard import DashboardResponse, DashboardStats, Insight, MoodPoint
from friendai.models.goal import Goal
from friendai.models.habit import Habit
from friendai.models.journal import JournalEntry
from friendai.models.task import Task
from friendai.models.user import PublicUser
from friendai.services import habit_service, journal_service
from friendai.services.auth_service import get_user
from friendai.services.storage import GoalQuery, HabitQuery, Sort, Storage, TaskQuery
from friendai.utils import as_utc, utc_date, utcnow

logger = logging.getLogger(__name__)

PERIOD_DAYS = {"weekly": 7, "monthly": 30}
UPCOMING_WINDOW = timedelta(days=3)
UPCOMING_LIMIT = 5
RECENT_LIMIT = 5
MAX_INSIGHTS = 4


def _round1(value: float) -> float:
    return round(value * 10) / 10


# journal stats

def average_mood(entries: list[JournalEntry]) -> float:
    """mean of non-null mood scores rounded to one decimal, 0 when there are none"""
    scores = [e.mood_score for e in entries if e.mood_score is not None]
    if not scores:
        return 0.0
    return _round1(sum(scores) / len(scores))


def journal_streak(entries: list[JournalEntry], today: date) -> int:
    """days with at least one entry, walking back from today until the first gap"""
    days = {utc_date(e.created_at) for e in entries}
    streak = 0
    day = today
    while day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def session_stats(entries: list[JournalEntry], today: date) -> dict[str, Any]:
    """session counters over a newest-first entry list"""
    genuine, synthetic = journal_service.split_entries(entries)
    return {
        "totalSessions": len(genuine),
        "currentStreak": journal_streak(genuine, today),
        "averageMood": average_mood(genuine),
        "completedTasks": len(synthetic),
    }


def recent_entries(entries: list[JournalEntry]) -> list[JournalEntry]:
    genuine, _ = journal_service.split_entries(entries)
    return genuine[:RECENT_LIMIT]


def mood_trend(entries: list[JournalEntry], period: str, today: date) -> list[MoodPoint]:
    """one point per calendar day for the trailing period, oldest first"""
    if period not in PERIOD_DAYS:
        raise ValidationError("Period must be 'weekly' or 'monthly'")
    n_days = PERIOD_DAYS[period]

    by_day: dict[date, list[int]] = {}
    for e in entries:
        if e.mood_score is not None:
            by_day.setdefault(utc_date(e.created_at), []).append(e.mood_score)

    points = []
    for offset in range(n_days - 1, -1, -1):
        day = today - timedelta(days=offset)
        scores = by_day.get(day)
        mood = _round1(sum(scores) / len(scores)) if scores else None
        label = f"{day:%b} {day.day}"
        if period == "weekly":
            label = f"{day:%a}, {label}"
        points.append(MoodPoint(
            date=label,
            fullDate=day.isoformat(),
            mood=mood,
            hasEntry=mood is not None,
        ))
    return points


def mood_summary(entries: list[JournalEntry]) -> MoodSummary:
    scores = [e.mood_score for e in entries if e.mood_score is not None]
    if not scores:
        return MoodSummary()
    return MoodSummary(
        average=_round1(sum(scores) / len(scores)),
        highest=max(scores),
        lowest=min(scores),
        totalEntries=len(scores),
    )


# tasks, goals, habits

def upcoming_tasks(tasks: list[Task], now: datetime) -> list[Task]:
    """incomplete tasks due within the next three days (overdue included), soonest first"""
    horizon = now + UPCOMING_WINDOW
    due = [t for t in tasks if not t.completed and t.due_date is not None and as_utc(t.due_date) <= horizon]
    due.sort(key=lambda t: as_utc(t.due_date))
    return due[:UPCOMING_LIMIT]


def overdue_count(tasks: list[Task], now: datetime) -> int:
    return sum(1 for t in tasks if not t.completed and t.due_date is not None and as_utc(t.due_date) < now)


def mean_goal_progress(goals: list[Goal]) -> int:
    if not goals:
        return 0
    return round(sum(g.progress for g in goals) / len(goals))


# insights

@dataclass(frozen=True)
class InsightInputs:
    """snapshot the insight rules are evaluated against"""
    average_mood: float = 0.0
    current_streak: int = 0
    total_sessions: int = 0
    active_habits: int = 0
    habits_completed_today: int = 0
    active_goals: int = 0
    goal_progress: int = 0
    overdue_tasks: int = 0
    completed_tasks: int = 0


def generate_insights(s: InsightInputs) -> list[Insight]:
    """evaluate the rule table in order and keep the first four matches"""
    rules = [
        (s.average_mood >= 7, lambda: Insight(
            type="positive", icon="🌟", title="Great Mood Trend",
            message=f"Your average mood is {s.average_mood}/10. Keep doing what makes you feel good!",
        )),
        (0 < s.average_mood < 5, lambda: Insight(
            type="suggestion", icon="💛", title="Take Care of Yourself",
            message="Your mood has been lower lately. Try a short walk, some rest, or talking to someone you trust.",
        )),
        (s.current_streak >= 7, lambda: Insight(
            type="achievement", icon="🔥", title=f"{s.current_streak}-Day Journal Streak",
            message="A full week or more of daily reflection. Consistency like this builds self-awareness.",
        )),
        (s.current_streak == 0 and s.total_sessions > 0, lambda: Insight(
            type="reminder", icon="📝", title="Time to Check In",
            message="You haven't journaled today. A few minutes of reflection can restart your streak.",
        )),
        (s.active_habits > 0 and s.habits_completed_today == s.active_habits, lambda: Insight(
            type="achievement", icon="✅", title="All Habits Done",
            message="You've completed every habit for today. Great discipline!",
        )),
        (0 < s.habits_completed_today < s.active_habits, lambda: Insight(
            type="suggestion", icon="💪", title="Keep Going",
            message=f"{s.habits_completed_today} of {s.active_habits} habits done today. Finish the rest to keep your streaks alive.",
        )),
        (s.active_goals > 0 and s.goal_progress >= 75, lambda: Insight(
            type="positive", icon="🎯", title="Goals Almost There",
            message=f"Your active goals are {s.goal_progress}% complete on average. The finish line is close!",
        )),
        (s.active_goals > 0 and s.goal_progress < 25, lambda: Insight(
            type="suggestion", icon="🚀", title="Build Momentum",
            message="Your goals are just getting started. Pick one small milestone to complete this week.",
        )),
        (s.overdue_tasks > 0, lambda: Insight(
            type="warning", icon="⏰", title="Overdue Tasks",
            message=f"You have {s.overdue_tasks} overdue task{'s' if s.overdue_tasks != 1 else ''}. Consider rescheduling or breaking them down.",
        )),
        (s.average_mood >= 7 and s.completed_tasks >= 5, lambda: Insight(
            type="correlation", icon="📈", title="Productivity Boosts Mood",
            message=f"You've completed {s.completed_tasks} tasks and your mood is high. Getting things done seems to lift your spirits.",
        )),
    ]
    return [build() for matched, build in rules if matched][:MAX_INSIGHTS]


# loaders

async def _load_user_data(storage: Storage, user_id: str):
    entries = await journal_service.list_entries(storage, user_id)
    tasks = await storage.tasks.find_many(TaskQuery(user_id=user_id), sort=Sort(field="created_at", descending=True))
    goals = await storage.goals.find_many(GoalQuery(user_id=user_id), sort=Sort(field="created_at", descending=True))
    habits = await storage.habits.find_many(HabitQuery(user_id=user_id), sort=Sort(field="created_at", descending=True))
    return entries, tasks, goals, habits


def build_dashboard(
    entries: list[JournalEntry],
    tasks: list[Task],
    goals: list[Goal],
    habits: list[Habit],
    now: datetime,
) -> DashboardResponse:
    """compose the dashboard from a user's records. entries must be newest first."""
    today = now.date()
    genuine, _ = journal_service.split_entries(entries)
    active_goals = [g for g in goals if g.status == "active"]
    active_habits = [h for h in habits if h.active]
    done_today = sum(1 for h in active_habits if habit_service.completed_on(h, today))

    stats = DashboardStats(
        **session_stats(entries, today),
        activeGoals=len(active_goals),
        activeHabits=len(active_habits),
        habitsCompletedToday=done_today,
        goalProgress=mean_goal_progress(active_goals),
    )
    insights = generate_insights(InsightInputs(
        average_mood=stats.average_mood,
        current_streak=stats.current_streak,
        total_sessions=stats.total_sessions,
        active_habits=stats.active_habits,
        habits_completed_today=stats.habits_completed_today,
        active_goals=stats.active_goals,
        goal_progress=stats.goal_progress,
        overdue_tasks=overdue_count(tasks, now),
        completed_tasks=stats.completed_tasks,
    ))

    return DashboardResponse(
        stats=stats,
        moodData=mood_trend(genuine, "weekly", today),
        recentEntries=recent_entries(entries),
        upcomingTasks=upcoming_tasks(tasks, now),
        activeGoals=active_goals,
        todayHabits=active_habits,
        insights=insights,
    )


async def get_dashboard(storage: Storage, user_id: str) -> DashboardResponse:
    entries, tasks, goals, habits = await _load_user_data(storage, user_id)
    return build_dashboard(entries, tasks, goals, habits, utcnow())


async def get_mood_analytics(storage: Storage, user_id: str, period: str) -> MoodAnalyticsResponse:
    if period not in PERIOD_DAYS:
        raise ValidationError("Period must be 'weekly' or 'monthly'")
    entries = await journal_service.list_entries(storage, user_id)
    genuine, _ = journal_service.split_entries(entries)
    return MoodAnalyticsResponse(
        period=period,
        data=mood_trend(genuine, period, utcnow().date()),
        stats=mood_summary(genuine),
    )


# export

EXPORT_MEDIA_TYPES = {"json": "application/json", "csv": "text/csv"}


def export_csv(entries: list[JournalEntry]) -> str:
    output = io.StringIO()
    # quote every field; embedded quotes are doubled
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(["Date", "Mood Score", "Transcription"])
    for e in entries:
        writer.writerow([
            as_utc(e.created_at).isoformat(),
            "" if e.mood_score is None else e.mood_score,
            e.transcription,
        ])
    return output.getvalue()


def export_json(
    user: PublicUser,
    entries: list[JournalEntry],
    tasks: list[Task],
    goals: list[Goal],
    habits: list[Habit],
    now: datetime,
) -> str:
    document = {
        "exportedAt": now.isoformat(),
        "user": user.model_dump(mode="json"),
        "journalEntries": [e.model_dump(mode="json") for e in entries],
        "tasks": [t.model_dump(mode="json") for t in tasks],
        "goals": [g.model_dump(mode="json") for g in goals],
        "habits": [h.model_dump(mode="json") for h in habits],
    }
    return json.dumps(document, indent=2)


async def export_data(storage: Storage, user_id: str, fmt: str) -> tuple[str, str, str]:
    """returns (body, media type, filename) for the user's data export"""
    if fmt not in EXPORT_MEDIA_TYPES:
        raise ValidationError("Format must be 'json' or 'csv'")

    entries, tasks, goals, habits = await _load_user_data(storage, user_id)
    filename = f"friendai-export.{fmt}"

    if fmt == "csv":
        body = export_csv(entries)
    else:
        user = await get_user(storage, user_id)
        if user is None:
            raise NotFoundError("User not found")
        body = export_json(user, entries, tasks, goals, habits, utcnow())

    logger.info(f"Export generated for user {user_id}: {fmt}, {len(entries)} journal entries")
    return body, EXPORT_MEDIA_TYPES[fmt], filename
