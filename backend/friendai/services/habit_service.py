# habit service: owner-scoped habit crud, once-per-day completion and streaks
# streaks are recomputed on every completion, never on read

import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from friendai.errors import ConflictError, NotFoundError, ValidationError
from friendai.models.habit import Habit, HabitCreate, HabitUpdate
from friendai.services.storage import HabitQuery, Sort, Storage
from friendai.utils import patch_fields, utc_date, utcnow

logger = logging.getLogger(__name__)

# serializes read-check-write of completions per habit within this process
_completion_locks: dict[str, asyncio.Lock] = {}


def compute_streak(dates: Iterable[datetime]) -> int:
    """consecutive calendar days ending at the most recent completion.

    walks the distinct utc dates newest first and counts while each one is
    exactly one day before the previous.
    """
    days = sorted({utc_date(d) for d in dates}, reverse=True)
    if not days:
        return 0
    streak = 1
    for prev, day in zip(days, days[1:]):
        if prev - day != timedelta(days=1):
            break
        streak += 1
    return streak


def completed_on(habit: Habit, day: date) -> bool:
    return any(utc_date(c.date) == day for c in habit.completions)


async def list_habits(storage: Storage, user_id: str, active: Optional[bool] = None) -> list[Habit]:
    return await storage.habits.find_many(
        HabitQuery(user_id=user_id, active=active),
        sort=Sort(field="created_at", descending=True),
    )


async def create_habit(storage: Storage, user_id: str, body: HabitCreate) -> Habit:
    name = (body.name or "").strip()
    if not name:
        raise ValidationError("Name is required")

    now = utcnow()
    habit = await storage.habits.create({
        "user_id": user_id,
        "name": name,
        "description": (body.description or "").strip(),
        "frequency": body.frequency or "daily",
        "target_days": list(body.target_days),
        "streak": {"current": 0, "longest": 0},
        "completions": [],
        "active": True,
        "created_at": now,
        "updated_at": now,
    })
    logger.info(f"Habit created: {habit.id} by user {user_id}")
    return habit


async def update_habit(storage: Storage, user_id: str, habit_id: str, body: HabitUpdate) -> Habit:
    current = await storage.habits.find_one(HabitQuery(id=habit_id, user_id=user_id))
    if current is None:
        raise NotFoundError("Habit not found")

    changes = patch_fields(body)
    if "name" in changes:
        changes["name"] = changes["name"].strip()
        if not changes["name"]:
            raise ValidationError("Name cannot be empty")
    changes["updated_at"] = utcnow()

    habit = await storage.habits.update(current.id, changes)
    if habit is None:
        raise NotFoundError("Habit not found")
    return habit


async def complete_habit(storage: Storage, user_id: str, habit_id: str, notes: Optional[str] = None) -> Habit:
    """record today's completion and recompute the streak"""
    # only owned, existing habits get a lock entry
    if await storage.habits.find_one(HabitQuery(id=habit_id, user_id=user_id)) is None:
        raise NotFoundError("Habit not found")

    async with _completion_locks.setdefault(habit_id, asyncio.Lock()):
        habit = await storage.habits.find_one(HabitQuery(id=habit_id, user_id=user_id))
        if habit is None:
            raise NotFoundError("Habit not found")

        now = utcnow()
        if completed_on(habit, now.date()):
            raise ConflictError("Habit already completed today")

        completions = [c.model_dump() for c in habit.completions]
        completions.append({"date": now, "notes": notes})

        current = compute_streak(c["date"] for c in completions)
        longest = max(current, habit.streak.longest)

        updated = await storage.habits.update(habit.id, {
            "completions": completions,
            "streak": {"current": current, "longest": longest},
            "updated_at": now,
        })
        if updated is None:
            raise NotFoundError("Habit not found")

    logger.info(f"Habit completed: {habit_id} by user {user_id}, streak {current}")
    return updated


async def delete_habit(storage: Storage, user_id: str, habit_id: str) -> None:
    deleted = await storage.habits.delete(HabitQuery(id=habit_id, user_id=user_id))
    if not deleted:
        raise NotFoundError("Habit not found")
    _completion_locks.pop(habit_id, None)
    logger.info(f"Habit deleted: {habit_id} by user {user_id}")
