# goal service: owner-scoped goal crud and milestone progress

import logging
from typing import Optional

from friendai.errors import NotFoundError, ValidationError
from friendai.models.goal import Goal, GoalCreate, GoalUpdate, Milestone
from friendai.services.storage import GoalQuery, Sort, Storage
from friendai.utils import patch_fields, utcnow

logger = logging.getLogger(__name__)

NULLABLE = frozenset({"target_date", "completed_at"})


def compute_progress(milestones: list[Milestone]) -> int:
    """percentage of completed milestones, 0 when there are none"""
    if not milestones:
        return 0
    done = sum(1 for m in milestones if m.completed)
    return round(100 * done / len(milestones))


async def list_goals(storage: Storage, user_id: str, status: Optional[str] = None) -> list[Goal]:
    return await storage.goals.find_many(
        GoalQuery(user_id=user_id, status=status),
        sort=Sort(field="created_at", descending=True),
    )


async def create_goal(storage: Storage, user_id: str, body: GoalCreate) -> Goal:
    title = (body.title or "").strip()
    if not title:
        raise ValidationError("Title is required")

    now = utcnow()
    goal = await storage.goals.create({
        "user_id": user_id,
        "title": title,
        "description": (body.description or "").strip(),
        "category": body.category or "personal",
        "target_date": body.target_date,
        "milestones": [m.model_dump() for m in body.milestones],
        "progress": compute_progress(body.milestones),
        "status": "active",
        "completed_at": None,
        "created_at": now,
        "updated_at": now,
    })
    logger.info(f"Goal created: {goal.id} by user {user_id}")
    return goal


async def update_goal(storage: Storage, user_id: str, goal_id: str, body: GoalUpdate) -> Goal:
    current = await storage.goals.find_one(GoalQuery(id=goal_id, user_id=user_id))
    if current is None:
        raise NotFoundError("Goal not found")

    changes = patch_fields(body, nullable=NULLABLE)
    if "title" in changes:
        changes["title"] = changes["title"].strip()
        if not changes["title"]:
            raise ValidationError("Title cannot be empty")

    # submitted progress wins; recompute only when milestones arrive without it
    if body.milestones is not None and body.progress is None:
        changes["progress"] = compute_progress(body.milestones)

    now = utcnow()
    if changes.get("status") == "completed" and current.status != "completed":
        changes.setdefault("completed_at", now)
    elif "status" in changes and changes["status"] != "completed" and current.status == "completed":
        changes.setdefault("completed_at", None)
    changes["updated_at"] = now

    goal = await storage.goals.update(current.id, changes)
    if goal is None:
        raise NotFoundError("Goal not found")
    return goal


async def delete_goal(storage: Storage, user_id: str, goal_id: str) -> None:
    deleted = await storage.goals.delete(GoalQuery(id=goal_id, user_id=user_id))
    if not deleted:
        raise NotFoundError("Goal not found")
    logger.info(f"Goal deleted: {goal_id} by user {user_id}")
