# task service: owner-scoped task crud
# a false -> true completion writes exactly one synthetic journal entry

import logging

from friendai.errors import NotFoundError, ValidationError
from friendai.models.task import Task, TaskCreate, TaskUpdate
from friendai.services import journal_service
from friendai.services.storage import Sort, Storage, TaskQuery
from friendai.utils import patch_fields, utcnow

logger = logging.getLogger(__name__)

NULLABLE = frozenset({"due_date", "goal_id"})


async def list_tasks(storage: Storage, user_id: str) -> list[Task]:
    return await storage.tasks.find_many(
        TaskQuery(user_id=user_id),
        sort=Sort(field="created_at", descending=True),
    )


async def create_task(storage: Storage, user_id: str, body: TaskCreate) -> Task:
    title = (body.title or "").strip()
    if not title:
        raise ValidationError("Title is required")

    now = utcnow()
    task = await storage.tasks.create({
        "user_id": user_id,
        "title": title,
        "description": (body.description or "").strip(),
        "due_date": body.due_date,
        "priority": body.priority or "medium",
        "completed": False,
        "completed_at": None,
        "goal_id": body.goal_id,
        "created_at": now,
        "updated_at": now,
    })
    logger.info(f"Task created: {task.id} by user {user_id}")
    return task


async def update_task(storage: Storage, user_id: str, task_id: str, body: TaskUpdate) -> Task:
    current = await storage.tasks.find_one(TaskQuery(id=task_id, user_id=user_id))
    if current is None:
        raise NotFoundError("Task not found")

    changes = patch_fields(body, nullable=NULLABLE)
    if "title" in changes:
        changes["title"] = changes["title"].strip()
        if not changes["title"]:
            raise ValidationError("Title cannot be empty")

    now = utcnow()
    newly_completed = not current.completed and changes.get("completed") is True
    if newly_completed:
        changes["completed_at"] = now
    elif current.completed and changes.get("completed") is False:
        changes["completed_at"] = None
    changes["updated_at"] = now

    task = await storage.tasks.update(current.id, changes)
    if task is None:
        raise NotFoundError("Task not found")

    if newly_completed:
        await journal_service.record_task_completion(storage, user_id, task.title)

    return task


async def delete_task(storage: Storage, user_id: str, task_id: str) -> None:
    deleted = await storage.tasks.delete(TaskQuery(id=task_id, user_id=user_id))
    if not deleted:
        raise NotFoundError("Task not found")
    logger.info(f"Task deleted: {task_id} by user {user_id}")
