# tasks router: crud for the user's tasks
# completing a task also writes a task-completion journal entry

from fastapi import APIRouter, Depends, status

from friendai.dependencies import get_current_user
from friendai.models.task import Task, TaskCreate, TaskUpdate
from friendai.services import task_service
from friendai.services.db import get_storage
from friendai.services.storage import Storage

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=list[Task])
async def list_tasks(
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await task_service.list_tasks(storage, user_id)


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    body: TaskCreate,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await task_service.create_task(storage, user_id, body)


@router.put("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """partial update, only the fields sent are changed"""
    return await task_service.update_task(storage, user_id, task_id, body)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    await task_service.delete_task(storage, user_id, task_id)
    return {"message": "Task deleted successfully"}
