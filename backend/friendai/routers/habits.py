# habits router: crud plus the once-a-day completion action

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from friendai.dependencies import get_current_user
from friendai.models.habit import Habit, HabitComplete, HabitCreate, HabitUpdate
from friendai.services import habit_service
from friendai.services.db import get_storage
from friendai.services.storage import Storage

router = APIRouter(prefix="/api/habits", tags=["habits"])


@router.get("", response_model=list[Habit])
async def list_habits(
    active: Optional[bool] = Query(None),
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await habit_service.list_habits(storage, user_id, active)


@router.post("", response_model=Habit, status_code=status.HTTP_201_CREATED)
async def create_habit(
    body: HabitCreate,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await habit_service.create_habit(storage, user_id, body)


@router.put("/{habit_id}", response_model=Habit)
async def update_habit(
    habit_id: str,
    body: HabitUpdate,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await habit_service.update_habit(storage, user_id, habit_id, body)


@router.post("/{habit_id}/complete", response_model=Habit)
async def complete_habit(
    habit_id: str,
    body: Optional[HabitComplete] = None,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """mark the habit done for today; a second completion the same day is a 409"""
    notes = body.notes if body else None
    return await habit_service.complete_habit(storage, user_id, habit_id, notes)


@router.delete("/{habit_id}")
async def delete_habit(
    habit_id: str,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    await habit_service.delete_habit(storage, user_id, habit_id)
    return {"message": "Habit deleted successfully"}
