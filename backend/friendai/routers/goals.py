# goals router: crud for the user's goals and milestones

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from friendai.dependencies import get_current_user
from friendai.models.goal import Goal, GoalCreate, GoalStatus, GoalUpdate
from friendai.services import goal_service
from friendai.services.db import get_storage
from friendai.services.storage import Storage

router = APIRouter(prefix="/api/goals", tags=["goals"])


@router.get("", response_model=list[Goal])
async def list_goals(
    status_filter: Optional[GoalStatus] = Query(None, alias="status"),
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """list goals, optionally only those with the given status"""
    return await goal_service.list_goals(storage, user_id, status_filter)


@router.post("", response_model=Goal, status_code=status.HTTP_201_CREATED)
async def create_goal(
    body: GoalCreate,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await goal_service.create_goal(storage, user_id, body)


@router.put("/{goal_id}", response_model=Goal)
async def update_goal(
    goal_id: str,
    body: GoalUpdate,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await goal_service.update_goal(storage, user_id, goal_id, body)


@router.delete("/{goal_id}")
async def delete_goal(
    goal_id: str,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    await goal_service.delete_goal(storage, user_id, goal_id)
    return {"message": "Goal deleted successfully"}
