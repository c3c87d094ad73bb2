# dashboard router: one aggregate payload for the home screen

import logging

from fastapi import APIRouter, Depends

from friendai.dependencies import get_current_user
from friendai.models.dashboard import DashboardResponse
from friendai.services import analytics_service
from friendai.services.db import get_storage
from friendai.services.storage import Storage

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse, response_model_by_alias=True)
async def get_dashboard(
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """stats, 7-day mood trend, recent entries, upcoming tasks, goals, habits and insights"""
    dashboard = await analytics_service.get_dashboard(storage, user_id)
    logger.info(f"Dashboard built for user {user_id}: {len(dashboard.insights)} insights")
    return dashboard
