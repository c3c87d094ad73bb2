# mood router: mood trend and summary over a trailing period

from fastapi import APIRouter, Depends, Query

from friendai.dependencies import get_current_user
from friendai.models.analytics import MoodAnalyticsResponse
from friendai.services import analytics_service
from friendai.services.db import get_storage
from friendai.services.storage import Storage

router = APIRouter(prefix="/api/mood", tags=["mood"])


@router.get("/analytics", response_model=MoodAnalyticsResponse, response_model_by_alias=True)
async def mood_analytics(
    period: str = Query("weekly"),
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """weekly (7 days) or monthly (30 days); anything else is a 400"""
    return await analytics_service.get_mood_analytics(storage, user_id, period)
