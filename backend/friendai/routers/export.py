# export router: download all of the user's data as json or csv

from fastapi import APIRouter, Depends, Query, Response

from friendai.dependencies import get_current_user
from friendai.services import analytics_service
from friendai.services.db import get_storage
from friendai.services.storage import Storage

router = APIRouter(prefix="/api/export", tags=["export"])


@router.get("")
async def export_data(
    format: str = Query("json"),
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    body, media_type, filename = await analytics_service.export_data(storage, user_id, format)
    return Response(
        content=body,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
