# journal router: the user's journal history, newest first

from fastapi import APIRouter, Depends

from friendai.dependencies import get_current_user
from friendai.models.journal import JournalEntry
from friendai.services import journal_service
from friendai.services.db import get_storage
from friendai.services.storage import Storage

router = APIRouter(prefix="/api/journal", tags=["journal"])


@router.get("", response_model=list[JournalEntry])
async def list_journal(
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await journal_service.list_entries(storage, user_id)
