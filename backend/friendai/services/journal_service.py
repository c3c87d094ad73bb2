# journal service: genuine entries from ai analysis, synthetic ones from task completion
# synthetic entries carry the TASK_COMPLETED: prefix and only feed the completed-task count

import logging
from typing import Any

from friendai.models.journal import TASK_COMPLETED_PREFIX, JournalEntry
from friendai.services.storage import JournalQuery, Sort, Storage
from friendai.utils import utcnow

logger = logging.getLogger(__name__)

TASK_COMPLETION_MOOD = 8

NEWEST_FIRST = Sort(field="created_at", descending=True)


def split_entries(entries: list[JournalEntry]) -> tuple[list[JournalEntry], list[JournalEntry]]:
    """partition into (genuine, synthetic), preserving order"""
    genuine = [e for e in entries if not e.is_synthetic]
    synthetic = [e for e in entries if e.is_synthetic]
    return genuine, synthetic


async def list_entries(storage: Storage, user_id: str) -> list[JournalEntry]:
    """all of a user's entries, newest first"""
    return await storage.journal_entries.find_many(JournalQuery(user_id=user_id), sort=NEWEST_FIRST)


async def record_entry(storage: Storage, user_id: str, transcription: str, ai_response: dict[str, Any]) -> JournalEntry:
    """persist an analysed journal entry"""
    entry = await storage.journal_entries.create({
        "user_id": user_id,
        "transcription": transcription,
        "ai_response": ai_response,
        "mood_score": ai_response.get("moodScore"),
        "created_at": utcnow(),
    })
    logger.info(f"Journal entry saved: {entry.id} for user {user_id}")
    return entry


async def record_task_completion(storage: Storage, user_id: str, title: str) -> JournalEntry:
    """write the bookkeeping entry for a task that just became completed"""
    entry = await storage.journal_entries.create({
        "user_id": user_id,
        "transcription": f"{TASK_COMPLETED_PREFIX} {title}",
        "ai_response": {
            "summary": f'Congratulations! You completed the task: "{title}". '
                       "This achievement has been recorded in your progress tracking.",
            "moodScore": TASK_COMPLETION_MOOD,
            "type": "task_completion",
        },
        "mood_score": TASK_COMPLETION_MOOD,
        "created_at": utcnow(),
    })
    logger.info(f"Task completion recorded for user {user_id}")
    return entry
