# journal models: stored entries and the ai analysis payloads

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field

# transcription prefix of bookkeeping entries written on task completion
TASK_COMPLETED_PREFIX = "TASK_COMPLETED:"


class JournalEntry(BaseModel):
    """a journal entry as stored in the journal_entries collection"""
    id: str
    user_id: str
    transcription: str
    ai_response: dict[str, Any] = Field(default_factory=dict)
    mood_score: Optional[int] = Field(None, ge=1, le=10)
    created_at: datetime

    @property
    def is_synthetic(self) -> bool:
        return self.transcription.startswith(TASK_COMPLETED_PREFIX)


class AnalyzeRequest(BaseModel):
    transcription: Optional[str] = None
    context: dict[str, Any] = Field(default_factory=dict)


class AnalysisResult(BaseModel):
    """normalized ai analysis returned to the client and stored as ai_response"""
    summary: str
    consolation: str = ""
    suggestions: list[str] = Field(default_factory=list)
    mood_score: int = Field(..., alias="moodScore", ge=1, le=10)
    motivation: str = ""
    knowledge_nugget: str = Field("", alias="knowledgeNugget")

    model_config = {"populate_by_name": True}


class SpeakRequest(BaseModel):
    text: Optional[str] = None
