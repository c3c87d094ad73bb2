# storage contract: closed query types, repository interface, storage container
# mongodb (services/db.py) and in-memory (services/memory_store.py) implement it,
# the backend is chosen once at startup and nothing downstream branches on it

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, Optional, TypeVar

from pydantic import BaseModel

from friendai.models.goal import Goal
from friendai.models.habit import Habit
from friendai.models.journal import JournalEntry
from friendai.models.task import Task
from friendai.models.user import UserRecord

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


# queries

class Query(BaseModel):
    """filter over one collection. unknown fields are rejected at construction.

    to_filter() renders the set fields as a mongodb-style filter keyed by the
    stored field name. the identifier stays under "id": each backend converts
    it to its native form.
    """

    SORTABLE: ClassVar[frozenset[str]] = frozenset({"created_at", "updated_at"})

    id: Optional[str] = None

    model_config = {"extra": "forbid", "frozen": True}

    def to_filter(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class UserQuery(Query):
    email: Optional[str] = None


class JournalQuery(Query):
    user_id: Optional[str] = None
    transcription_prefix: Optional[str] = None
    # True: mood_score is not null, False: mood_score is null
    has_mood: Optional[bool] = None

    def to_filter(self) -> dict[str, Any]:
        f: dict[str, Any] = {}
        if self.id is not None:
            f["id"] = self.id
        if self.user_id is not None:
            f["user_id"] = self.user_id
        if self.transcription_prefix is not None:
            f["transcription"] = {"$regex": "^" + re.escape(self.transcription_prefix)}
        if self.has_mood is not None:
            f["mood_score"] = {"$ne": None} if self.has_mood else None
        return f


class TaskQuery(Query):
    SORTABLE: ClassVar[frozenset[str]] = frozenset({"created_at", "updated_at", "due_date", "priority", "title"})

    user_id: Optional[str] = None
    completed: Optional[bool] = None


class GoalQuery(Query):
    SORTABLE: ClassVar[frozenset[str]] = frozenset({"created_at", "updated_at", "target_date", "progress", "title"})

    user_id: Optional[str] = None
    status: Optional[str] = None


class HabitQuery(Query):
    SORTABLE: ClassVar[frozenset[str]] = frozenset({"created_at", "updated_at", "name"})

    user_id: Optional[str] = None
    active: Optional[bool] = None


class Sort(BaseModel):
    """single-key sort"""
    field: str
    descending: bool = False

    model_config = {"frozen": True}


def match_filter(doc: dict, query: dict) -> bool:
    """evaluate a filter produced by Query.to_filter() against a plain document"""
    for key, value in query.items():
        doc_val = doc.get(key)
        if isinstance(value, dict):
            if "$regex" in value:
                if doc_val is None or not re.search(value["$regex"], str(doc_val)):
                    return False
            if "$ne" in value and doc_val == value["$ne"]:
                return False
        elif doc_val != value:
            return False
    return True


# repositories

class Repository(ABC, Generic[T]):
    """crud over one entity collection, returning typed records"""

    def __init__(self, name: str, model: type[T], query_type: type[Query]):
        self.name = name
        self.model = model
        self.query_type = query_type

    def _check(self, query: Query, sort: Optional[Sort] = None) -> None:
        if not isinstance(query, self.query_type):
            raise TypeError(f"{self.name} expects {self.query_type.__name__}, got {type(query).__name__}")
        if sort is not None and sort.field not in self.query_type.SORTABLE:
            raise ValueError(f"{self.name} cannot be sorted by {sort.field!r}")

    @abstractmethod
    async def find_one(self, query: Query) -> Optional[T]:
        ...

    @abstractmethod
    async def find_many(self, query: Query, sort: Optional[Sort] = None) -> list[T]:
        ...

    @abstractmethod
    async def count(self, query: Query) -> int:
        ...

    @abstractmethod
    async def create(self, data: dict[str, Any]) -> T:
        ...

    @abstractmethod
    async def update(self, id: str, changes: dict[str, Any]) -> Optional[T]:
        """apply changes to the record with this id, returns the new record or None"""

    @abstractmethod
    async def delete(self, query: Query) -> int:
        """delete at most one matching record, returns the deleted count"""


class Storage:
    """the five entity repositories behind one backend"""

    backend: str = "unknown"

    def __init__(
        self,
        users: Repository[UserRecord],
        journal_entries: Repository[JournalEntry],
        tasks: Repository[Task],
        goals: Repository[Goal],
        habits: Repository[Habit],
    ):
        self.users = users
        self.journal_entries = journal_entries
        self.tasks = tasks
        self.goals = goals
        self.habits = habits

    async def close(self) -> None:
        pass


# entity name -> (record model, query type)
ENTITIES: dict[str, tuple[type[BaseModel], type[Query]]] = {
    "users": (UserRecord, UserQuery),
    "journal_entries": (JournalEntry, JournalQuery),
    "tasks": (Task, TaskQuery),
    "goals": (Goal, GoalQuery),
    "habits": (Habit, HabitQuery),
}
