# async mongodb storage for the backend api
# uses motor for non-blocking operations, falls back to in-memory storage
# when no uri is configured or the server cannot be reached at startup

import logging
from typing import Any, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from friendai.config import settings
from friendai.errors import ConflictError, InternalError
from friendai.services.memory_store import MemoryStorage
from friendai.services.storage import ENTITIES, Query, Repository, Sort, Storage, T

logger = logging.getLogger(__name__)


def to_object_id(value: str) -> Optional[ObjectId]:
    """convert a string id to an objectid, None if malformed"""
    if isinstance(value, ObjectId):
        return value
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def translate_filter(query: Query) -> Optional[dict[str, Any]]:
    """render a query as a mongodb filter. None means nothing can match
    (the id is not a valid objectid)."""
    f = query.to_filter()
    if "id" in f:
        oid = to_object_id(f.pop("id"))
        if oid is None:
            return None
        f["_id"] = oid
    return f


class MongoRepository(Repository[T]):
    """one entity collection in mongodb, converting _id to a string id"""

    def __init__(self, name, model, query_type, collection: AsyncIOMotorCollection):
        super().__init__(name, model, query_type)
        self.collection = collection

    def _to_model(self, doc: dict[str, Any]) -> T:
        doc["id"] = str(doc.pop("_id"))
        return self.model.model_validate(doc)

    async def find_one(self, query: Query) -> Optional[T]:
        self._check(query)
        f = translate_filter(query)
        if f is None:
            return None
        doc = await self.collection.find_one(f)
        return self._to_model(doc) if doc else None

    async def find_many(self, query: Query, sort: Optional[Sort] = None) -> list[T]:
        self._check(query, sort)
        f = translate_filter(query)
        if f is None:
            return []
        cursor = self.collection.find(f)
        if sort is not None:
            cursor = cursor.sort(sort.field, -1 if sort.descending else 1)
        records = []
        async for doc in cursor:
            records.append(self._to_model(doc))
        return records

    async def count(self, query: Query) -> int:
        self._check(query)
        f = translate_filter(query)
        if f is None:
            return 0
        return await self.collection.count_documents(f)

    async def create(self, data: dict[str, Any]) -> T:
        doc = {k: v for k, v in data.items() if k != "id"}
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError as e:
            raise ConflictError(f"Duplicate {self.name} record") from e
        doc["_id"] = result.inserted_id
        return self._to_model(doc)

    async def update(self, id: str, changes: dict[str, Any]) -> Optional[T]:
        oid = to_object_id(id)
        if oid is None:
            return None
        changes = {k: v for k, v in changes.items() if k != "id"}
        if not changes:
            doc = await self.collection.find_one({"_id": oid})
        else:
            doc = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        return self._to_model(doc) if doc else None

    async def delete(self, query: Query) -> int:
        self._check(query)
        f = translate_filter(query)
        if f is None:
            return 0
        result = await self.collection.delete_one(f)
        return result.deleted_count


class MongoStorage(Storage):
    """mongodb-backed storage, one collection per entity"""

    backend = "mongodb"

    def __init__(self, client: AsyncIOMotorClient, database: str):
        self.client = client
        db = client[database]
        repos = {
            name: MongoRepository(name, model, query_type, db[name])
            for name, (model, query_type) in ENTITIES.items()
        }
        super().__init__(**repos)

    @classmethod
    async def connect(cls, uri: str, database: str, timeout_ms: int) -> "MongoStorage":
        """establish connection to mongodb, raises if the server is unreachable"""
        logger.info(f"Connecting to MongoDB database: {database}")
        client = AsyncIOMotorClient(uri, serverSelectionTimeoutMS=timeout_ms, tz_aware=True)
        try:
            # verify connection
            await client.admin.command("ping")
        except Exception:
            client.close()
            raise
        storage = cls(client, database)
        await storage.ensure_indexes()
        logger.info("MongoDB connection established")
        return storage

    async def ensure_indexes(self):
        await self.users.collection.create_index("email", unique=True)
        for name in ("journal_entries", "tasks", "goals", "habits"):
            await getattr(self, name).collection.create_index([("user_id", 1), ("created_at", -1)])
        await self.tasks.collection.create_index([("user_id", 1), ("due_date", 1)])
        await self.goals.collection.create_index([("user_id", 1), ("status", 1)])
        await self.habits.collection.create_index([("user_id", 1), ("active", 1)])

    async def close(self):
        """close mongodb connection"""
        self.client.close()
        logger.info("MongoDB connection closed")


async def open_storage() -> Storage:
    """pick the storage backend once at startup. never fails: an unreachable
    or unconfigured mongodb degrades to in-memory storage."""
    if settings.MONGODB_URI:
        try:
            return await MongoStorage.connect(
                settings.MONGODB_URI,
                settings.MONGODB_DATABASE,
                settings.MONGODB_CONNECT_TIMEOUT_MS,
            )
        except Exception as e:
            logger.warning(f"MongoDB unavailable, falling back to in-memory storage: {e}")
    else:
        logger.warning("MONGODB_URI not set, using in-memory storage")
    return MemoryStorage()


# storage selected at startup
_storage: Optional[Storage] = None


def install_storage(storage: Optional[Storage]) -> None:
    global _storage
    _storage = storage


async def get_storage() -> Storage:
    """dependency injection for storage access"""
    if _storage is None:
        raise InternalError("Storage not initialized")
    return _storage
