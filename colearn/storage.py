"""
Key-value document store.

Every collection (a user's courses, all gamification records, all classes, ...)
is saved as one JSON-compatible value under a logical key and rewritten as a
whole on each mutation. Repositories in the domain packages build on this.
"""

import copy
import json
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pymongo import ASCENDING

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class DocumentStore:
    """Interface shared by the memory and MongoDB stores"""

    async def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    async def put(self, key: str, value: Any) -> None:
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        return None


class MemoryDocumentStore(DocumentStore):
    """In-process store; values are copied so callers never share state with it"""

    def __init__(self):
        self._data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def put(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def put_raw(self, key: str, raw: str) -> None:
        """Write an unparsed value (used to simulate corrupt entries)"""
        self._data[key] = raw


class MongoDocumentStore(DocumentStore):
    """MongoDB-backed store: one document per key in the kv_store collection"""

    def __init__(self, db: AsyncIOMotorDatabase, client: Optional[AsyncIOMotorClient] = None):
        self.db = db
        self.client = client
        self.collection = db.kv_store

    @classmethod
    def connect(cls, mongo_url: str, db_name: str) -> "MongoDocumentStore":
        client = AsyncIOMotorClient(mongo_url)
        return cls(client[db_name], client)

    async def create_indexes(self) -> None:
        await self.collection.create_index([("key", ASCENDING)], unique=True)
        logger.info("kv_store indexes created")

    async def get(self, key: str) -> Optional[Any]:
        doc = await self.collection.find_one({"key": key})
        if not doc:
            return None
        return copy.deepcopy(doc.get("value"))

    async def put(self, key: str, value: Any) -> None:
        await self.collection.update_one(
            {"key": key},
            {"$set": {"key": key, "value": value}},
            upsert=True,
        )

    async def delete(self, key: str) -> None:
        await self.collection.delete_one({"key": key})

    async def close(self) -> None:
        if self.client:
            self.client.close()


def create_store(backend: str, mongo_url: str, db_name: str) -> DocumentStore:
    if backend == "mongo":
        logger.info("Using MongoDB document store (%s)", db_name)
        return MongoDocumentStore.connect(mongo_url, db_name)
    logger.info("Using in-memory document store")
    return MemoryDocumentStore()


class CollectionRepository:
    """
    Base for repositories holding a list of records under one key.
    Missing or unreadable values load as an empty collection.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def _load_list(self, key: str) -> list:
        try:
            value = await self.store.get(key)
        except (ValueError, TypeError) as e:
            logger.warning("Corrupt value under %s, treating as empty: %s", key, e)
            return []
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("Unexpected value type under %s, treating as empty", key)
            return []
        return value

    async def _load_models(self, key: str, model: Type[ModelT]) -> List[ModelT]:
        records = []
        for item in await self._load_list(key):
            try:
                records.append(model.model_validate(item))
            except PydanticValidationError as e:
                logger.warning("Skipping malformed %s record under %s: %s", model.__name__, key, e)
        return records

    async def _save_list(self, key: str, items: list) -> None:
        await self.store.put(key, items)

    async def _save_models(self, key: str, records: List[BaseModel]) -> None:
        await self._save_list(key, [record.model_dump(mode="json") for record in records])
