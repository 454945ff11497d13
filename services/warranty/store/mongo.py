"""
MongoDB Record Store.

Motor-backed implementation of the record store. Uniqueness is enforced
by the partial unique indexes created in ``MongoDBClient.create_indexes``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError

from services.warranty.store.base import DuplicateKeyError
from shared.logging import get_logger


logger = get_logger(__name__)


class _NoMatch(Exception):
    """Filter references an id that cannot exist."""


def _object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise _NoMatch


def _translate(filter: dict[str, Any]) -> dict[str, Any]:
    query: dict[str, Any] = {}
    for key, value in filter.items():
        if key == "$or":
            query["$or"] = [_translate(sub) for sub in value]
        elif key == "id":
            query["_id"] = _object_id(value)
        else:
            query[key] = value
    return query


def _from_mongo(doc: dict[str, Any] | None) -> dict[str, Any] | None:
    if doc is None:
        return None
    doc["id"] = str(doc.pop("_id"))
    return doc


class MongoRecordStore:
    """Record store backed by a Motor database."""

    def __init__(self, database: AsyncIOMotorDatabase) -> None:  # type: ignore[type-arg]
        self._db = database

    async def insert_one(self, collection: str, document: dict[str, Any]) -> str:
        now = datetime.now(UTC)
        doc = {"created_at": now, "updated_at": now, **document}
        doc.pop("id", None)
        try:
            result = await self._db[collection].insert_one(doc)
        except MongoDuplicateKeyError as e:
            key_pattern = (e.details or {}).get("keyPattern") or {}
            field = next(iter(key_pattern), None)
            logger.warning("mongodb_duplicate_key", collection=collection, field=field)
            raise DuplicateKeyError(collection, field) from e
        return str(result.inserted_id)

    async def find_one(
        self,
        collection: str,
        filter: dict[str, Any],
    ) -> dict[str, Any] | None:
        try:
            query = _translate(filter)
        except _NoMatch:
            return None
        return _from_mongo(await self._db[collection].find_one(query))

    async def find_many(
        self,
        collection: str,
        filter: dict[str, Any],
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        try:
            query = _translate(filter)
        except _NoMatch:
            return []
        cursor = self._db[collection].find(query).sort("_id", 1)
        docs = await cursor.to_list(limit)
        return [_from_mongo(doc) for doc in docs]  # type: ignore[misc]

    async def update_one(
        self,
        collection: str,
        filter: dict[str, Any],
        values: dict[str, Any],
    ) -> bool:
        try:
            query = _translate(filter)
        except _NoMatch:
            return False
        result = await self._db[collection].update_one(
            query,
            {"$set": {**values, "updated_at": datetime.now(UTC)}},
        )
        return result.matched_count == 1

    async def increment(
        self,
        collection: str,
        filter: dict[str, Any],
        field: str,
        amount: int = 1,
        below_field: str | None = None,
    ) -> bool:
        try:
            query = _translate(filter)
        except _NoMatch:
            return False
        if below_field is not None:
            query["$expr"] = {"$lt": [f"${field}", f"${below_field}"]}
        updated = await self._db[collection].find_one_and_update(
            query,
            {"$inc": {field: amount}, "$set": {"updated_at": datetime.now(UTC)}},
            return_document=ReturnDocument.AFTER,
        )
        return updated is not None
